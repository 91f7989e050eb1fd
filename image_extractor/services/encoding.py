"""Text encodings used when substituting links inside serialized page state.

HTML is rewritten with raw URLs. Payload files store strings with escaped
slashes and percent-escaped punctuation, so both the text searched for and
the replacement must be expressed in that form.
"""

from urllib.parse import unquote

# "%" must stay first so escapes introduced later are not escaped again
_ESCAPED_CHARS = (
    ("%", "%25"),
    ("!", "%21"),
    ("@", "%40"),
    ("^", "%5E"),
    ("#", "%23"),
    ("$", "%24"),
    ("&", "%26"),
    ("(", "%28"),
    (")", "%29"),
    ("=", "%3D"),
    ("+", "%2B"),
    (",", "%2C"),
    (";", "%3B"),
    ("'", "%27"),
    ("[", "%5B"),
    ("{", "%7B"),
    ("]", "%5D"),
    ("}", "%7D"),
)

ESCAPED_SLASH = "\\u002F"


def encode_chars(text: str) -> str:
    """Percent-escape characters that are unsafe for literal payload matching."""
    for char, escaped in _ESCAPED_CHARS:
        text = text.replace(char, escaped)
    return text


def decode_chars(text: str) -> str:
    """Reverse :func:`encode_chars` (plain percent-decoding)."""
    return unquote(text)


def encode_slashes(text: str) -> str:
    """Replace every ``/`` with the six-character escape ``\\u002F``."""
    return text.replace("/", ESCAPED_SLASH)


def encode_payload_path(text: str) -> str:
    """Encode a URL or path the way payload files store it."""
    return encode_slashes(encode_chars(text))
