"""Discover remote image URLs in generated HTML and serialized page state.

Two matching strategies share one parse-and-deduplicate step:
- HTML: URLs appear verbatim (possibly HTML-entity escaped)
- Payload: URLs appear inside JS string literals with escaped slashes
  and percent-encoded characters
"""

import html
import json
import re
from dataclasses import replace
from typing import Callable, Iterable, List, Sequence
from urllib.parse import quote, unquote, urlsplit, urlunsplit

import logfire

from image_extractor.constants import SVG_NAMESPACE_MARKER
from image_extractor.models.asset_models import RemoteImageUrl
from image_extractor.services.errors import InvalidImageUrlError

# Characters left unescaped in canonical path, query and fragment
_URL_SAFE_CHARS = "/%:@!$&'()*+,;=~"
_DEFAULT_PORTS = {"http": 80, "https": 443}
_TRAILING_BACKSLASHES = re.compile(r"\\+$")


def _extension_group(extensions: Sequence[str]) -> str:
    return "|".join(re.escape(ext) for ext in extensions)


def html_url_pattern(extensions: Sequence[str]) -> re.Pattern[str]:
    """Absolute http(s) URL whose run of URL characters reaches a known extension."""
    return re.compile(
        rf"https?:[/.\w\s%:~-]*\.(?:{_extension_group(extensions)})[^\"|\s]*",
        re.IGNORECASE,
    )


def payload_url_pattern(extensions: Sequence[str]) -> re.Pattern[str]:
    """Like :func:`html_url_pattern`, also allowing backslash escapes such as ``\\u002F``."""
    return re.compile(
        rf"https?:[/.\w\s%:~\\-]*\.(?:{_extension_group(extensions)})[^\"|\s]*",
        re.IGNORECASE,
    )


def parse_remote_url(text: str, literal: str | None = None) -> RemoteImageUrl:
    """Parse an absolute http(s) URL into its canonical form.

    Args:
        text: Decoded URL text
        literal: The substring the URL was extracted from (defaults to text)

    Returns:
        RemoteImageUrl with a canonical href

    Raises:
        InvalidImageUrlError: If the text is not an absolute http(s) URL
    """
    literal = literal if literal is not None else text
    try:
        parts = urlsplit(text.strip())
        port = parts.port
    except ValueError as e:
        raise InvalidImageUrlError(literal, str(e)) from e

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise InvalidImageUrlError(literal, f"unsupported scheme {parts.scheme!r}")
    host = parts.hostname
    if not host:
        raise InvalidImageUrlError(literal, "missing host")

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    userinfo, at, _ = parts.netloc.rpartition("@")
    if at:
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path, safe=_URL_SAFE_CHARS) or "/"
    query = quote(parts.query, safe=_URL_SAFE_CHARS + "?")
    fragment = quote(parts.fragment, safe=_URL_SAFE_CHARS + "?#")
    href = urlunsplit((scheme, netloc, path, query, fragment))

    return RemoteImageUrl(
        scheme=scheme,
        host=host,
        path=path,
        query=query,
        fragment=fragment,
        href=href,
        literals=(literal,),
    )


def decode_payload_literal(literal: str) -> str:
    """Recover the raw URL from a payload match.

    Trailing backslashes (from an escaped closing quote) are dropped, JS
    string escapes are decoded, then percent-escapes.

    Raises:
        InvalidImageUrlError: If the literal is not a valid string body
    """
    try:
        decoded = json.loads(f'"{literal}"', strict=False)
    except ValueError as e:
        raise InvalidImageUrlError(literal, f"undecodable escape sequence: {e}") from e
    return unquote(decoded)


def _unique_urls(
    literals: Iterable[str], decode: Callable[[str], str]
) -> List[RemoteImageUrl]:
    """Parse literals and deduplicate by href, keeping first-seen order."""
    found: dict[str, RemoteImageUrl] = {}
    for literal in literals:
        if SVG_NAMESPACE_MARKER in literal:
            continue
        try:
            text = decode(literal)
            if SVG_NAMESPACE_MARKER in text:
                continue
            url = parse_remote_url(text, literal)
        except InvalidImageUrlError as e:
            logfire.warn("Skipping unparseable image URL", literal=literal, reason=e.reason)
            continue

        existing = found.get(url.href)
        if existing is None:
            found[url.href] = url
        elif literal not in existing.literals:
            found[url.href] = replace(existing, literals=existing.literals + (literal,))
    return list(found.values())


def extract_html_urls(markup: str, extensions: Sequence[str]) -> List[RemoteImageUrl]:
    """Find remote image URLs in rendered HTML.

    Args:
        markup: Page HTML
        extensions: Recognized image extensions (without dots)

    Returns:
        Ordered, href-unique list of parsed URLs
    """
    matches = (m.group(0) for m in html_url_pattern(extensions).finditer(markup))
    return _unique_urls(matches, html.unescape)


def extract_payload_urls(text: str, extensions: Sequence[str]) -> List[RemoteImageUrl]:
    """Find remote image URLs in a serialized page-state blob.

    Args:
        text: Payload file content
        extensions: Recognized image extensions (without dots)

    Returns:
        Ordered, href-unique list of parsed URLs; each literal is the exact
        escaped substring present in the payload
    """
    matches = (
        _TRAILING_BACKSLASHES.sub("", m.group(0))
        for m in payload_url_pattern(extensions).finditer(text)
    )
    return _unique_urls(matches, decode_payload_literal)
