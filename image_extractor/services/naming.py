"""Derive deterministic, filesystem-safe local names for remote images."""

import hashlib
import re
import unicodedata
from urllib.parse import unquote

from image_extractor.constants import (
    FALLBACK_ASSET_SLUG,
    QUERY_HASH_LENGTH,
    SEARCH_PARAMS_MARKER,
)
from image_extractor.models.asset_models import RemoteImageUrl

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]+")
_REPEATED_HYPHENS = re.compile(r"--+")
_EXTENSION = re.compile(r"\w+")


def slugify(text: str) -> str:
    """Lowercase, strip accents and collapse everything but word characters to hyphens.

    Only the first ``/`` is removed outright (the leading slash of a URL
    path); later slashes become hyphens like any other punctuation.
    """
    text = unicodedata.normalize("NFD", str(text).lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch)).strip()
    text = text.replace("/", "", 1)
    text = _WHITESPACE.sub("-", text)
    text = _NON_WORD.sub("-", text)
    return _REPEATED_HYPHENS.sub("-", text)


def name_source(url: RemoteImageUrl) -> str:
    """Decoded path plus fragment, the text a local name is built from."""
    source = url.path + (f"#{url.fragment}" if url.fragment else "")
    return unquote(source)


def split_extension(source: str) -> tuple[str, str]:
    """Split ``source`` at its last dot into (stem, lowercase extension).

    A dot that belongs to a directory name does not start an extension.
    Text after the extension's word characters (usually a fragment) stays
    on the stem so it still reaches the local name.
    """
    stem, dot, ext = source.rpartition(".")
    if not dot or "/" in ext:
        return source, ""
    match = _EXTENSION.match(ext)
    if match is None:
        return source, ""
    return stem + ext[match.end():], match.group(0).lower()


def local_asset_name(url: RemoteImageUrl, query_hash: bool = False) -> str:
    """Build the local file name for a remote image.

    Format: ``<slug>[-searchparams<query-slug>][-<hash>].<ext>``, where the
    slug covers path and fragment. The same href always yields the same
    name, and different query strings or fragments on the same path yield
    different names (unless they slugify identically; ``query_hash``
    disambiguates such queries).
    """
    stem, ext = split_extension(name_source(url))
    name = slugify(stem).strip("-") or FALLBACK_ASSET_SLUG

    if url.query:
        name += SEARCH_PARAMS_MARKER + slugify("?" + unquote(url.query)).rstrip("-")
        if query_hash:
            digest = hashlib.sha1(url.query.encode("utf-8")).hexdigest()
            name += "-" + digest[:QUERY_HASH_LENGTH]

    return f"{name}.{ext}" if ext else name
