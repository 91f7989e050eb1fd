"""Substitute remote image URLs with local paths.

Rewriting is a pure fold: (search, replacement) pairs are collected for the
downloads, then applied to the original text in a single scan. At each
position the longest search string wins, so a URL never clobbers a longer
URL it is a prefix of. Literals of failed downloads map to themselves, which
keeps them intact even when a shorter search string is their prefix.
"""

import re
from typing import Dict, Iterable, Tuple
from urllib.parse import unquote

from image_extractor.models.asset_models import DownloadOutcome, RemoteImageUrl
from image_extractor.services.encoding import encode_payload_path


def apply_replacements(text: str, replacements: Dict[str, str]) -> Tuple[str, int]:
    """Replace every occurrence of each key with its value in one scan.

    Keys mapped to themselves are matched (and so shield the text they
    cover) but not counted.

    Returns:
        Tuple of (rewritten_text, number_of_occurrences_replaced)
    """
    searches = sorted((s for s in replacements if s), key=len, reverse=True)
    if not searches:
        return text, 0

    pattern = re.compile("|".join(re.escape(search) for search in searches))
    count = 0

    def substitute(match: re.Match[str]) -> str:
        nonlocal count
        found = match.group(0)
        replacement = replacements[found]
        if replacement != found:
            count += 1
        return replacement

    return pattern.sub(substitute, text), count


def html_replacements(
    downloads: Iterable[DownloadOutcome], public_path: str
) -> Dict[str, str]:
    """Quoted href and quoted literal spellings mapped to the quoted local path."""
    replacements: Dict[str, str] = {}
    for outcome in downloads:
        if not outcome.ok:
            continue
        local = f'"{public_path}/{outcome.local_name}"'
        for search in (outcome.url.href, *outcome.url.literals):
            replacements.setdefault(f'"{search}"', local)
    return replacements


def rewrite_html(
    markup: str, downloads: Iterable[DownloadOutcome], public_path: str
) -> Tuple[str, int]:
    """Point quoted remote image URLs in HTML at their downloaded copies.

    Failed downloads are left untouched so the page keeps its remote URL.
    """
    return apply_replacements(markup, html_replacements(downloads, public_path))


def payload_remote_form(url: RemoteImageUrl) -> str:
    """The escaped spelling payload text uses for a plain URL."""
    return encode_payload_path(unquote(url.href))


def payload_replacements(
    downloads: Iterable[DownloadOutcome], public_path: str, router_prefix: str = ""
) -> Dict[str, str]:
    """Escaped remote spellings mapped to the escaped local path.

    Matched literals come first. Computed spellings are added afterwards and
    only for URLs without query or fragment, since dropping those parts would
    make the spelling match other variants of the same path.
    """
    downloads = list(downloads)
    prefix = encode_payload_path(f"{router_prefix}{public_path}/")
    replacements: Dict[str, str] = {}

    for outcome in downloads:
        for literal in outcome.url.literals:
            if outcome.ok:
                replacements[literal] = prefix + outcome.local_name
            else:
                replacements.setdefault(literal, literal)

    for outcome in downloads:
        url = outcome.url
        if outcome.ok and not url.query and not url.fragment:
            replacements.setdefault(
                payload_remote_form(url), prefix + outcome.local_name
            )
    return replacements


def rewrite_payload(
    text: str,
    downloads: Iterable[DownloadOutcome],
    public_path: str,
    router_prefix: str = "",
) -> Tuple[str, int]:
    """Point escaped remote image URLs in a payload at their downloaded copies.

    Failed downloads are left untouched.

    Returns:
        Tuple of (rewritten_text, number_of_links_replaced)
    """
    return apply_replacements(
        text, payload_replacements(downloads, public_path, router_prefix)
    )
