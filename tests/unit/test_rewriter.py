"""Tests for HTML and payload rewriting."""

from pathlib import Path

from image_extractor.models.asset_models import DownloadOutcome
from image_extractor.services.naming import local_asset_name
from image_extractor.services.rewriter import (
    apply_replacements,
    payload_remote_form,
    rewrite_html,
    rewrite_payload,
)
from image_extractor.services.url_extractor import (
    extract_html_urls,
    extract_payload_urls,
    parse_remote_url,
)

SLASH = "\\u002F"


def escaped(url: str) -> str:
    return url.replace("/", SLASH)


def downloaded(url, error=None):
    name = local_asset_name(url)
    return DownloadOutcome(
        url=url, local_name=name, destination=Path("dist/assets") / name, error=error
    )


class TestApplyReplacements:
    """Test apply_replacements()."""

    def test_counts_every_occurrence(self):
        text, count = apply_replacements("a b a", {"a": "x"})
        assert text == "x b x"
        assert count == 2

    def test_longest_search_first(self):
        text, count = apply_replacements("ab abc", {"ab": "1", "abc": "2"})
        assert text == "1 2"
        assert count == 2

    def test_no_replacements(self):
        assert apply_replacements("text", {}) == ("text", 0)

    def test_identity_entry_shields_longer_text(self):
        text, count = apply_replacements(
            "a.png a.png?w=2", {"a.png": "local.png", "a.png?w=2": "a.png?w=2"}
        )
        assert text == "local.png a.png?w=2"
        assert count == 1


class TestRewriteHtml:
    """Test rewrite_html()."""

    def test_rewrites_literal_with_space(self):
        html = '<img src="http://cdn.example.com/foo bar.PNG">'
        urls = extract_html_urls(html, ["png"])

        result, count = rewrite_html(html, [downloaded(u) for u in urls], "/assets")

        assert result == '<img src="/assets/foo-bar.png">'
        assert count == 1

    def test_rewrites_every_occurrence_and_spelling(self):
        html = (
            '<img src="https://x.com/a.png">'
            '<link rel="preload" href="https://x.com/a.png">'
            '<meta content="https://x.com/a.png?">'
        )
        urls = extract_html_urls(html, ["png"])

        result, count = rewrite_html(html, [downloaded(u) for u in urls], "/assets")

        assert "https://x.com" not in result
        assert result.count('"/assets/a.png"') == 3
        assert count == 3

    def test_failed_download_left_untouched(self):
        html = '<img src="https://x.com/ok.png"><img src="https://x.com/gone.png">'
        ok, gone = extract_html_urls(html, ["png"])

        result, count = rewrite_html(
            html, [downloaded(ok), downloaded(gone, error="Status: 404")], "/assets"
        )

        assert result == '<img src="/assets/ok.png"><img src="https://x.com/gone.png">'
        assert count == 1

    def test_only_quoted_occurrences_are_replaced(self):
        html = '<img src="https://x.com/a.png"><p>see https://x.com/a.png</p>'
        urls = extract_html_urls(html, ["png"])

        result, _ = rewrite_html(html, [downloaded(u) for u in urls], "/assets")

        assert result == '<img src="/assets/a.png"><p>see https://x.com/a.png</p>'

    def test_query_variants_get_distinct_paths(self):
        html = '<img src="https://x.com/a.png?w=1"><img src="https://x.com/a.png?w=2">'
        urls = extract_html_urls(html, ["png"])

        result, _ = rewrite_html(html, [downloaded(u) for u in urls], "/img")

        assert result == (
            '<img src="/img/a-searchparams-w-1.png">'
            '<img src="/img/a-searchparams-w-2.png">'
        )


class TestRewritePayload:
    """Test rewrite_payload()."""

    def test_rewrites_escaped_url(self):
        text = f'{{image:"{escaped("http://cdn.example.com/x.jpg")}"}}'
        urls = extract_payload_urls(text, ["jpg"])

        result, count = rewrite_payload(text, [downloaded(u) for u in urls], "/assets")

        assert result == f'{{image:"{SLASH}assets{SLASH}x.jpg"}}'
        assert count == 1

    def test_router_prefix(self):
        text = f'"{escaped("http://cdn.example.com/x.jpg")}"'
        urls = extract_payload_urls(text, ["jpg"])

        result, _ = rewrite_payload(
            text, [downloaded(u) for u in urls], "/assets", router_prefix="/blog"
        )

        assert result == f'"{SLASH}blog{SLASH}assets{SLASH}x.jpg"'

    def test_public_path_is_char_encoded(self):
        text = f'"{escaped("http://cdn.example.com/x.jpg")}"'
        urls = extract_payload_urls(text, ["jpg"])

        result, _ = rewrite_payload(text, [downloaded(u) for u in urls], "/img+cdn")

        assert result == f'"{SLASH}img%2Bcdn{SLASH}x.jpg"'

    def test_longer_url_is_not_clobbered_by_prefix(self):
        plain = escaped("http://x.com/a.png")
        sized = escaped("http://x.com/a.png?w=1")
        text = f'["{plain}","{sized}"]'
        urls = extract_payload_urls(text, ["png"])

        result, count = rewrite_payload(text, [downloaded(u) for u in urls], "/assets")

        assert result == (
            f'["{SLASH}assets{SLASH}a.png",'
            f'"{SLASH}assets{SLASH}a-searchparams-w-1.png"]'
        )
        assert count == 2

    def test_query_variant_first_does_not_claim_plain_url(self):
        sized = escaped("http://x.com/a.png?w=1")
        plain = escaped("http://x.com/a.png")
        text = f'["{sized}","{plain}"]'
        urls = extract_payload_urls(text, ["png"])

        result, count = rewrite_payload(text, [downloaded(u) for u in urls], "/assets")

        assert result == (
            f'["{SLASH}assets{SLASH}a-searchparams-w-1.png",'
            f'"{SLASH}assets{SLASH}a.png"]'
        )
        assert count == 2

    def test_failed_query_variant_kept_next_to_successful_one(self):
        ok = escaped("http://x.com/a.png?w=1")
        gone = escaped("http://x.com/a.png?w=2")
        text = f'["{ok}","{gone}"]'
        ok_url, gone_url = extract_payload_urls(text, ["png"])

        result, count = rewrite_payload(
            text,
            [downloaded(ok_url), downloaded(gone_url, error="Status: 404")],
            "/assets",
        )

        assert result == f'["{SLASH}assets{SLASH}a-searchparams-w-1.png","{gone}"]'
        assert count == 1

    def test_failed_query_variant_kept_next_to_successful_plain_url(self):
        plain = escaped("http://x.com/a.png")
        gone = escaped("http://x.com/a.png?w=2")
        text = f'["{plain}","{gone}"]'
        plain_url, gone_url = extract_payload_urls(text, ["png"])

        result, count = rewrite_payload(
            text,
            [downloaded(plain_url), downloaded(gone_url, error="Status: 404")],
            "/assets",
        )

        assert result == f'["{SLASH}assets{SLASH}a.png","{gone}"]'
        assert count == 1

    def test_url_found_in_html_matches_escaped_payload(self):
        url = parse_remote_url("http://cdn.example.com/x.jpg")
        text = f'"{escaped("http://cdn.example.com/x.jpg")}"'

        result, count = rewrite_payload(text, [downloaded(url)], "/assets")

        assert result == f'"{SLASH}assets{SLASH}x.jpg"'
        assert count == 1

    def test_failed_download_left_untouched(self):
        text = f'"{escaped("http://cdn.example.com/x.jpg")}"'
        urls = extract_payload_urls(text, ["jpg"])

        result, count = rewrite_payload(
            text, [downloaded(u, error="boom") for u in urls], "/assets"
        )

        assert result == text
        assert count == 0


def test_payload_remote_form_is_decoded_and_escaped():
    url = parse_remote_url("https://x.com/my%20photo.png")
    assert payload_remote_form(url) == escaped("https://x.com/my photo.png")
