"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Configuration: extractor_config (rooted in a temporary site directory)
2. Mock Services: mock_fetcher, downloader, extractor
3. Infrastructure: respx_mock, logfire_capture
4. Sample Data: sample_html, sample_payload
"""

import os
import pytest
from unittest.mock import AsyncMock, patch

try:
    import respx
except ImportError:
    respx = None

try:
    import logfire
except ImportError:
    logfire = None

from image_extractor.models.config_models import ExtractorConfig
from image_extractor.services.downloader import AssetDownloader
from image_extractor.services.fetcher import HttpxImageFetcher
from image_extractor.services.image_extractor import ImageExtractor

# Suppress warnings when logfire isn't configured during tests
if logfire is not None:
    os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    if respx is None:
        pytest.skip("respx not available")
    with respx.mock:
        yield respx


@pytest.fixture
def site_dir(tmp_path):
    """Empty generated-site root."""
    site = tmp_path / "dist"
    site.mkdir()
    return site


@pytest.fixture
def extractor_config(site_dir):
    """Default configuration rooted at the temporary site directory."""
    config = ExtractorConfig(output_dir=site_dir)
    config.assets_dir.mkdir(parents=True, exist_ok=True)
    return config


@pytest.fixture
def mock_fetcher():
    """Mock image fetcher whose downloads always succeed without touching disk."""
    fetcher = AsyncMock(spec=HttpxImageFetcher)
    fetcher.fetch = AsyncMock(return_value=None)
    return fetcher


@pytest.fixture
def downloader(extractor_config, mock_fetcher):
    """AssetDownloader backed by the mock fetcher."""
    return AssetDownloader(extractor_config, fetcher=mock_fetcher)


@pytest.fixture
def extractor(extractor_config, downloader):
    """ImageExtractor backed by the mock fetcher."""
    return ImageExtractor(extractor_config, downloader=downloader)


@pytest.fixture
def sample_html():
    """Rendered page with two remote images, an SVG namespace and a local image."""
    return (
        "<html><body>"
        '<img src="https://cdn.example.com/uploads/hero.jpg" alt="Hero">'
        '<svg xmlns="http://www.w3.org/2000/svg"></svg>'
        '<img src="https://cdn.example.com/uploads/team.png?w=640">'
        '<img src="/static/local.png">'
        "</body></html>"
    )


@pytest.fixture
def sample_payload():
    """Serialized page state referencing one image with escaped slashes."""
    cover = "https://cdn.example.com/uploads/hero.jpg".replace("/", "\\u002F")
    return (
        "__NUXT_JSONP__(\"/about\", {data:[{title:\"About\","
        f'cover:"{cover}"'
        "}]});"
    )


@pytest.fixture
def logfire_capture():
    """
    Capture Logfire logs for testing.

    This fixture patches Logfire to capture log calls for assertion.
    """
    if logfire is None:
        pytest.skip("logfire not available")

    captured_logs = []

    original_info = logfire.info
    original_warn = logfire.warn
    original_error = logfire.error

    def capture_info(*args, **kwargs):
        captured_logs.append(("info", args, kwargs))
        return original_info(*args, **kwargs)

    def capture_warn(*args, **kwargs):
        captured_logs.append(("warn", args, kwargs))
        return original_warn(*args, **kwargs)

    def capture_error(*args, **kwargs):
        captured_logs.append(("error", args, kwargs))
        return original_error(*args, **kwargs)

    with (
        patch("logfire.info", side_effect=capture_info),
        patch("logfire.warn", side_effect=capture_warn),
        patch("logfire.error", side_effect=capture_error),
    ):
        yield captured_logs
