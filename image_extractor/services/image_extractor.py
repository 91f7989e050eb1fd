"""Replace remote images in a generated static site with local copies.

This module coordinates the build-time passes:
- Pages: extract image URLs from HTML, download them, rewrite the markup
- Payloads: same for the serialized page state written per route
- Site: run both passes over an already generated output directory

Downloading goes through the shared AssetDownloader, which can be injected
for testing.
"""

import time
from pathlib import Path, PurePosixPath
from typing import Iterator, List

import logfire

from image_extractor.models.asset_models import PageResult, PayloadResult, SiteSummary
from image_extractor.models.config_models import ExtractorConfig
from image_extractor.services.downloader import AssetDownloader
from image_extractor.services.rewriter import rewrite_html, rewrite_payload
from image_extractor.services.url_extractor import (
    extract_html_urls,
    extract_payload_urls,
)


class ImageExtractor:
    """Coordinate image extraction for pages, payload files and whole sites."""

    def __init__(
        self,
        config: ExtractorConfig,
        downloader: AssetDownloader | None = None,
    ):
        """Initialize the extractor.

        Args:
            config: Run configuration
            downloader: Download step (defaults to AssetDownloader over httpx)
        """
        self._config = config
        self._downloader = downloader or AssetDownloader(config)

    @property
    def config(self) -> ExtractorConfig:
        return self._config

    def prepare_output_dir(self) -> Path:
        """Create the assets directory once the generated site is in place."""
        assets_dir = self._config.assets_dir
        if not assets_dir.exists():
            assets_dir.mkdir(parents=True)
        return assets_dir

    async def process_page(self, route: str, html: str) -> PageResult:
        """Download the remote images of one page and rewrite its HTML.

        Args:
            route: Route of the generated page (for diagnostics)
            html: Rendered page markup

        Returns:
            PageResult with the rewritten HTML and per-image outcomes
        """
        urls = extract_html_urls(html, self._config.extensions)
        if not urls:
            return PageResult(route=route, html=html)

        logfire.info(
            "Replacing images with local copies",
            route=route,
            image_count=len(urls),
        )

        outcomes = await self._downloader.download_all(urls)
        html, replaced = rewrite_html(html, outcomes, self._config.path)
        return PageResult(
            route=route, html=html, outcomes=outcomes, replaced_count=replaced
        )

    async def process_payload(self, text: str) -> PayloadResult:
        """Download the remote images of a payload blob and rewrite its links."""
        urls = extract_payload_urls(text, self._config.extensions)
        if not urls:
            return PayloadResult(text=text)

        outcomes = await self._downloader.download_all(urls)
        text, replaced = rewrite_payload(
            text, outcomes, self._config.path, self._config.router_prefix
        )
        logfire.info("Replaced image links in payload", replaced_count=replaced)
        return PayloadResult(text=text, outcomes=outcomes, replaced_count=replaced)

    def payload_path_for_route(self, route: str) -> Path:
        """Location of the payload file generated for a route."""
        relative = PurePosixPath(route.strip("/"))
        return self._config.payload_root / relative / self._config.payload_filename

    async def process_payload_file(self, path: Path) -> PayloadResult | None:
        """Rewrite one payload file in place.

        Read and write failures are logged and abort this file only.

        Returns:
            PayloadResult, or None when the file could not be read or written
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logfire.error("Failed to read payload", path=str(path), error=str(e))
            return None

        result = await self.process_payload(text)
        result.path = path
        if not result.outcomes:
            return result

        try:
            path.write_text(result.text, encoding="utf-8")
        except OSError as e:
            logfire.error("Failed to write payload", path=str(path), error=str(e))
            return None
        return result

    async def process_route_payload(self, route: str) -> PayloadResult | None:
        return await self.process_payload_file(self.payload_path_for_route(route))

    async def process_site(self) -> SiteSummary:
        """Rewrite every generated page and payload file under the output dir.

        Returns:
            SiteSummary with counts and the downloads that failed
        """
        start_time = time.time()
        summary = SiteSummary()
        self.prepare_output_dir()

        for html_path in self.iter_html_files():
            route = self.route_for_html_file(html_path)
            try:
                html = html_path.read_text(encoding="utf-8")
            except OSError as e:
                logfire.error("Failed to read page", path=str(html_path), error=str(e))
                continue

            result = await self.process_page(route, html)
            summary.pages_processed += 1
            summary.record(result.outcomes, result.replaced_count)
            if result.replaced_count:
                try:
                    html_path.write_text(result.html, encoding="utf-8")
                except OSError as e:
                    logfire.error(
                        "Failed to write page", path=str(html_path), error=str(e)
                    )

        for payload_path in self.iter_payload_files():
            payload = await self.process_payload_file(payload_path)
            if payload is None:
                continue
            summary.payloads_processed += 1
            summary.record(payload.outcomes, payload.replaced_count)

        logfire.info(
            "Site image extraction completed",
            output_dir=str(self._config.output_dir),
            pages_processed=summary.pages_processed,
            payloads_processed=summary.payloads_processed,
            images_downloaded=summary.images_downloaded,
            links_replaced=summary.links_replaced,
            failure_count=len(summary.failures),
            total_time_ms=(time.time() - start_time) * 1000,
        )
        return summary

    def iter_html_files(self) -> Iterator[Path]:
        """Generated HTML files, skipping the downloaded assets directory."""
        assets_dir = self._config.assets_dir
        for path in sorted(self._config.output_dir.rglob("*.html")):
            if assets_dir != self._config.output_dir and assets_dir in path.parents:
                continue
            yield path

    def iter_payload_files(self) -> List[Path]:
        payload_root = self._config.payload_root
        if not payload_root.is_dir():
            return []
        return sorted(payload_root.rglob(self._config.payload_filename))

    def route_for_html_file(self, path: Path) -> str:
        """Map ``about/index.html`` to ``/about`` and ``index.html`` to ``/``."""
        relative = path.relative_to(self._config.output_dir).with_suffix("")
        parts = list(relative.parts)
        if parts and parts[-1] == "index":
            parts.pop()
        return "/" + "/".join(parts)
