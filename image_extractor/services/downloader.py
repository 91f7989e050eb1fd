"""Shared download-and-name step used by the HTML and payload pipelines."""

import asyncio
from dataclasses import replace
from typing import Iterable, List

import logfire

from image_extractor.models.asset_models import DownloadOutcome, RemoteImageUrl
from image_extractor.models.config_models import ExtractorConfig
from image_extractor.services.errors import ImageFetchError
from image_extractor.services.fetcher import HttpxImageFetcher, ImageFetcher
from image_extractor.services.naming import local_asset_name


class AssetDownloader:
    """Download remote images into the assets directory under derived names.

    Every URL is fetched independently; a failure is logged and returned as
    a failed outcome so the other downloads and their rewrites proceed.

    By default each call fetches again, so an image referenced by both a
    page and its payload is downloaded twice. With ``reuse_downloads`` the
    first fetch of an href is shared by every later request in the run.
    """

    def __init__(self, config: ExtractorConfig, fetcher: ImageFetcher | None = None):
        self._config = config
        self._fetcher = fetcher or HttpxImageFetcher(timeout=config.http_timeout_seconds)
        self._downloads: dict[str, asyncio.Future[DownloadOutcome]] = {}

    def local_name(self, url: RemoteImageUrl) -> str:
        return local_asset_name(url, query_hash=self._config.query_hash_suffix)

    async def download(self, url: RemoteImageUrl) -> DownloadOutcome:
        """Download one image, sharing an earlier fetch when reuse is enabled."""
        if not self._config.reuse_downloads:
            return await self._download(url)

        pending = self._downloads.get(url.href)
        if pending is None:
            pending = asyncio.ensure_future(self._download(url))
            self._downloads[url.href] = pending
        outcome = await pending
        # Keep the caller's literals; they differ between HTML and payload text
        return replace(outcome, url=url)

    async def download_all(self, urls: Iterable[RemoteImageUrl]) -> List[DownloadOutcome]:
        """Download every URL concurrently and wait for all of them to settle."""
        return list(await asyncio.gather(*(self.download(url) for url in urls)))

    async def _download(self, url: RemoteImageUrl) -> DownloadOutcome:
        name = self.local_name(url)
        destination = self._config.assets_dir / name
        try:
            await self._fetcher.fetch(url.href, destination)
        except ImageFetchError as e:
            logfire.error(
                "Failed to fetch image",
                url=url.href,
                status_code=e.status_code,
                error=e.reason,
            )
            return DownloadOutcome(
                url=url, local_name=name, destination=destination, error=str(e)
            )
        return DownloadOutcome(url=url, local_name=name, destination=destination)
