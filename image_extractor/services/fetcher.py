"""Remote image fetching.

- ImageFetcher: Protocol for writing a remote resource to a local file
- HttpxImageFetcher: httpx implementation streaming the body to disk
"""

import asyncio
from pathlib import Path
from typing import Protocol

import httpx
import logfire

from image_extractor.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DOWNLOAD_CHUNK_SIZE_BYTES,
)
from image_extractor.services.errors import ImageFetchError


class ImageFetcher(Protocol):
    """Protocol for downloading a remote image."""

    async def fetch(self, url: str, destination: Path) -> None:
        """Download url and write the body to destination.

        Args:
            url: Absolute URL to GET
            destination: File path to write (its directory must exist)

        Raises:
            ImageFetchError: On non-2xx status, transport or write failure
        """
        ...


class HttpxImageFetcher:
    """Fetch images with httpx, streaming response bodies straight to disk."""

    DEFAULT_HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
    }

    def __init__(
        self,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
    ):
        """Initialize the image fetcher.

        Args:
            timeout: HTTP timeout in seconds
            headers: Optional custom headers (defaults to browser-like headers)
        """
        self._timeout = timeout
        self._headers = headers or self.DEFAULT_HEADERS.copy()

    async def fetch(self, url: str, destination: Path) -> None:
        """Stream url into destination.

        No retry and no cleanup of a partially written file on error.

        Raises:
            ImageFetchError: On non-2xx status, transport or write failure
        """
        written = 0
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers=self._headers,
            ) as client:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        raise ImageFetchError(
                            url,
                            f"Status: {response.status_code}",
                            status_code=response.status_code,
                        )
                    # File I/O runs in worker threads to keep the event loop free
                    fh = await asyncio.to_thread(destination.open, "wb")
                    try:
                        async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE_BYTES):
                            await asyncio.to_thread(fh.write, chunk)
                            written += len(chunk)
                    finally:
                        await asyncio.to_thread(fh.close)
        except httpx.HTTPError as e:
            raise ImageFetchError(url, str(e) or type(e).__name__) from e
        except OSError as e:
            raise ImageFetchError(url, f"could not write {destination}: {e}") from e

        logfire.info(
            "Image downloaded",
            url=url,
            destination=str(destination),
            content_length=written,
        )
