"""Extraction, naming, download and rewrite services."""

from image_extractor.services.downloader import AssetDownloader
from image_extractor.services.errors import (
    ImageExtractorError,
    ImageFetchError,
    InvalidImageUrlError,
)
from image_extractor.services.image_extractor import ImageExtractor

__all__ = [
    "AssetDownloader",
    "ImageExtractor",
    "ImageExtractorError",
    "ImageFetchError",
    "InvalidImageUrlError",
]
