"""Exceptions raised by the extractor services."""


class ImageExtractorError(Exception):
    """Base exception for image extractor errors."""

    pass


class InvalidImageUrlError(ImageExtractorError):
    """Raised when a matched literal does not form a usable remote URL."""

    def __init__(self, literal: str, reason: str):
        super().__init__(f"Invalid image URL {literal!r}: {reason}")
        self.literal = literal
        self.reason = reason


class ImageFetchError(ImageExtractorError):
    """Raised when a remote image cannot be downloaded to disk."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code
