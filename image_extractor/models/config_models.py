"""Immutable per-run extractor configuration."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from image_extractor.config import Settings
from image_extractor.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_IMAGE_EXTENSIONS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PAYLOAD_FILENAME,
    DEFAULT_PUBLIC_PATH,
    DEFAULT_ROUTER_BASE,
    DEFAULT_STATIC_ASSETS_DIR,
)


class ExtractorConfig(BaseModel):
    """Configuration bundle shared by every page and payload of one run."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default="", description="CMS base URL (informational)")
    path: str = Field(default=DEFAULT_PUBLIC_PATH, description="Public path prefix")
    extensions: tuple[str, ...] = Field(
        default=DEFAULT_IMAGE_EXTENSIONS, description="Recognized image extensions"
    )
    output_dir: Path = Field(default=Path(DEFAULT_OUTPUT_DIR))
    router_base: str = Field(default=DEFAULT_ROUTER_BASE)
    static_assets_dir: str = Field(default=DEFAULT_STATIC_ASSETS_DIR)
    payload_filename: str = Field(default=DEFAULT_PAYLOAD_FILENAME)
    reuse_downloads: bool = False
    query_hash_suffix: bool = False
    http_timeout_seconds: float = Field(default=DEFAULT_HTTP_TIMEOUT_SECONDS, gt=0)

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        value = "/" + value.strip().strip("/")
        return value if value != "/" else ""

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = value.replace(",", " ").split()
        normalized: list[str] = []
        for ext in value:
            ext = str(ext).strip().lstrip(".").lower()
            if ext and ext not in normalized:
                normalized.append(ext)
        if not normalized:
            raise ValueError("at least one image extension is required")
        return tuple(normalized)

    @property
    def assets_dir(self) -> Path:
        """Local directory that receives downloaded images."""
        return self.output_dir / self.path.lstrip("/")

    @property
    def router_prefix(self) -> str:
        """Router base prepended to payload links; empty for the root router."""
        return "" if self.router_base == "/" else self.router_base.rstrip("/")

    @property
    def payload_root(self) -> Path:
        return self.output_dir / self.static_assets_dir

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "ExtractorConfig":
        """Build the run configuration from settings, applying non-None overrides."""
        values: dict[str, Any] = {
            "base_url": settings.base_url,
            "path": settings.path,
            "extensions": settings.extensions,
            "output_dir": settings.output_dir,
            "router_base": settings.router_base,
            "static_assets_dir": settings.static_assets_dir,
            "payload_filename": settings.payload_filename,
            "reuse_downloads": settings.reuse_downloads,
            "query_hash_suffix": settings.query_hash_suffix,
            "http_timeout_seconds": settings.http_timeout_seconds,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
