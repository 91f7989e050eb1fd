"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from image_extractor.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_IMAGE_EXTENSIONS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PAYLOAD_FILENAME,
    DEFAULT_PUBLIC_PATH,
    DEFAULT_ROUTER_BASE,
    DEFAULT_STATIC_ASSETS_DIR,
)


class Settings(BaseSettings):
    """Extractor settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        env_prefix="IMAGE_EXTRACTOR_",
        case_sensitive=False,
        extra="ignore",
    )

    # Module options
    base_url: str = Field(default="", description="CMS base URL (informational)")
    path: str = Field(
        default=DEFAULT_PUBLIC_PATH,
        description="Public path prefix for rewritten links and local subdirectory",
    )
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS),
        description="File extensions that qualify a URL as an image",
    )

    # Generated site layout
    output_dir: Path = Field(
        default=Path(DEFAULT_OUTPUT_DIR), description="Generated site root"
    )
    router_base: str = Field(
        default=DEFAULT_ROUTER_BASE,
        description="Router base path, prefixed to payload links when not '/'",
    )
    static_assets_dir: str = Field(
        default=DEFAULT_STATIC_ASSETS_DIR,
        description="Directory under output_dir that holds payload files",
    )
    payload_filename: str = Field(
        default=DEFAULT_PAYLOAD_FILENAME, description="Payload file name per route"
    )

    # Download behaviour
    reuse_downloads: bool = Field(
        default=False,
        description="Fetch each href once per run instead of once per page/payload",
    )
    query_hash_suffix: bool = Field(
        default=False,
        description="Append a short hash of the raw query string to local names",
    )
    http_timeout_seconds: float = Field(
        default=DEFAULT_HTTP_TIMEOUT_SECONDS,
        description="HTTP timeout for image downloads (seconds)",
    )

    # Environment & logging
    env: Literal["local", "ci", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token (optional)"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
