"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire

from image_extractor.config import Settings, get_settings


def setup_logfire(settings: Settings | None = None) -> None:
    """
    Initialize and configure Pydantic Logfire for build diagnostics.

    Sets up:
    - Logfire export only when a token is configured
    - Pydantic instrumentation (config model validation logging)
    - Environment-aware stdlib logging format
    """
    settings = settings or get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        "send_to_logfire": "if-token-present",
    }

    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token

    logfire.configure(**logfire_config)
    logfire.instrument_pydantic()

    log_level = settings.log_level.upper()

    if settings.env == "local":
        # Local: Console formatting for development
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # CI / production builds: Logfire handles structured formatting
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(message)s",
        )
