"""FastAPI dependency injection."""

from __future__ import annotations

from decimal import Context

from svgbake.config import Settings, settings


def get_settings() -> Settings:
    return settings


def get_numeric_context() -> Context:
    """A fresh decimal context per request at the configured precision."""
    return settings.engine_config().context()
