"""Tool configuration loaded from environment variables."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Layouts shipped by the Minimal Mistakes theme.
DEFAULT_KNOWN_LAYOUTS: tuple[str, ...] = (
    "archive",
    "archive-taxonomy",
    "categories",
    "category",
    "collection",
    "compress",
    "default",
    "home",
    "posts",
    "search",
    "single",
    "splash",
    "tag",
    "tags",
)


class Settings(BaseSettings):
    """Site model settings."""

    model_config = SettingsConfigDict(
        env_prefix="SITEMODEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    site_dir: Path = Path(".")
    config_file: str = "_config.yml"
    timezone: str = "UTC"
    debug: bool = False

    # Validation
    known_layouts: list[str] = Field(default_factory=lambda: list(DEFAULT_KNOWN_LAYOUTS))
    check_layouts: bool = True
    strict: bool = False


def configure_logging(debug: bool) -> None:
    """Configure application logging."""
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stderr,
        force=True,
    )
