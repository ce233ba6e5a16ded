"""Configuration loaded from .revisioning.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from revisioning.content.container import DEFAULT_DATE_FORMAT

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".revisioning.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG = Path.home() / ".config" / "revisioning" / "config.toml"

_TRUE_VALUES = ("true", "1", "yes")


class ProjectionConfig(BaseModel):
    """[projection] section."""

    date_format: str = DEFAULT_DATE_FORMAT


class HistoryConfig(BaseModel):
    """[history] section."""

    # Off keeps the first computed last saved draft for the instance lifetime.
    invalidate_draft_cache: bool = False


class LoggingConfig(BaseModel):
    """[logging] section."""

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


class RevisioningConfig(BaseModel):
    """Top-level configuration model."""

    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def container_options(self) -> dict[str, Any]:
        """Keyword arguments for Container construction and loading."""
        return {
            "invalidate_draft_cache": self.history.invalidate_draft_cache,
            "date_format": self.projection.date_format,
        }


def load_config(path: str | Path | None = None) -> RevisioningConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .revisioning.toml in CWD
    3. ~/.config/revisioning/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged RevisioningConfig.
    """
    data: dict[str, Any] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG.exists():
            data = _load_toml(GLOBAL_CONFIG)
            logger.info("Loaded config from %s", GLOBAL_CONFIG)

    config = RevisioningConfig.model_validate(data) if data else RevisioningConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: RevisioningConfig, **cli_kwargs: object) -> RevisioningConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "date_format": ("projection", "date_format"),
        "invalidate_draft_cache": ("history", "invalidate_draft_cache"),
        "log_level": ("logging", "level"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return RevisioningConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: RevisioningConfig) -> RevisioningConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    date_format = os.environ.get("REVISIONING_DATE_FORMAT")
    if date_format is not None:
        data["projection"]["date_format"] = date_format

    invalidate_raw = os.environ.get("REVISIONING_INVALIDATE_DRAFT_CACHE")
    if invalidate_raw is not None:
        data["history"]["invalidate_draft_cache"] = invalidate_raw.lower() in _TRUE_VALUES

    log_level = os.environ.get("REVISIONING_LOG_LEVEL")
    if log_level is not None:
        data["logging"]["level"] = log_level

    return RevisioningConfig.model_validate(data)
