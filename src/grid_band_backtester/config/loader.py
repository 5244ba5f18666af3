"""
Settings loader: optional YAML file plus command-line overrides, validated with Pydantic.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from grid_band_backtester.config.schemas import BacktestSettings
from grid_band_backtester.exceptions import ConfigurationError
from grid_band_backtester.logging import get_logger

logger = get_logger(__name__)


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read a YAML settings file.

    Raises:
        ConfigurationError: If the file is missing, unparsable or not a mapping
    """
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("Failed to parse YAML", path=str(path), error=str(e))
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return raw


def load_settings(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> BacktestSettings:
    """
    Build validated settings; non-None overrides take precedence over the file.

    Raises:
        ConfigurationError: If the file cannot be read or validation fails
    """
    raw: dict[str, Any] = {}
    if config_path is not None:
        raw = read_config_file(config_path)

    for key, value in (overrides or {}).items():
        if value is not None:
            raw[key] = value

    try:
        settings = BacktestSettings(**raw)
    except ValidationError as e:
        logger.error("Settings validation failed", error=str(e))
        raise ConfigurationError(f"Invalid settings: {e}") from e

    logger.debug("Settings resolved", **settings.model_dump(mode="json"))
    return settings
