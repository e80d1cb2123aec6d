"""
Configuration loader — reads buildbox.yml into the config model.

This is the primary entry point for loading project configuration.
It reads YAML, validates against the Pydantic schema, and returns a
typed ``BuildboxConfig``.  The lock table lives here and is handed
explicitly to whatever needs it; nothing is cached process-wide.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from buildbox.core.errors import ConfigError
from buildbox.core.models.config import BuildboxConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "buildbox.yml"

__all__ = ["CONFIG_FILE", "ConfigError", "find_config_file", "load_config", "project_root"]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for buildbox.yml starting from the given directory, walking up.

    This allows running commands from subdirectories and still finding
    the project root.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to buildbox.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> BuildboxConfig:
    """Load and validate project configuration.

    Args:
        path: Explicit path to buildbox.yml. If None, searches upward
            and falls back to defaults when nothing is found.

    Returns:
        Validated BuildboxConfig model.

    Raises:
        ConfigError: If an explicit file is missing, or any file found
            is unreadable or invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found — using defaults", CONFIG_FILE)
            return BuildboxConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = BuildboxConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info(
        "Loaded config from %s (%d locked requirements)",
        path,
        len(config.requirement_lock),
    )
    return config


def project_root(config_path: Path | None) -> Path:
    """Get the project root directory from a config file path.

    Without a config file the working directory is the project root.
    """
    if config_path is None:
        return Path.cwd().resolve()
    return config_path.parent.resolve()
