"""
Config check use case — validate buildbox.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from buildbox.core.config.loader import CONFIG_FILE, ConfigError, find_config_file, load_config
from buildbox.core.models.config import BuildboxConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: BuildboxConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "locked_requirements": len(self.config.requirement_lock) if self.config else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate project configuration and report issues.

    Args:
        config_path: Optional explicit path to buildbox.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        result.errors.append(f"No {CONFIG_FILE} found.")
        return result

    result.config_path = config_path

    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Semantic checks
    root = config_path.parent
    settings = config.project

    if not (root / settings.services_path).is_dir():
        result.warnings.append(f"Services path does not exist: {settings.services_path}")

    if not (root / settings.libraries_path).is_dir():
        result.warnings.append(f"Libraries path does not exist: {settings.libraries_path}")

    if not config.requirement_lock:
        result.warnings.append("requirement_lock is empty. Any declared requirement will fail to lock.")

    for name, version in sorted(config.requirement_lock.items()):
        if not version.strip():
            result.errors.append(f"Empty version lock for requirement '{name}'")

    if not settings.cache_path.is_absolute() and settings.cache_path.parts[:1] == ("..",):
        result.warnings.append(f"Cache path lies outside the project: {settings.cache_path}")

    result.valid = len(result.errors) == 0
    return result
