"""
Build configuration persistence layer.

Handles reading and writing tokenweave.yaml in the project root.

Default location: {project_root}/tokenweave.yaml
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .ir.config import BuildConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "tokenweave.yaml"


# =============================================================================
# Path helpers
# =============================================================================


def get_config_path(project_root: Path) -> Path:
    """Get the tokenweave.yaml file path."""
    return project_root / CONFIG_FILE


def config_exists(project_root: Path) -> bool:
    """Check if a tokenweave.yaml exists in the project."""
    return get_config_path(project_root).exists()


# =============================================================================
# Loading
# =============================================================================


def load_config(
    project_root: Path,
    *,
    config_path: Path | None = None,
    use_defaults: bool = True,
) -> BuildConfig:
    """Load the build configuration.

    Args:
        project_root: Project root directory.
        config_path: Explicit config file (defaults to {project_root}/tokenweave.yaml).
        use_defaults: If True, return the default config when the file doesn't exist.

    Returns:
        BuildConfig instance.

    Raises:
        ConfigError: If the file is missing (when use_defaults=False) or invalid.
    """
    path = config_path or get_config_path(project_root)

    if not path.exists():
        if use_defaults:
            logger.debug(f"No {CONFIG_FILE} found at {path}, using defaults")
            return BuildConfig()
        raise ConfigError(f"Config not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not data:
        logger.warning(f"Empty {path}, using defaults")
        return BuildConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}")

    try:
        return BuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config schema in {path}: {e}") from e


def save_config(project_root: Path, config: BuildConfig) -> Path:
    """Save the build configuration to tokenweave.yaml.

    Returns:
        Path to the saved file.
    """
    path = get_config_path(project_root)
    data = config.model_dump(mode="json", exclude_none=True)
    path.write_text(
        yaml.dump(
            data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    logger.info(f"Saved config to {path}")
    return path


# =============================================================================
# Scaffolding
# =============================================================================


def scaffold_config(project_root: Path, *, overwrite: bool = False) -> Path | None:
    """Create a default tokenweave.yaml file.

    Args:
        project_root: Project root directory.
        overwrite: If True, overwrite an existing file.

    Returns:
        Path to created file, or None if skipped.
    """
    path = get_config_path(project_root)
    if path.exists() and not overwrite:
        logger.debug(f"Skipping existing config: {path}")
        return None
    return save_config(project_root, BuildConfig())
