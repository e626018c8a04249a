"""
Configuration loader — reads scaffold.yml into ScaffoldSettings.

The file is optional.  Without it the built-in defaults apply and the
project root is the current working directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from endpoint_forge.core.data import DataRegistry
from endpoint_forge.core.models.settings import ScaffoldFile, ScaffoldSettings

logger = logging.getLogger(__name__)

# Default config filename
SCAFFOLD_CONFIG_FILE = "scaffold.yml"


class ConfigError(Exception):
    """Raised when scaffold configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for scaffold.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to scaffold.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SCAFFOLD_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(
    path: Path | None = None,
    registry: DataRegistry | None = None,
) -> ScaffoldSettings:
    """Build the settings for one invocation.

    Args:
        path: Explicit path to scaffold.yml.  None means built-in defaults.
        registry: Catalog source (default: a fresh DataRegistry).

    Returns:
        Frozen ScaffoldSettings.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    base = (registry or DataRegistry()).entity_catalog

    if path is None:
        logger.debug("No %s, using defaults", SCAFFOLD_CONFIG_FILE)
        return ScaffoldSettings(catalog=base)

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading scaffold config from %s", path)

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
        settings = ScaffoldSettings.from_file(ScaffoldFile.model_validate(data), base)
    except ValidationError as e:
        raise ConfigError(f"Invalid scaffold configuration: {e}") from e

    logger.info(
        "Loaded scaffold config: api_dir=%s, %d entities",
        settings.api_dir, len(settings.catalog.entities),
    )
    return settings


def project_root(config_path: Path | None) -> Path:
    """Project root for a config file path (cwd when there is none)."""
    return config_path.parent.resolve() if config_path else Path.cwd()
