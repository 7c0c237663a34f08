"""
Configuration loader: reads ghostarch.yml into an InstallConfig.

Lookup order: explicit path (``--config``), ``GHOSTARCH_CONFIG``, then a
``ghostarch.yml`` found by walking up from the current directory. A
missing file is not an error: the installer runs on defaults.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from ghostarch.core.models.config import InstallConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "ghostarch.yml"
CONFIG_ENV = "GHOSTARCH_CONFIG"


class ConfigError(Exception):
    """Raised when a config or manifest file is unreadable or invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for ghostarch.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to ghostarch.yml, or None if not found.
    """
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser()

    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def read_yaml_mapping(path: Path) -> dict[str, Any]:
    """Read a YAML file that must contain a mapping (empty file = ``{}``).

    Raises:
        ConfigError: If the file can't be read or isn't a YAML mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def load_config(path: Path | None = None) -> InstallConfig:
    """Load and validate the install configuration.

    Args:
        path: Explicit path to ghostarch.yml. If None, searches for one.

    Returns:
        Validated InstallConfig (defaults when no file exists).

    Raises:
        ConfigError: If an explicit path is missing, or the file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.warning("Config file not found, using defaults")
        return InstallConfig()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        logger.warning("Config file not found, using defaults")
        return InstallConfig()

    logger.info("Loading configuration from %s", path)
    data = read_yaml_mapping(path)

    try:
        return InstallConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
