"""
Package manifest loader: reads packages.yml.

When a manifest exists it takes precedence over the package arrays in
ghostarch.yml. Lookup order: explicit path (``--manifest``),
``GHOSTARCH_MANIFEST``, next to the config file, then the current
directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ghostarch.core.config.loader import ConfigError, read_yaml_mapping
from ghostarch.core.models.groups import PackageManifest

logger = logging.getLogger(__name__)

MANIFEST_FILE = "packages.yml"
MANIFEST_ENV = "GHOSTARCH_MANIFEST"


def find_manifest_file(
    config_path: Path | None = None,
    start_dir: Path | None = None,
) -> Path | None:
    """Locate packages.yml, or None when there isn't one."""
    env = os.environ.get(MANIFEST_ENV)
    if env:
        return Path(env).expanduser()

    candidates = []
    if config_path is not None:
        candidates.append(config_path.parent / MANIFEST_FILE)
    candidates.append((start_dir or Path.cwd()) / MANIFEST_FILE)

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_manifest(path: Path | None = None, config_path: Path | None = None) -> PackageManifest | None:
    """Load the package manifest.

    Args:
        path: Explicit manifest path. Must exist when given.
        config_path: Config file location, used to find a sibling manifest.

    Returns:
        The manifest, or None when no manifest file exists.

    Raises:
        ConfigError: If an explicit path is missing, or the manifest is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_manifest_file(config_path=config_path)

    if path is None or not path.is_file():
        if explicit:
            raise ConfigError(f"Manifest not found: {path}")
        logger.debug("No manifest found, using config arrays")
        return None

    logger.info("Loading package manifest from %s", path)
    data = read_yaml_mapping(path)

    try:
        manifest = PackageManifest.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid manifest in {path}: {e}") from e

    logger.debug("Manifest declares %d groups", len(manifest.groups))
    return manifest
