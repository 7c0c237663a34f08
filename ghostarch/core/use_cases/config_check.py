"""
Config check use case: validate ghostarch.yml and packages.yml.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ghostarch.core.config.loader import ConfigError, find_config_file, load_config
from ghostarch.core.config.manifest_loader import find_manifest_file, load_manifest
from ghostarch.core.models.config import InstallConfig
from ghostarch.core.models.groups import GroupResolution
from ghostarch.core.services.groups import resolve_groups


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: InstallConfig | None = None
    config_path: Path | None = None
    manifest_path: Path | None = None
    resolution: GroupResolution | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "manifest_path": str(self.manifest_path) if self.manifest_path else None,
            "mode": self.resolution.mode if self.resolution else None,
            "groups": [g.name for g in self.resolution.groups] if self.resolution else [],
            "errors": self.errors,
            "warnings": self.warnings,
        }


def check_config(
    config_path: Path | None = None,
    manifest_path: Path | None = None,
) -> ConfigCheckResult:
    """Validate the install configuration and package manifest.

    Args:
        config_path: Optional explicit path to ghostarch.yml.
        manifest_path: Optional explicit path to packages.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    # Config
    if config_path is None:
        config_path = find_config_file()
    result.config_path = config_path

    if config_path is None:
        result.warnings.append("No ghostarch.yml found, defaults will be used.")

    try:
        result.config = load_config(config_path)
    except ConfigError as e:
        result.errors.append(str(e))

    # Manifest
    if manifest_path is None:
        manifest_path = find_manifest_file(config_path=config_path)
    result.manifest_path = manifest_path

    manifest = None
    try:
        manifest = load_manifest(manifest_path, config_path=config_path)
    except ConfigError as e:
        result.errors.append(str(e))

    if result.errors:
        return result

    # Semantic checks
    resolution = resolve_groups(manifest, result.config, env={})
    result.resolution = resolution
    result.warnings.extend(resolution.warnings)

    if manifest is not None and not manifest.groups:
        result.warnings.append("Manifest declares no groups. Nothing would be installed.")

    config = result.config
    assert config is not None
    if not config.shell.startswith("/"):
        result.errors.append(f"Shell must be an absolute path: {config.shell}")
    if config.workdir is not None and not config.workdir.strip():
        result.errors.append("workdir is set but empty")
    for name in config.subdirectories:
        if "/" in name or name in ("", ".", ".."):
            result.errors.append(f"Invalid subdirectory name: {name!r}")

    result.valid = len(result.errors) == 0
    return result
