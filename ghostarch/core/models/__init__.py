"""
Domain models: Pydantic types for the installer.

    from ghostarch.core.models import Action, Receipt, InstallConfig, ResolvedGroup
"""

from ghostarch.core.models.action import Action, Receipt
from ghostarch.core.models.config import BlackArchSettings, InstallConfig, OhMyZshSettings
from ghostarch.core.models.groups import (
    GroupResolution,
    GroupSource,
    ManifestGroup,
    PackageManifest,
    ResolvedGroup,
)

__all__ = [
    # action.py
    "Action",
    "BlackArchSettings",
    "GroupResolution",
    "GroupSource",
    # config.py
    "InstallConfig",
    "ManifestGroup",
    "OhMyZshSettings",
    # groups.py
    "PackageManifest",
    "Receipt",
    "ResolvedGroup",
]
