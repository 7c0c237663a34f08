"""
Package group resolution.

Groups come from one of two modes:

    manifest   packages.yml exists: its groups, in declaration order
    config     the five built-in groups; each takes its packages from the
               matching ghostarch.yml array, else the hardcoded defaults

Every group can be skipped through its derived flag ``SKIP_<GROUP>``,
set either as an environment variable or from the CLI.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ghostarch.core.models.config import InstallConfig
from ghostarch.core.models.groups import (
    GroupResolution,
    GroupSource,
    PackageManifest,
    ResolvedGroup,
)

logger = logging.getLogger(__name__)

_TRUTHY = {"true", "1", "yes"}


@dataclass(frozen=True)
class BuiltinGroup:
    """A config-mode group: config field, description and default packages."""

    name: str
    config_field: str
    description: str
    defaults: tuple[str, ...]


BUILTIN_GROUPS: tuple[BuiltinGroup, ...] = (
    BuiltinGroup(
        "networking",
        "networking_packages",
        "Networking Tools",
        (
            "net-tools", "iputils", "openssh", "curl", "wget", "bind-tools",
            "socat", "inetutils", "tcpdump", "openssl", "speedtest-cli",
            "htop", "iotop", "iftop", "netcat", "whois", "p7zip",
        ),
    ),
    BuiltinGroup(
        "programming",
        "programming_packages",
        "Programming Languages",
        ("python", "python-pip", "python-virtualenv", "go", "ruby"),
    ),
    BuiltinGroup(
        "pentest",
        "pentest_packages",
        "Pentest Tools",
        ("nmap", "ettercap", "wireshark-cli"),
    ),
    BuiltinGroup(
        "recon",
        "recon_packages",
        "Recon Tools",
        ("theharvester", "recon-ng", "dnsrecon"),
    ),
    BuiltinGroup(
        "additional",
        "additional_packages",
        "Additional Tools",
        ("nikto", "gobuster", "metasploit", "sqlmap", "volatility"),
    ),
)

BUILTIN_GROUP_NAMES = tuple(g.name for g in BUILTIN_GROUPS)


def skip_flag_name(group: str) -> str:
    """``web-tools`` → ``SKIP_WEB_TOOLS``."""
    return "SKIP_" + re.sub(r"[^A-Z0-9]", "_", group.upper())


def is_truthy(value: str | None) -> bool:
    """Skip-flag boolean: true/1/yes, case-insensitive."""
    return bool(value) and value.strip().lower() in _TRUTHY


def _is_skipped(
    name: str,
    flag: str,
    skip: set[str],
    env: Mapping[str, str],
) -> bool:
    if name in skip:
        logger.info("Skipping %s (flag: --skip %s)", name, name)
        return True
    if is_truthy(env.get(flag)):
        logger.info("Skipping %s (flag: %s=true)", name, flag)
        return True
    return False


def validate_manifest(manifest: PackageManifest | None) -> list[str]:
    """Report incomplete manifest groups. Warnings only, never fatal."""
    warnings: list[str] = []
    if manifest is None:
        return warnings
    for name, group in manifest.groups.items():
        if not group.description:
            warnings.append(
                f"Group '{name}' has no description (consider adding one to the manifest)"
            )
        if not group.packages:
            warnings.append(f"Group '{name}' has empty package list")
    return warnings


def resolve_groups(
    manifest: PackageManifest | None,
    config: InstallConfig | None = None,
    skip: Iterable[str] = (),
    env: Mapping[str, str] | None = None,
) -> GroupResolution:
    """Resolve the package groups to install.

    Precedence: manifest > config arrays > hardcoded defaults.

    Args:
        manifest: Loaded packages.yml, or None.
        config: Loaded ghostarch.yml (defaults when None).
        skip: Group names skipped from the CLI.
        env: Environment for ``SKIP_<GROUP>`` lookups (default: os.environ).

    Returns:
        GroupResolution with groups in install order.
    """
    config = config or InstallConfig()
    env = os.environ if env is None else env
    skip_set = set(skip)

    if manifest is not None:
        resolution = GroupResolution(mode="manifest", warnings=validate_manifest(manifest))
        for name, group in manifest.groups.items():
            flag = skip_flag_name(name)
            resolution.groups.append(
                ResolvedGroup(
                    name=name,
                    description=group.description,
                    packages=list(group.packages),
                    skip_flag=flag,
                    source=GroupSource.MANIFEST,
                    skipped=_is_skipped(name, flag, skip_set, env),
                )
            )
    else:
        resolution = GroupResolution(mode="config")
        for builtin in BUILTIN_GROUPS:
            configured = config.packages_for(builtin.config_field)
            if configured:
                packages, source = list(configured), GroupSource.CONFIG
            else:
                packages, source = list(builtin.defaults), GroupSource.DEFAULT
            flag = skip_flag_name(builtin.name)
            resolution.groups.append(
                ResolvedGroup(
                    name=builtin.name,
                    description=builtin.description,
                    packages=packages,
                    skip_flag=flag,
                    source=source,
                    skipped=_is_skipped(builtin.name, flag, skip_set, env),
                )
            )

    unknown = skip_set - {g.name for g in resolution.groups}
    for name in sorted(unknown):
        resolution.warnings.append(f"Unknown group '{name}' in --skip, ignored")

    logger.info(
        "Processing %d package groups (mode: %s)", len(resolution.groups), resolution.mode
    )
    return resolution


def format_group_listing(resolution: GroupResolution) -> str:
    """Human-readable listing for ``--list-groups``."""
    lines = ["Available package groups:", ""]
    for group in resolution.groups:
        lines.append(f"  {group.name}")
        lines.append(f"    Description: {group.description or 'N/A'}")
        lines.append(f"    Packages: {' '.join(group.packages) or 'N/A'}")
        lines.append(f"    Skip flag: {group.skip_flag}")
        if group.skipped:
            lines.append("    Status: skipped")
        lines.append("")
    return "\n".join(lines)
