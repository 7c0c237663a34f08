"""
Install configuration: loaded from ghostarch.yml.

Every field has a default, so a missing config file still yields a
complete, usable configuration. Package arrays stay ``None`` when the
user did not set them; the group resolver then falls back to the
hardcoded defaults.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


def split_packages(value: Any) -> Any:
    """Accept a package list as a YAML list or a whitespace-separated string."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        packages: list[str] = []
        for item in value:
            packages.extend(str(item).split())
        return packages
    return value


class OhMyZshSettings(BaseModel):
    """Where Oh-My-Zsh and its plugins come from."""

    repo: str = "https://github.com/ohmyzsh/ohmyzsh.git"
    branch: str = "master"
    plugins: list[str] = Field(
        default_factory=lambda: [
            "zsh-users/zsh-autosuggestions",
            "zsh-users/zsh-syntax-highlighting",
        ]
    )


class BlackArchSettings(BaseModel):
    """BlackArch repository bootstrap endpoints."""

    strap_url: str = "https://blackarch.org/strap.sh"
    checksum_url: str = "https://blackarch.org/strap.sh.sha256sum"
    keyring: str = "blackarch-keyring"
    network_check_url: str = "https://blackarch.org"
    network_timeout: int = 10


class InstallConfig(BaseModel):
    """Root configuration model."""

    # ── Core phases ──────────────────────────────────────────────
    install_zsh: bool = True
    install_ohmyzsh: bool = True
    install_blackarch: bool = True

    # ── Package arrays (config mode) ─────────────────────────────
    networking_packages: list[str] | None = None
    programming_packages: list[str] | None = None
    pentest_packages: list[str] | None = None
    recon_packages: list[str] | None = None
    additional_packages: list[str] | None = None
    gpu_packages: list[str] | None = None

    # ── User & workspace ─────────────────────────────────────────
    default_username: str = "ghostuser"
    shell: str = "/bin/zsh"
    user_groups: list[str] = Field(default_factory=lambda: ["wheel"])
    workdir: str | None = None
    subdirectories: list[str] = Field(
        default_factory=lambda: ["tools", "exploits", "wordlists", "payloads", "reports", "logs"]
    )
    wsl_distro: str = "ArchLinux"

    # ── Upstream sources ─────────────────────────────────────────
    ohmyzsh: OhMyZshSettings = Field(default_factory=OhMyZshSettings)
    blackarch: BlackArchSettings = Field(default_factory=BlackArchSettings)

    @field_validator(
        "networking_packages",
        "programming_packages",
        "pentest_packages",
        "recon_packages",
        "additional_packages",
        "gpu_packages",
        mode="before",
    )
    @classmethod
    def _split_package_arrays(cls, value: Any) -> Any:
        return split_packages(value)

    def packages_for(self, field_name: str) -> list[str] | None:
        """Return a config package array by field name, or None if unset."""
        return getattr(self, field_name, None)
