"""
Package group models: manifest input and resolved output.

A manifest (packages.yml) declares groups directly. A resolved group is
what the installer actually works with, whichever source it came from.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ghostarch.core.models.config import split_packages


class GroupSource(str, Enum):
    """Where a resolved group's package list came from."""

    MANIFEST = "manifest"
    CONFIG = "config"
    DEFAULT = "default"


class ManifestGroup(BaseModel):
    """One group entry in packages.yml."""

    description: str = ""
    packages: list[str] = Field(default_factory=list)

    @field_validator("packages", mode="before")
    @classmethod
    def _split(cls, value: Any) -> Any:
        return split_packages(value) or []


class PackageManifest(BaseModel):
    """packages.yml: ordered mapping of group name to group.

    A group value may be a full mapping or a bare package list/string::

        groups:
          networking:
            description: Networking Tools
            packages: [nmap, curl]
          extras: "tmux neovim"
    """

    groups: dict[str, ManifestGroup] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        raw = data.get("groups") or {}
        if not isinstance(raw, dict):
            return data
        groups: dict[str, Any] = {}
        for name, value in raw.items():
            if value is None or isinstance(value, (str, list)):
                groups[str(name)] = {"packages": value or []}
            else:
                groups[str(name)] = value
        return {**data, "groups": groups}


class ResolvedGroup(BaseModel):
    """A package group ready for installation."""

    name: str
    description: str = ""
    packages: list[str] = Field(default_factory=list)
    skip_flag: str
    source: GroupSource
    skipped: bool = False

    @property
    def title(self) -> str:
        """Description for prompts and the README; the name when unset."""
        return self.description or self.name

    @property
    def installable(self) -> bool:
        return not self.skipped and bool(self.packages)


class GroupResolution(BaseModel):
    """Outcome of resolving groups from manifest, config and defaults."""

    mode: str  # manifest | config
    groups: list[ResolvedGroup] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def get(self, name: str) -> ResolvedGroup | None:
        for group in self.groups:
            if group.name == name:
                return group
        return None

    def active(self) -> list[ResolvedGroup]:
        """Groups that will actually be installed."""
        return [g for g in self.groups if g.installable]
