"""Ghostarch: Arch Linux WSL2 setup with selected BlackArch tools."""

__version__ = "1.0.0"
