"""
BlackArch repository bootstrap.

Downloads BlackArch's ``strap.sh``, checks it against the published
SHA-256, runs it as root and installs the keyring. A checksum that can't
be verified is a warning: the strap script is still run.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ghostarch.core.engine.executor import StepRunner
from ghostarch.core.models.config import BlackArchSettings

logger = logging.getLogger(__name__)


def parse_sha256sum(text: str) -> str | None:
    """First digest in ``sha256sum`` output (``<hex>  <file>``)."""
    for line in text.splitlines():
        parts = line.split()
        if parts and len(parts[0]) == 64:
            return parts[0].lower()
    return None


def verify_strap_checksum(runner: StepRunner, settings: BlackArchSettings, actual: str | None) -> bool:
    """Compare the downloaded digest with the published one."""
    logger.info("Verifying strap.sh checksum...")
    receipt = runner.run(
        "http",
        "fetch-strap-checksum",
        {"operation": "fetch", "url": settings.checksum_url, "timeout": 30},
        on_failure="ignore",
    )
    expected = parse_sha256sum(receipt.output) if receipt.ok else None

    if expected and actual and expected == actual.lower():
        logger.info("Checksum verified")
        return True

    runner.warn("Checksum verification failed, proceeding anyway")
    return False


def keyring_installed(runner: StepRunner, keyring: str) -> bool:
    receipt = runner.run(
        "pacman",
        "query-keyring",
        {"operation": "query", "package": keyring},
        on_failure="ignore",
    )
    return bool(receipt.metadata.get("installed"))


def install_keyring(runner: StepRunner, settings: BlackArchSettings) -> None:
    logger.info("Installing BlackArch keyring...")
    if keyring_installed(runner, settings.keyring):
        logger.info("BlackArch keyring already installed, skipping")
        return
    runner.run(
        "pacman",
        "install-keyring",
        {
            "operation": "install",
            "packages": [settings.keyring],
            "overwrite": "*",
            "needed": False,
            "sudo": True,
            "stream": True,
        },
        message="Keyring installation had issues, continuing...",
    )


def add_blackarch_repo(
    runner: StepRunner,
    settings: BlackArchSettings,
    tmp_dir: Path | None = None,
) -> None:
    """Add the BlackArch repository to pacman.

    Raises:
        InstallAborted: If strap.sh can't be downloaded or fails to run.
    """
    logger.info("Adding BlackArch repository...")

    strap = (tmp_dir or Path(tempfile.gettempdir())) / "strap.sh"

    download = runner.run(
        "http",
        "download-strap",
        {"operation": "download", "url": settings.strap_url, "dest": str(strap), "timeout": 60},
        on_failure="abort",
        message="Failed to download strap.sh",
    )

    verify_strap_checksum(runner, settings, download.metadata.get("sha256"))

    logger.info("Running BlackArch strap script...")
    try:
        runner.run(
            "shell",
            "run-strap",
            {"argv": ["bash", str(strap)], "sudo": True, "stream": True},
            on_failure="abort",
            message="BlackArch strap script failed",
        )
    finally:
        runner.run(
            "filesystem",
            "remove-strap",
            {"operation": "remove", "path": str(strap)},
            on_failure="ignore",
        )

    install_keyring(runner, settings)
