"""
Environment checks run before any install phase.

Root and WSL checks only warn. The network and sudo checks gate phases
that can't work without them.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ghostarch.adapters.shell.command import is_root
from ghostarch.core.engine.executor import StepRunner
from ghostarch.core.models.config import BlackArchSettings

logger = logging.getLogger(__name__)

PROC_VERSION = Path("/proc/version")


def command_available(name: str) -> bool:
    """Whether ``name`` is on PATH."""
    return shutil.which(name) is not None


def is_wsl(proc_version: Path = PROC_VERSION) -> bool:
    """Detect WSL from the kernel version string."""
    try:
        return "microsoft" in proc_version.read_text(encoding="utf-8", errors="replace").lower()
    except OSError:
        return False


def check_root() -> None:
    if not is_root():
        return
    if is_wsl():
        logger.warning("Running as root in WSL2 - some features may not work")
        logger.info("Consider running as regular user with sudo")
    else:
        logger.warning("Running as root - some features may not work as expected")


def check_wsl() -> bool:
    if is_wsl():
        logger.info("WSL2 environment detected")
        return True
    logger.warning("This installer is designed for WSL2. Running on regular Linux")
    return False


def check_environment() -> bool:
    """Root + WSL checks. Returns whether we're inside WSL."""
    check_root()
    return check_wsl()


def check_network(runner: StepRunner, settings: BlackArchSettings) -> None:
    """Probe the BlackArch site; abort when it's unreachable."""
    logger.info("Checking network connectivity...")
    runner.run(
        "http",
        "check-network",
        {
            "operation": "check",
            "url": settings.network_check_url,
            "timeout": settings.network_timeout,
        },
        on_failure="abort",
        message="No network connectivity",
    )
    logger.info("Network connectivity OK")


def check_sudo(runner: StepRunner) -> None:
    """Make sure sudo works (root needs nothing); abort otherwise."""
    if is_root():
        return
    runner.run(
        "shell",
        "check-sudo",
        {"argv": ["sudo", "-v"], "stream": True},
        on_failure="abort",
        message="sudo privileges required",
    )
    logger.info("sudo privileges available")
