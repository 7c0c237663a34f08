"""
Oh-My-Zsh installation from a shallow git clone (no ``curl | sh``).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ghostarch.core.engine.executor import StepRunner
from ghostarch.core.models.config import OhMyZshSettings
from ghostarch.core.services.files import copy_file

logger = logging.getLogger(__name__)


def ohmyzsh_dir(home: Path) -> Path:
    return home / ".oh-my-zsh"


def custom_dir(home: Path) -> Path:
    """``$ZSH_CUSTOM``, defaulting to ``~/.oh-my-zsh/custom``."""
    env = os.environ.get("ZSH_CUSTOM")
    return Path(env).expanduser() if env else ohmyzsh_dir(home) / "custom"


def install_ohmyzsh(runner: StepRunner, settings: OhMyZshSettings, home: Path) -> bool:
    """Clone Oh-My-Zsh into ``~/.oh-my-zsh``.

    Returns:
        True when a fresh copy was cloned, False when one was already there.
    """
    target = ohmyzsh_dir(home)
    if target.is_dir():
        runner.warn("Oh-My-Zsh already installed, skipping...")
        return False

    logger.info("Installing Oh-My-Zsh to %s...", target)
    runner.run(
        "git",
        "clone-ohmyzsh",
        {
            "operation": "clone",
            "url": settings.repo,
            "dest": str(target),
            "branch": settings.branch,
            "depth": 1,
        },
        on_failure="abort",
        message="Failed to install Oh-My-Zsh",
    )
    logger.info("Oh-My-Zsh installed successfully")
    return True


def setup_ohmyzsh_unattended(runner: StepRunner, home: Path) -> bool:
    """Install ``~/.zshrc`` from the Oh-My-Zsh template, backing up the old one."""
    target = ohmyzsh_dir(home)
    template = target / "templates" / "zshrc.zsh-template"
    user_zshrc = home / ".zshrc"

    if not runner.dry_run and not template.is_file():
        runner.warn(f"zshrc template not found at {template}")
        return False

    if user_zshrc.is_file():
        backup = target / ".zshrc.backup"
        copy_file(runner, "backup-zshrc", user_zshrc, backup)
        logger.info("Backed up existing .zshrc to %s", backup)

    copy_file(runner, "install-omz-zshrc", template, user_zshrc)
    logger.info("Created new .zshrc from template")
    return True


def install_ohmyzsh_plugins(runner: StepRunner, settings: OhMyZshSettings, home: Path) -> list[str]:
    """Clone each plugin into ``$ZSH_CUSTOM/plugins``.

    Returns:
        Names of the plugins that were cloned.
    """
    plugins_dir = custom_dir(home) / "plugins"
    runner.run(
        "filesystem",
        "mkdir-omz-plugins",
        {"operation": "mkdir", "path": str(plugins_dir)},
    )

    installed = []
    for plugin in settings.plugins:
        plugin_name = plugin.rstrip("/").rsplit("/", 1)[-1].removesuffix(".git")
        plugin_path = plugins_dir / plugin_name

        if plugin_path.is_dir():
            logger.info("Plugin %s already installed, skipping...", plugin_name)
            continue

        logger.info("Installing plugin: %s", plugin_name)
        url = plugin if "://" in plugin else f"https://github.com/{plugin}.git"
        receipt = runner.run(
            "git",
            f"clone-plugin-{plugin_name}",
            {"operation": "clone", "url": url, "dest": str(plugin_path), "depth": 1},
            message=f"Failed to install plugin {plugin_name}",
        )
        if receipt.ok:
            installed.append(plugin_name)
    return installed
