"""
User account setup: pick or create the target user, switch them to zsh,
install the Ghostarch ``.zshrc`` and make them the WSL default user.
"""

from __future__ import annotations

import logging
import pwd
from pathlib import Path

from ghostarch.adapters.shell.command import current_user
from ghostarch.core.context import TEMPLATES_DIR
from ghostarch.core.engine.executor import InstallAborted, StepRunner
from ghostarch.core.models.config import InstallConfig
from ghostarch.core.services.files import chown_to, copy_file, write_file
from ghostarch.core.services.prompts import Prompter
from ghostarch.core.services.system_checks import command_available, is_wsl

logger = logging.getLogger(__name__)

ZSHRC_TEMPLATE = TEMPLATES_DIR / "zshrc"
WSL_CONF = Path("/etc/wsl.conf")

ZSHRC_HEADER = """\
# ============================================
# Ghostarch Zsh Configuration
# Generated by ghostarch install
# ============================================

"""


def user_exists(username: str) -> bool:
    try:
        pwd.getpwnam(username)
    except KeyError:
        return False
    return True


def user_home(username: str) -> Path:
    """Home directory of ``username`` (``$HOME`` for the current user)."""
    if username == current_user():
        return Path.home()
    try:
        return Path(pwd.getpwnam(username).pw_dir)
    except KeyError:
        return Path("/home") / username


def create_user(runner: StepRunner, prompter: Prompter, username: str, config: InstallConfig) -> None:
    logger.info("Creating user: %s", username)
    runner.run(
        "users",
        "create-user",
        {
            "operation": "create",
            "username": username,
            "shell": config.shell,
            "groups": config.user_groups,
            "sudo": True,
        },
        on_failure="abort",
        message=f"Failed to create user {username}",
    )

    if prompter.ask_yes_no(f"Set password for {username}?", "yes"):
        password = prompter.secret(f"Enter password for {username}")
        if password:
            runner.run(
                "users",
                "set-password",
                {
                    "operation": "set_password",
                    "username": username,
                    "password": password,
                    "sudo": True,
                },
                message="Failed to set password",
            )

    logger.info("User %s created successfully", username)


def prompt_user_setup(
    runner: StepRunner,
    prompter: Prompter,
    config: InstallConfig,
    skip: bool = False,
) -> str:
    """Choose the account Ghostarch configures.

    Returns:
        The target user name.

    Raises:
        InstallAborted: Unknown existing user, or an invalid choice.
    """
    logger.info("=== User Configuration ===")

    if skip:
        runner.warn("Skipping user configuration")
        return current_user()

    choice = prompter.ask("Create new user or use existing? (new/existing)", "existing").lower()

    if choice == "new":
        username = prompter.ask("Enter new username", config.default_username)
        if user_exists(username):
            runner.warn(f"User {username} already exists")
        else:
            create_user(runner, prompter, username, config)
    elif choice == "existing":
        username = prompter.ask("Enter username", current_user())
        if not user_exists(username):
            logger.error("User %s does not exist", username)
            raise InstallAborted(f"User {username} does not exist")
    else:
        logger.error("Invalid choice: %s", choice)
        raise InstallAborted(f"Invalid choice: {choice}")

    logger.info("Selected user: %s", username)
    return username


def set_default_shell(runner: StepRunner, username: str, shell: str = "/bin/zsh") -> bool:
    """Make zsh the login shell of ``username``."""
    logger.info("=== Setting Up Zsh ===")

    if not command_available("zsh"):
        runner.warn("Zsh not installed, skipping shell change")
        return False

    logger.info("Setting zsh as default shell...")
    if username == current_user():
        params = {"operation": "set_shell", "shell": shell, "stream": True}
        message = "Failed to set zsh as default shell"
    else:
        params = {"operation": "set_shell", "shell": shell, "username": username, "sudo": True}
        message = f"Failed to set zsh for user {username}"

    receipt = runner.run("users", "set-default-shell", params, message=message)
    if receipt.ok:
        logger.info("Zsh set as default shell")
    return receipt.ok


def install_zshrc(runner: StepRunner, username: str, template: Path = ZSHRC_TEMPLATE) -> bool:
    """Write the Ghostarch header + packaged template to the user's ``.zshrc``."""
    logger.info("=== Configuring Zsh RC ===")

    if not template.is_file():
        runner.warn(f"Zshrc template not found at {template}")
        return False

    own = username == current_user()
    zshrc = user_home(username) / ".zshrc"

    if zshrc.is_file():
        logger.info("Backing up existing .zshrc to .zshrc.backup")
        copy_file(
            runner,
            "backup-user-zshrc",
            zshrc,
            zshrc.with_name(".zshrc.backup"),
            privileged=not own,
        )

    logger.info("Merging zshrc template to %s", zshrc)
    content = ZSHRC_HEADER + template.read_text(encoding="utf-8")
    receipt = write_file(runner, "write-user-zshrc", zshrc, content, privileged=not own)
    chown_to(runner, "chown-user-zshrc", zshrc, username)

    if receipt.ok:
        logger.info("Zshrc configured successfully")
    return receipt.ok


def configure_wsl_default_user(runner: StepRunner, username: str, distro: str = "ArchLinux") -> bool:
    """Point ``/etc/wsl.conf`` at ``username``. Outside WSL this is a no-op.

    Returns:
        True when wsl.conf was written (WSL needs a restart to apply it).
    """
    logger.info("=== Configuring WSL Default User ===")

    if not is_wsl():
        logger.info("Not running in WSL, skipping WSL configuration")
        return False

    logger.info("Configuring WSL to default to user: %s", username)
    receipt = write_file(
        runner,
        "write-wsl-conf",
        WSL_CONF,
        f"[user]\ndefault={username}\n",
        privileged=True,
    )
    if receipt.ok:
        logger.info("WSL default user configured")
        logger.info("Restart WSL to apply: wsl --terminate %s, then wsl -d %s", distro, distro)
    return receipt.ok
