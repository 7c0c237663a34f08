"""
Core install use case: base system, zsh, Oh-My-Zsh and the BlackArch repo.

    network check → sudo check → pacman -Syu → zsh → Oh-My-Zsh (+ plugins)
        → checkout check → BlackArch strap + keyring

Each phase can be turned off with a ``--skip-*`` option or with the
matching ``install_*: false`` in ghostarch.yml.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ghostarch.adapters.registry import AdapterRegistry, build_registry
from ghostarch.core.config.loader import ConfigError, load_config
from ghostarch.core.context import INSTALL_ROOT
from ghostarch.core.engine.executor import (
    ExecutionReport,
    InstallAborted,
    StepRunner,
    write_audit_entry,
)
from ghostarch.core.models.config import InstallConfig
from ghostarch.core.persistence.audit import AuditWriter
from ghostarch.core.services.blackarch import add_blackarch_repo
from ghostarch.core.services.ohmyzsh import (
    install_ohmyzsh,
    install_ohmyzsh_plugins,
    setup_ohmyzsh_unattended,
)
from ghostarch.core.services.system_checks import check_environment, check_network, check_sudo

logger = logging.getLogger(__name__)


@dataclass
class CoreInstallResult:
    """Result of the core installation."""

    report: ExecutionReport | None = None
    config_path: Path | None = None
    zsh_installed: bool = False
    ohmyzsh_installed: bool = False
    plugins_installed: list[str] = field(default_factory=list)
    blackarch_added: bool = False
    in_git_repo: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        result["zsh_installed"] = self.zsh_installed
        result["ohmyzsh_installed"] = self.ohmyzsh_installed
        result["plugins_installed"] = self.plugins_installed
        result["blackarch_added"] = self.blackarch_added
        result["in_git_repo"] = self.in_git_repo
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def install_core(
    runner: StepRunner,
    config: InstallConfig,
    result: CoreInstallResult,
    *,
    home: Path | None = None,
    skip_zsh: bool = False,
    skip_omz: bool = False,
    skip_blackarch: bool = False,
) -> None:
    """Run the core phases on an existing runner.

    Shared with the full install, which continues on the same runner.

    Raises:
        InstallAborted: Network, sudo, system update, zsh, Oh-My-Zsh clone
            or BlackArch strap failure.
    """
    home = home or Path.home()
    do_zsh = config.install_zsh and not skip_zsh
    do_omz = config.install_ohmyzsh and not skip_omz
    do_blackarch = config.install_blackarch and not skip_blackarch

    # ── Preflight ────────────────────────────────────────────────
    if do_zsh or do_omz or do_blackarch:
        check_network(runner, config.blackarch)
    check_sudo(runner)

    # ── System update ────────────────────────────────────────────
    logger.info("Updating system packages...")
    runner.run(
        "pacman",
        "system-update",
        {"operation": "update", "sudo": True, "stream": True},
        on_failure="abort",
        message="System update failed",
    )
    logger.info("System updated successfully")

    # ── Zsh ──────────────────────────────────────────────────────
    if do_zsh:
        logger.info("Installing zsh...")
        runner.run(
            "pacman",
            "install-zsh",
            {"operation": "install", "packages": ["zsh"], "sudo": True, "stream": True},
            on_failure="abort",
            message="Failed to install zsh",
        )
        result.zsh_installed = True
        logger.info("Setting zsh as default shell...")
        runner.run(
            "users",
            "chsh-zsh",
            {"operation": "set_shell", "shell": config.shell, "stream": True},
            message="Failed to set zsh as default shell",
        )
    else:
        runner.warn("Skipping zsh installation")

    # ── Oh-My-Zsh ────────────────────────────────────────────────
    if do_omz:
        if install_ohmyzsh(runner, config.ohmyzsh, home):
            result.ohmyzsh_installed = True
            setup_ohmyzsh_unattended(runner, home)
        result.plugins_installed = install_ohmyzsh_plugins(runner, config.ohmyzsh, home)
    else:
        runner.warn("Skipping Oh-My-Zsh installation")

    # ── Checkout ─────────────────────────────────────────────────
    repo = runner.run(
        "git",
        "check-checkout",
        {"operation": "is_repo", "path": str(INSTALL_ROOT)},
        on_failure="ignore",
    )
    result.in_git_repo = bool(repo.metadata.get("is_repo"))
    if result.in_git_repo:
        logger.info("Ghostarch is running from a git repository: %s", INSTALL_ROOT)
    else:
        logger.info("Not running from a git repository")

    # ── BlackArch ────────────────────────────────────────────────
    if do_blackarch:
        add_blackarch_repo(runner, config.blackarch)
        result.blackarch_added = True
        logger.info("BlackArch repository configured")
    else:
        runner.warn("Skipping BlackArch repository setup")


def run_core_install(
    config_path: Path | None = None,
    skip_zsh: bool = False,
    skip_omz: bool = False,
    skip_blackarch: bool = False,
    dry_run: bool = False,
    mock_mode: bool = False,
    registry: AdapterRegistry | None = None,
    audit_writer: AuditWriter | None = None,
    home: Path | None = None,
) -> CoreInstallResult:
    """Install the Ghostarch core.

    Args:
        config_path: Optional explicit path to ghostarch.yml.
        skip_zsh: Don't install zsh.
        skip_omz: Don't install Oh-My-Zsh.
        skip_blackarch: Don't add the BlackArch repository.
        dry_run: Validate and log every step, execute nothing.
        mock_mode: Route every step through the mock adapter.
        registry: Optional pre-configured adapter registry.
        audit_writer: Optional audit writer (default: state dir ledger).
        home: Home directory for Oh-My-Zsh (default: ``$HOME``).

    Returns:
        CoreInstallResult with the execution report.
    """
    result = CoreInstallResult()
    logger.info("=== Ghostarch Core Installation ===")
    check_environment()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.config_path = config_path

    registry = registry or build_registry(mock_mode=mock_mode)
    runner = StepRunner(registry, phase="core", dry_run=dry_run)
    result.report = runner.report

    try:
        install_core(
            runner,
            config,
            result,
            home=home,
            skip_zsh=skip_zsh,
            skip_omz=skip_omz,
            skip_blackarch=skip_blackarch,
        )
        logger.info("Core installation complete")
    except InstallAborted as e:
        result.error = str(e)

    write_audit_entry(
        runner.report,
        audit_writer or AuditWriter(),
        duration_ms=runner.elapsed_ms,
        dry_run=dry_run,
        errors=[result.error] if result.error else [],
        context={
            "zsh": result.zsh_installed,
            "ohmyzsh": result.ohmyzsh_installed,
            "blackarch": result.blackarch_added,
        },
    )
    return result
