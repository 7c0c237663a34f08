"""
Full install use case: core phases, then the target user's environment.

    core install → user setup → workdir setup → login shell
        → .zshrc → WSL default user

Runs on a single step runner, so the audit entry covers the whole
install.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ghostarch.adapters.registry import AdapterRegistry, build_registry
from ghostarch.core.config.loader import ConfigError, load_config
from ghostarch.core.engine.executor import (
    ExecutionReport,
    InstallAborted,
    StepRunner,
    write_audit_entry,
)
from ghostarch.core.persistence.audit import AuditWriter
from ghostarch.core.services.accounts import (
    configure_wsl_default_user,
    install_zshrc,
    prompt_user_setup,
    set_default_shell,
)
from ghostarch.core.services.prompts import Prompter
from ghostarch.core.services.system_checks import check_environment
from ghostarch.core.services.workspace import prompt_workdir_setup
from ghostarch.core.use_cases.core_install import CoreInstallResult, install_core

logger = logging.getLogger(__name__)


@dataclass
class FullInstallResult:
    """Result of the full installation."""

    report: ExecutionReport | None = None
    core: CoreInstallResult = field(default_factory=CoreInstallResult)
    target_user: str = ""
    workdir: Path | None = None
    shell_changed: bool = False
    zshrc_installed: bool = False
    wsl_configured: bool = False
    wsl_distro: str = "ArchLinux"
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        result["core"] = {k: v for k, v in self.core.to_dict().items() if k != "report"}
        result["target_user"] = self.target_user
        result["workdir"] = str(self.workdir) if self.workdir else None
        result["shell_changed"] = self.shell_changed
        result["zshrc_installed"] = self.zshrc_installed
        result["wsl_configured"] = self.wsl_configured
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_full_install(
    prompter: Prompter,
    config_path: Path | None = None,
    skip_zsh: bool = False,
    skip_omz: bool = False,
    skip_blackarch: bool = False,
    skip_user: bool = False,
    skip_workdir: bool = False,
    dry_run: bool = False,
    mock_mode: bool = False,
    registry: AdapterRegistry | None = None,
    audit_writer: AuditWriter | None = None,
    home: Path | None = None,
) -> FullInstallResult:
    """Install the core and set up the target user.

    Args:
        prompter: Source of answers for every question.
        config_path: Optional explicit path to ghostarch.yml.
        skip_zsh: Don't install zsh.
        skip_omz: Don't install Oh-My-Zsh.
        skip_blackarch: Don't add the BlackArch repository.
        skip_user: Skip user configuration (use the current user).
        skip_workdir: Skip working directory setup.
        dry_run: Validate and log every step, execute nothing.
        mock_mode: Route every step through the mock adapter.
        registry: Optional pre-configured adapter registry.
        audit_writer: Optional audit writer (default: state dir ledger).
        home: Home directory for Oh-My-Zsh (default: ``$HOME``).
    """
    result = FullInstallResult()
    logger.info("=== Ghostarch Installation ===")
    check_environment()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.wsl_distro = config.wsl_distro

    registry = registry or build_registry(mock_mode=mock_mode)
    runner = StepRunner(registry, phase="install", dry_run=dry_run)
    result.report = runner.report

    try:
        install_core(
            runner,
            config,
            result.core,
            home=home,
            skip_zsh=skip_zsh,
            skip_omz=skip_omz,
            skip_blackarch=skip_blackarch,
        )

        result.target_user = prompt_user_setup(runner, prompter, config, skip=skip_user)
        result.workdir = prompt_workdir_setup(
            runner, prompter, config, result.target_user, skip=skip_workdir
        )
        result.shell_changed = set_default_shell(runner, result.target_user, config.shell)
        result.zshrc_installed = install_zshrc(runner, result.target_user)
        result.wsl_configured = configure_wsl_default_user(
            runner, result.target_user, config.wsl_distro
        )
        logger.info("Installation complete")
    except InstallAborted as e:
        result.error = str(e)

    write_audit_entry(
        runner.report,
        audit_writer or AuditWriter(),
        duration_ms=runner.elapsed_ms,
        dry_run=dry_run,
        errors=[result.error] if result.error else [],
        target_user=result.target_user,
        workdir=str(result.workdir or ""),
        context={"wsl_configured": result.wsl_configured},
    )
    return result
