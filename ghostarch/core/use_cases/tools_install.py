"""
Tools install use case: target user, working directory and package groups.

    checks → manifest / config → group resolution → confirm
        → user setup → workdir setup → one pacman install per group
        → README → summary

A group that fails to install is a warning; the remaining groups still
install.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ghostarch.adapters.registry import AdapterRegistry, build_registry
from ghostarch.core.config.loader import ConfigError, find_config_file, load_config
from ghostarch.core.config.manifest_loader import load_manifest
from ghostarch.core.engine.executor import (
    ExecutionReport,
    InstallAborted,
    StepRunner,
    write_audit_entry,
)
from ghostarch.core.models.config import InstallConfig
from ghostarch.core.models.groups import GroupResolution, ResolvedGroup
from ghostarch.core.persistence.audit import AuditWriter
from ghostarch.core.services.accounts import prompt_user_setup
from ghostarch.core.services.groups import format_group_listing, resolve_groups
from ghostarch.core.services.prompts import Prompter
from ghostarch.core.services.system_checks import check_environment, check_sudo
from ghostarch.core.services.workspace import prompt_workdir_setup, write_readme

logger = logging.getLogger(__name__)


@dataclass
class ToolsInstallResult:
    """Result of the tools installation."""

    report: ExecutionReport | None = None
    resolution: GroupResolution | None = None
    listing: str | None = None
    cancelled: bool = False
    target_user: str = ""
    workdir: Path | None = None
    readme: Path | None = None
    groups_installed: list[str] = field(default_factory=list)
    groups_skipped: list[str] = field(default_factory=list)
    groups_failed: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.resolution:
            result["mode"] = self.resolution.mode
            result["groups"] = [g.model_dump(mode="json") for g in self.resolution.groups]
            result["warnings"] = self.resolution.warnings
        result["cancelled"] = self.cancelled
        result["target_user"] = self.target_user
        result["workdir"] = str(self.workdir) if self.workdir else None
        result["groups_installed"] = self.groups_installed
        result["groups_skipped"] = self.groups_skipped
        result["groups_failed"] = self.groups_failed
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def load_groups(
    config_path: Path | None = None,
    manifest_path: Path | None = None,
    skip: Iterable[str] = (),
    env: Mapping[str, str] | None = None,
    config: InstallConfig | None = None,
) -> GroupResolution:
    """Load the manifest (and config, unless given) and resolve the package groups.

    Raises:
        ConfigError: If the config or manifest is invalid.
    """
    if config is None:
        config = load_config(config_path)
    manifest = load_manifest(manifest_path, config_path=config_path or find_config_file())
    resolution = resolve_groups(manifest, config, skip=skip, env=env)
    for warning in resolution.warnings:
        logger.warning(warning)
    return resolution


def install_group(runner: StepRunner, prompter: Prompter, group: ResolvedGroup) -> str:
    """Install one package group.

    Returns:
        ``installed``, ``skipped`` or ``failed``.
    """
    if group.skipped:
        return "skipped"

    if not group.packages:
        runner.warn(f"No packages defined for group '{group.name}', skipping")
        return "skipped"

    logger.info("=== %s ===", group.title)
    prompter.echo(f"Packages: {' '.join(group.packages)}")

    if not prompter.confirm(f"Install {group.title} packages?"):
        runner.warn(f"Skipping {group.title}")
        return "skipped"

    logger.info("Installing %s...", group.title)
    receipt = runner.run(
        "pacman",
        f"install-group-{group.name}",
        {
            "operation": "install",
            "packages": group.packages,
            "needed": True,
            "sudo": True,
            "stream": True,
        },
        message=f"Some {group.title} packages failed to install",
    )
    if receipt.failed:
        return "failed"
    if receipt.skipped:
        logger.info("%s not installed (dry run)", group.title)
        return "skipped"
    logger.info("%s installed successfully", group.title)
    return "installed"


def run_tools_install(
    prompter: Prompter,
    config_path: Path | None = None,
    manifest_path: Path | None = None,
    skip: Iterable[str] = (),
    skip_user: bool = False,
    skip_workdir: bool = False,
    list_groups: bool = False,
    dry_run: bool = False,
    mock_mode: bool = False,
    registry: AdapterRegistry | None = None,
    audit_writer: AuditWriter | None = None,
    env: Mapping[str, str] | None = None,
) -> ToolsInstallResult:
    """Install the selected package groups for a target user.

    Args:
        prompter: Source of answers for every question.
        config_path: Optional explicit path to ghostarch.yml.
        manifest_path: Optional explicit path to packages.yml.
        skip: Group names to skip (from the ``--skip*`` options).
        skip_user: Skip user configuration (use the current user).
        skip_workdir: Skip working directory setup.
        list_groups: Only resolve and list the groups.
        dry_run: Validate and log every step, execute nothing.
        mock_mode: Route every step through the mock adapter.
        registry: Optional pre-configured adapter registry.
        audit_writer: Optional audit writer (default: state dir ledger).
        env: Environment for ``SKIP_<GROUP>`` lookups (default: os.environ).

    Returns:
        ToolsInstallResult with per-group outcomes.
    """
    result = ToolsInstallResult()

    try:
        config = load_config(config_path)
        resolution = load_groups(config_path, manifest_path, skip=skip, env=env, config=config)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.resolution = resolution

    if list_groups:
        result.listing = format_group_listing(resolution)
        return result

    logger.info("=== Ghostarch Tools Installation ===")
    check_environment()

    registry = registry or build_registry(mock_mode=mock_mode)
    runner = StepRunner(registry, phase="tools", dry_run=dry_run)
    result.report = runner.report
    for warning in resolution.warnings:
        runner.report.warnings.append(warning)

    try:
        check_sudo(runner)

        prompter.echo("This will configure a user, a working directory and install:")
        for group in resolution.active():
            prompter.echo(f"  - {group.title}")
        if not prompter.confirm("Continue?"):
            logger.info("Installation cancelled")
            result.cancelled = True
            return result

        result.target_user = prompt_user_setup(runner, prompter, config, skip=skip_user)
        result.workdir = prompt_workdir_setup(
            runner, prompter, config, result.target_user, skip=skip_workdir
        )

        for group in resolution.groups:
            outcome = install_group(runner, prompter, group)
            if outcome == "installed":
                result.groups_installed.append(group.name)
            elif outcome == "failed":
                result.groups_failed.append(group.name)
            else:
                result.groups_skipped.append(group.name)

        if result.workdir is not None:
            installed = [g for g in resolution.groups if g.name in result.groups_installed]
            result.readme = write_readme(runner, result.target_user, result.workdir, installed)

        logger.info("Tools installation complete")
    except InstallAborted as e:
        result.error = str(e)
    finally:
        if not result.cancelled:
            write_audit_entry(
                runner.report,
                audit_writer or AuditWriter(),
                duration_ms=runner.elapsed_ms,
                dry_run=dry_run,
                errors=[result.error] if result.error else [],
                target_user=result.target_user,
                workdir=str(result.workdir or ""),
                groups_installed=result.groups_installed,
                context={
                    "mode": resolution.mode,
                    "skipped": result.groups_skipped,
                    "failed": result.groups_failed,
                },
            )

    return result
