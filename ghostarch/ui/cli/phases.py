"""
CLI commands for the individual install phases.

Thin wrappers over ``ghostarch.core.use_cases``.

Usage::

    ghostarch core --skip-blackarch
    ghostarch tools --skip-pentest --skip-recon
    ghostarch tools --manifest packages.yml --skip web
    ghostarch tools --list-groups
    ghostarch nvidia --skip-test
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from ghostarch.ui.cli.output import fail, mode_label, print_report, print_wsl_restart
from ghostarch.ui.cli.prompter import ClickPrompter


# ── Core ────────────────────────────────────────────────────────


@click.command()
@click.option("--skip-zsh", is_flag=True, help="Skip zsh installation.")
@click.option("--skip-omz", is_flag=True, help="Skip Oh-My-Zsh installation.")
@click.option("--skip-blackarch", is_flag=True, help="Skip BlackArch repository setup.")
@click.pass_context
def core(ctx: click.Context, skip_zsh: bool, skip_omz: bool, skip_blackarch: bool) -> None:
    """Update the system and install zsh, Oh-My-Zsh and the BlackArch repo."""
    from ghostarch.core.use_cases.core_install import run_core_install

    click.secho(f"\n👻 {mode_label(ctx)}Ghostarch core installation", fg="cyan", bold=True)

    result = run_core_install(
        config_path=ctx.obj.get("config_path"),
        skip_zsh=skip_zsh,
        skip_omz=skip_omz,
        skip_blackarch=skip_blackarch,
        dry_run=ctx.obj.get("dry_run", False),
        mock_mode=ctx.obj.get("mock", False),
    )

    print_report(result.report, verbose=ctx.obj.get("verbose", False))

    if result.error:
        fail(result.error)

    click.echo()
    click.secho("✅ Core installation complete", fg="green", bold=True)
    click.echo("   Next steps:")
    click.echo("     1. Restart your shell or run: exec zsh")
    click.echo("     2. Run: ghostarch tools")
    click.echo("     3. (Optional) Run: ghostarch nvidia")
    click.echo()


# ── Tools ───────────────────────────────────────────────────────


@click.command()
@click.option("--skip-networking", is_flag=True, help="Skip networking tools.")
@click.option("--skip-programming", is_flag=True, help="Skip programming languages.")
@click.option("--skip-pentest", is_flag=True, help="Skip pentest tools.")
@click.option("--skip-recon", is_flag=True, help="Skip recon tools.")
@click.option("--skip-additional", is_flag=True, help="Skip additional tools.")
@click.option("--skip", "skip_groups", multiple=True, metavar="GROUP", help="Skip any group by name (repeatable).")
@click.option("--skip-user", is_flag=True, help="Skip user configuration.")
@click.option("--skip-workdir", is_flag=True, help="Skip working directory setup.")
@click.option(
    "--manifest",
    "manifest_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to packages.yml (default: auto-detect).",
)
@click.option("--list-groups", is_flag=True, help="List package groups and exit.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def tools(
    ctx: click.Context,
    skip_networking: bool,
    skip_programming: bool,
    skip_pentest: bool,
    skip_recon: bool,
    skip_additional: bool,
    skip_groups: tuple[str, ...],
    skip_user: bool,
    skip_workdir: bool,
    manifest_path: str | None,
    list_groups: bool,
    as_json: bool,
) -> None:
    """Configure a user and working directory and install tool groups.

    Examples:

        ghostarch tools

        ghostarch -n tools --skip-additional

        SKIP_RECON=true ghostarch tools
    """
    from ghostarch.core.use_cases.tools_install import run_tools_install

    skip = list(skip_groups)
    for name, flag in (
        ("networking", skip_networking),
        ("programming", skip_programming),
        ("pentest", skip_pentest),
        ("recon", skip_recon),
        ("additional", skip_additional),
    ):
        if flag:
            skip.append(name)

    if not list_groups and not as_json:
        click.secho(f"\n👻 {mode_label(ctx)}Ghostarch tools installation", fg="cyan", bold=True)

    result = run_tools_install(
        ClickPrompter(noninteractive=ctx.obj.get("noninteractive", False)),
        config_path=ctx.obj.get("config_path"),
        manifest_path=Path(manifest_path) if manifest_path else None,
        skip=skip,
        skip_user=skip_user,
        skip_workdir=skip_workdir,
        list_groups=list_groups,
        dry_run=ctx.obj.get("dry_run", False),
        mock_mode=ctx.obj.get("mock", False),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.listing is not None:
        click.echo(result.listing)
        return

    if result.cancelled:
        click.secho("Installation cancelled", fg="yellow")
        return

    print_report(result.report, verbose=ctx.obj.get("verbose", False))

    if result.error:
        fail(result.error)

    click.echo()
    click.secho("✅ Tools installation complete", fg="green", bold=True)
    click.echo(f"   User: {result.target_user}")
    click.echo(f"   Working directory: {result.workdir or 'not configured'}")
    if result.groups_installed:
        click.echo(f"   Installed: {', '.join(result.groups_installed)}")
    if result.groups_skipped:
        click.echo(f"   Skipped: {', '.join(result.groups_skipped)}")
    if result.groups_failed:
        click.secho(f"   Failed: {', '.join(result.groups_failed)}", fg="yellow")
    if result.readme:
        click.echo(f"   README: {result.readme}")
    click.echo()
    click.echo("   Next steps:")
    if result.workdir:
        click.echo(f"     cd {result.workdir}")
    click.echo("     (Optional) GPU support: ghostarch nvidia")
    click.echo()


# ── GPU ─────────────────────────────────────────────────────────


@click.command()
@click.option("--skip-test", is_flag=True, help="Don't test the GPU after installing.")
@click.pass_context
def nvidia(ctx: click.Context, skip_test: bool) -> None:
    """Install NVIDIA drivers, CUDA and hashcat."""
    from ghostarch.core.use_cases.gpu_install import run_gpu_install

    click.secho(f"\n👻 {mode_label(ctx)}Ghostarch NVIDIA/CUDA setup", fg="cyan", bold=True)

    result = run_gpu_install(
        config_path=ctx.obj.get("config_path"),
        skip_test=skip_test,
        dry_run=ctx.obj.get("dry_run", False),
        mock_mode=ctx.obj.get("mock", False),
    )

    print_report(result.report, verbose=ctx.obj.get("verbose", False))

    if result.error:
        fail(result.error)

    click.echo()
    click.secho("✅ GPU setup complete", fg="green", bold=True)
    click.echo(f"   Packages: {' '.join(result.packages)}")
    if result.gpu_visible is False:
        click.secho("   GPU not visible: install the NVIDIA WSL driver on Windows", fg="yellow")
    click.echo()


# ── Full install ────────────────────────────────────────────────


@click.command()
@click.option("--skip-zsh", is_flag=True, help="Skip zsh installation.")
@click.option("--skip-omz", is_flag=True, help="Skip Oh-My-Zsh installation.")
@click.option("--skip-blackarch", is_flag=True, help="Skip BlackArch repository setup.")
@click.option("--skip-user", is_flag=True, help="Skip user configuration.")
@click.option("--skip-workdir", is_flag=True, help="Skip working directory setup.")
@click.pass_context
def install(
    ctx: click.Context,
    skip_zsh: bool,
    skip_omz: bool,
    skip_blackarch: bool,
    skip_user: bool,
    skip_workdir: bool,
) -> None:
    """Full install: core, user, working directory, shell and WSL user."""
    from ghostarch.core.use_cases.full_install import run_full_install

    click.secho(f"\n👻 {mode_label(ctx)}Ghostarch installation", fg="cyan", bold=True)

    result = run_full_install(
        ClickPrompter(noninteractive=ctx.obj.get("noninteractive", False)),
        config_path=ctx.obj.get("config_path"),
        skip_zsh=skip_zsh,
        skip_omz=skip_omz,
        skip_blackarch=skip_blackarch,
        skip_user=skip_user,
        skip_workdir=skip_workdir,
        dry_run=ctx.obj.get("dry_run", False),
        mock_mode=ctx.obj.get("mock", False),
    )

    print_report(result.report, verbose=ctx.obj.get("verbose", False))

    if result.error:
        fail(result.error)

    click.echo()
    click.secho("✅ Ghostarch installation complete", fg="green", bold=True)
    click.echo(f"   User: {result.target_user}")
    click.echo(f"   Working directory: {result.workdir or 'not configured'}")
    if result.wsl_configured:
        print_wsl_restart(result.wsl_distro)
    click.echo()
    click.echo("   Next steps:")
    click.echo("     1. Run: ghostarch tools")
    click.echo("     2. (Optional) Run: ghostarch nvidia")
    click.echo()
