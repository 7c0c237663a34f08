"""
Ghostarch CLI entrypoint.

Usage:
    ghostarch --help
    ghostarch install
    ghostarch -n tools --skip-additional
    ghostarch config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from ghostarch import __version__
from ghostarch.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="ghostarch")
@click.option("--noninteractive", "-n", is_flag=True, help="Answer every prompt with its default.")
@click.option("--verbose", "-v", is_flag=True, help="Show every step result.")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors.")
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to ghostarch.yml (default: auto-detect).",
)
@click.option("--dry-run", is_flag=True, help="Validate and log every step, execute nothing.")
@click.option("--mock", is_flag=True, help="Use the mock adapter (no real execution).")
@click.pass_context
def cli(
    ctx: click.Context,
    noninteractive: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    dry_run: bool,
    mock: bool,
) -> None:
    """Ghostarch: Arch Linux on WSL2 with selected BlackArch tools."""
    ctx.ensure_object(dict)
    ctx.obj["noninteractive"] = noninteractive
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["dry_run"] = dry_run
    ctx.obj["mock"] = mock

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("GHOSTARCH_LOG_LEVEL", "INFO")

    from ghostarch.core.context import default_log_file

    setup_logging(
        level=level,
        log_file=os.environ.get("GHOSTARCH_LOG_FILE") or default_log_file(),
        log_file_level=os.environ.get("GHOSTARCH_LOG_FILE_LEVEL"),
    )


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option(
    "--manifest",
    "manifest_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to packages.yml (default: auto-detect).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, manifest_path: str | None, as_json: bool) -> None:
    """Validate ghostarch.yml and packages.yml."""
    from ghostarch.core.use_cases.config_check import check_config

    result = check_config(
        config_path=ctx.obj.get("config_path"),
        manifest_path=Path(manifest_path) if manifest_path else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.valid:
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Config: {result.config_path or 'defaults'}")
        click.echo(f"   Manifest: {result.manifest_path or 'none (config arrays)'}")
        if result.resolution:
            click.echo(f"   Mode: {result.resolution.mode}")
            click.echo(f"   Groups: {', '.join(g.name for g in result.resolution.groups)}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


@cli.command()
@click.option("--limit", "-l", default=10, show_default=True, help="Number of entries to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def history(limit: int, as_json: bool) -> None:
    """Show recent install runs."""
    from ghostarch.core.persistence.audit import AuditWriter

    entries = AuditWriter().read_recent(limit)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No install runs recorded yet.")
        return

    status_colors = {"ok": "green", "partial": "yellow", "failed": "red", "aborted": "red"}
    for entry in reversed(entries):
        click.echo(f"   {entry.timestamp[:19]}  {entry.operation_type:<8} ", nl=False)
        click.secho(f"{entry.status:<8}", fg=status_colors.get(entry.status, "white"), nl=False)
        label = " [dry-run]" if entry.dry_run else ""
        click.echo(f" {entry.actions_succeeded}/{entry.actions_total} steps{label}")
        if entry.target_user:
            click.echo(f"      user: {entry.target_user}")
        for err in entry.errors:
            click.secho(f"      {err}", fg="red")


# ── Register command groups ─────────────────────────────────────

from ghostarch.ui.cli.groups import groups  # noqa: E402
from ghostarch.ui.cli.phases import core, install, nvidia, tools  # noqa: E402

cli.add_command(core)
cli.add_command(tools)
cli.add_command(nvidia)
cli.add_command(install)
cli.add_command(groups)


if __name__ == "__main__":
    cli()
