"""
CLI commands for package groups.

Usage::

    ghostarch groups list
    ghostarch groups list --manifest packages.yml --json
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from ghostarch.ui.cli.output import fail


@click.group()
def groups() -> None:
    """Package groups: manifest, config arrays and defaults."""


@groups.command("list")
@click.option(
    "--manifest",
    "manifest_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to packages.yml (default: auto-detect).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_groups(ctx: click.Context, manifest_path: str | None, as_json: bool) -> None:
    """List the package groups that would be installed."""
    from ghostarch.core.config.loader import ConfigError
    from ghostarch.core.services.groups import format_group_listing
    from ghostarch.core.use_cases.tools_install import load_groups

    try:
        resolution = load_groups(
            config_path=ctx.obj.get("config_path"),
            manifest_path=Path(manifest_path) if manifest_path else None,
        )
    except ConfigError as e:
        fail(str(e))
        return

    if as_json:
        click.echo(json.dumps(resolution.model_dump(mode="json"), indent=2))
        return

    click.secho(f"Mode: {resolution.mode}", fg="cyan")
    click.echo(format_group_listing(resolution))
