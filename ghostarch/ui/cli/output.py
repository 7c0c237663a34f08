"""
Shared terminal rendering for the install commands.
"""

from __future__ import annotations

import sys

import click

from ghostarch.core.engine.executor import ExecutionReport

_STATUS_COLORS = {"ok": "green", "partial": "yellow", "failed": "red", "aborted": "red"}


def mode_label(ctx: click.Context) -> str:
    if ctx.obj.get("dry_run"):
        return "[dry-run] "
    if ctx.obj.get("mock"):
        return "[mock] "
    return ""


def print_report(report: ExecutionReport | None, verbose: bool = False) -> None:
    """Step results (verbose only) and the one-line result."""
    if report is None:
        return

    if verbose:
        for step in report.steps:
            receipt = step.receipt
            if receipt.ok:
                click.secho(f"   ✓ {step.name}", fg="green")
            elif receipt.failed:
                click.secho(f"   ✗ {step.name}", fg="red")
                if receipt.error:
                    for line in receipt.error.split("\n")[:5]:
                        click.echo(f"     │ {line}")
            else:
                click.secho(f"   ⊘ {step.name} ", fg="yellow", nl=False)
                click.echo(f"({receipt.output})")

    if report.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warning in report.warnings:
            click.echo(f"   • {warning}")

    click.echo()
    click.secho(
        f"   Result: {report.succeeded}/{report.total} steps succeeded ({report.status})",
        fg=_STATUS_COLORS.get(report.status, "white"),
        bold=True,
    )


def print_wsl_restart(distro: str) -> None:
    click.echo()
    click.secho("   Restart WSL to apply the default user:", fg="cyan")
    click.echo(f"     wsl --terminate {distro}")
    click.echo(f"     wsl -d {distro}")


def fail(message: str) -> None:
    """Print the error in red and exit 1."""
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)
