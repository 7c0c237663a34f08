"""
Pacman adapter: system update, package install and package queries.

Action params:
    operation (str): update | install | query
    packages (list[str]): Packages for install.
    package (str): Package for query.
    overwrite (str): Glob passed as ``--overwrite=<glob>`` on install.
    needed (bool): Pass ``--needed`` on install (default: True).
"""

from __future__ import annotations

import subprocess

from ghostarch.adapters.base import ExecutionContext
from ghostarch.adapters.shell.command import CommandAdapter
from ghostarch.core.models.action import Receipt


class PacmanAdapter(CommandAdapter):
    """Drive ``pacman`` non-interactively."""

    binary = "pacman"

    @property
    def name(self) -> str:
        return "pacman"

    def build_command(self, context: ExecutionContext) -> list[str]:
        operation = context.param("operation", "")

        if operation == "update":
            return ["pacman", "-Syu", "--noconfirm"]

        if operation == "install":
            packages = [p for p in context.param("packages", []) if p]
            if not packages:
                raise ValueError("No packages to install")
            argv = ["pacman", "-S", "--noconfirm"]
            if context.param("needed", True):
                argv.append("--needed")
            overwrite = context.param("overwrite")
            if overwrite:
                argv.append(f"--overwrite={overwrite}")
            return argv + packages

        if operation == "query":
            package = context.param("package")
            if not package:
                raise ValueError("Missing required param: 'package'")
            return ["pacman", "-Qs", package]

        raise ValueError(f"Unknown pacman operation '{operation}'")

    def interpret(
        self,
        context: ExecutionContext,
        command: str,
        result: subprocess.CompletedProcess,
        elapsed_ms: int,
    ) -> Receipt:
        if context.param("operation") != "query":
            return super().interpret(context, command, result, elapsed_ms)

        # pacman -Qs exits 1 when nothing matches: that's an answer, not a failure.
        installed = result.returncode == 0 and bool((result.stdout or "").strip())
        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=(result.stdout or "").strip(),
            duration_ms=elapsed_ms,
            metadata={"command": command, "installed": installed},
        )
