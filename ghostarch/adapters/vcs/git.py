"""
Git adapter: shallow clones and repository initialisation.

Action params:
    operation (str): clone | init | is_repo
    url (str): Repository URL for clone.
    dest (str): Destination directory for clone.
    branch (str): Branch for clone.
    depth (int): Clone depth (default: 1).
    path (str): Repository path for init / is_repo.
"""

from __future__ import annotations

import subprocess

from ghostarch.adapters.base import ExecutionContext
from ghostarch.adapters.shell.command import CommandAdapter
from ghostarch.core.models.action import Receipt


class GitAdapter(CommandAdapter):
    """Run git commands."""

    binary = "git"

    @property
    def name(self) -> str:
        return "git"

    def build_command(self, context: ExecutionContext) -> list[str]:
        operation = context.param("operation", "")

        if operation == "clone":
            url = context.param("url")
            dest = context.param("dest")
            if not url or not dest:
                raise ValueError("clone requires 'url' and 'dest'")
            argv = ["git", "clone"]
            depth = context.param("depth", 1)
            if depth:
                argv += ["--depth", str(depth)]
            branch = context.param("branch")
            if branch:
                argv += ["--branch", branch]
            return argv + [url, dest]

        path = context.param("path")
        if not path:
            raise ValueError("Missing required param: 'path'")

        if operation == "init":
            return ["git", "-C", path, "init"]

        if operation == "is_repo":
            return ["git", "-C", path, "rev-parse", "--is-inside-work-tree"]

        raise ValueError(f"Unknown git operation '{operation}'")

    def interpret(
        self,
        context: ExecutionContext,
        command: str,
        result: subprocess.CompletedProcess,
        elapsed_ms: int,
    ) -> Receipt:
        if context.param("operation") != "is_repo":
            return super().interpret(context, command, result, elapsed_ms)

        is_repo = result.returncode == 0 and (result.stdout or "").strip() == "true"
        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=(result.stdout or "").strip(),
            duration_ms=elapsed_ms,
            metadata={"command": command, "is_repo": is_repo},
        )
