"""
User account adapter: ``useradd``, ``chpasswd``, ``chsh``, ``chown``.

Action params:
    operation (str): create | set_password | set_shell | chown
    username (str): Target account.
    shell (str): Login shell for create/set_shell.
    groups (list[str]): Supplementary groups for create.
    password (str): New password for set_password (sent on stdin).
    path (str): Path for chown.
"""

from __future__ import annotations

from ghostarch.adapters.base import ExecutionContext
from ghostarch.adapters.shell.command import CommandAdapter
from ghostarch.core.models.action import Receipt


class UserAccountAdapter(CommandAdapter):
    """Manage local user accounts."""

    binary = "useradd"

    @property
    def name(self) -> str:
        return "users"

    def build_command(self, context: ExecutionContext) -> list[str]:
        operation = context.param("operation", "")
        username = context.param("username", "")

        if operation == "set_shell":
            argv = ["chsh", "-s", context.param("shell", "/bin/zsh")]
            return argv + [username] if username else argv

        if not username:
            raise ValueError("Missing required param: 'username'")

        if operation == "create":
            argv = ["useradd", "-m", "-s", context.param("shell", "/bin/zsh")]
            groups = context.param("groups") or []
            if groups:
                argv += ["-G", ",".join(groups)]
            return argv + [username]

        if operation == "set_password":
            if not context.param("password"):
                raise ValueError("Missing required param: 'password'")
            return ["chpasswd"]

        if operation == "chown":
            path = context.param("path")
            if not path:
                raise ValueError("Missing required param: 'path'")
            owner = f"{username}:{context.param('group') or username}"
            argv = ["chown"]
            if context.param("recursive", False):
                argv.append("-R")
            return argv + [owner, path]

        raise ValueError(f"Unknown users operation '{operation}'")

    def execute(self, context: ExecutionContext) -> Receipt:
        if context.param("operation") == "set_password":
            context.action.params["input"] = (
                f"{context.param('username')}:{context.param('password')}\n"
            )
        return super().execute(context)

