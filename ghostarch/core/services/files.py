"""
File writes that may need privileges.

Files the invoking user owns go through the filesystem adapter. Files
owned by root or by another account (``/etc/wsl.conf``, the target
user's ``.zshrc``) are written with ``sudo tee`` and then chowned.
"""

from __future__ import annotations

from pathlib import Path

from ghostarch.adapters.shell.command import current_user
from ghostarch.core.engine.executor import OnFailure, StepRunner
from ghostarch.core.models.action import Receipt


def write_file(
    runner: StepRunner,
    name: str,
    path: Path,
    content: str,
    *,
    privileged: bool = False,
    on_failure: OnFailure = "warn",
) -> Receipt:
    """Write ``content`` to ``path``."""
    if not privileged:
        return runner.run(
            "filesystem",
            name,
            {"operation": "write", "path": str(path), "content": content},
            on_failure=on_failure,
        )
    return runner.run(
        "shell",
        name,
        {"argv": ["tee", str(path)], "input": content, "sudo": True},
        on_failure=on_failure,
    )


def copy_file(
    runner: StepRunner,
    name: str,
    source: Path,
    dest: Path,
    *,
    privileged: bool = False,
) -> Receipt:
    """Copy a file, with ``sudo cp`` when privileged."""
    if not privileged:
        return runner.run(
            "filesystem",
            name,
            {"operation": "copy", "source": str(source), "path": str(dest)},
        )
    return runner.run(
        "shell",
        name,
        {"argv": ["cp", str(source), str(dest)], "sudo": True},
    )


def chown_to(runner: StepRunner, name: str, path: Path, user: str) -> Receipt | None:
    """Hand ``path`` to ``user``; nothing to do for the current user."""
    if user == current_user():
        return None
    return runner.run(
        "users",
        name,
        {"operation": "chown", "username": user, "path": str(path), "sudo": True},
    )
