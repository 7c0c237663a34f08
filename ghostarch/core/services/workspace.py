"""
Working directory scaffolding and the generated README.

The README template lives in ``templates/workspace_readme.md`` and uses
``__PLACEHOLDER__`` substitution. Unknown placeholders are left as-is.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from ghostarch.adapters.shell.command import current_user
from ghostarch.core.context import TEMPLATES_DIR
from ghostarch.core.engine.executor import StepRunner
from ghostarch.core.models.config import InstallConfig
from ghostarch.core.models.groups import ResolvedGroup
from ghostarch.core.services.accounts import user_home
from ghostarch.core.services.files import chown_to, write_file
from ghostarch.core.services.groups import BUILTIN_GROUPS
from ghostarch.core.services.prompts import Prompter

logger = logging.getLogger(__name__)

README_TEMPLATE = TEMPLATES_DIR / "workspace_readme.md"

_PLACEHOLDER = re.compile(r"__([A-Z][A-Z0-9_]*)__")


def substitute(template: str, values: dict[str, str]) -> str:
    """Replace ``__KEY__`` with ``values["KEY"]``."""
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def _mkdir(runner: StepRunner, name: str, path: Path, username: str) -> None:
    if username == current_user():
        runner.run("filesystem", name, {"operation": "mkdir", "path": str(path)})
    else:
        runner.run(
            "shell",
            name,
            {"argv": ["mkdir", "-p", str(path)], "run_as": username},
        )


def prompt_workdir_setup(
    runner: StepRunner,
    prompter: Prompter,
    config: InstallConfig,
    username: str,
    skip: bool = False,
) -> Path | None:
    """Create the working directory, optional git repo and subdirectories.

    Returns:
        The working directory, or None when skipped.
    """
    logger.info("=== Working Directory Setup ===")

    if skip:
        runner.warn("Skipping working directory setup")
        return None

    default = config.workdir or str(user_home(username) / "ghostarch")
    workdir = Path(prompter.ask("Enter working directory path", default)).expanduser()

    logger.info("Creating working directory: %s", workdir)
    _mkdir(runner, "create-workdir", workdir, username)

    if prompter.ask_yes_no("Initialize git repository in workdir?", "yes"):
        if (workdir / ".git").is_dir():
            logger.info("Git repository already exists")
        else:
            params = {"operation": "init", "path": str(workdir)}
            if username != current_user():
                params["run_as"] = username
            runner.run("git", "init-workdir", params, message="Failed to initialize git")

    if prompter.ask_yes_no("Create subdirectories (tools, exploits, wordlists)?", "yes"):
        for subdir in config.subdirectories:
            _mkdir(runner, f"create-subdir-{subdir}", workdir / subdir, username)
        logger.info("Subdirectories created")

    logger.info("Working directory setup complete: %s", workdir)
    return workdir


def _tools_section(groups: Sequence[ResolvedGroup] | None) -> str:
    if groups is not None and not groups:
        return "- No tool groups were installed."
    if groups is not None:
        entries = [(g.title, g.packages) for g in groups if g.packages]
    else:
        entries = [(b.description, list(b.defaults)) for b in BUILTIN_GROUPS]
    return "\n".join(f"- **{desc}**: {', '.join(pkgs)}." for desc, pkgs in entries)


def render_readme(
    username: str,
    workdir: Path | str,
    groups: Sequence[ResolvedGroup] | None = None,
    template: Path = README_TEMPLATE,
) -> str:
    """Render the workspace README."""
    return substitute(
        template.read_text(encoding="utf-8"),
        {
            "TARGET_USER": username,
            "WORKDIR": str(workdir),
            "TOOLS_INSTALLED": _tools_section(groups),
        },
    )


def write_readme(
    runner: StepRunner,
    username: str,
    workdir: Path,
    groups: Sequence[ResolvedGroup] | None = None,
) -> Path:
    """Generate ``README.md`` in the working directory and hand it to the user."""
    logger.info("Generating README...")
    readme = workdir / "README.md"
    write_file(
        runner,
        "write-readme",
        readme,
        render_readme(username, workdir, groups),
        privileged=username != current_user(),
    )
    chown_to(runner, "chown-readme", readme, username)
    return readme
