"""
Runtime context: where Ghostarch keeps its own files.

The state directory (install log, audit history) is set ONCE at startup
by the CLI, or by tests via ``set_state_dir(tmp_path)``. Until then it
resolves from ``GHOSTARCH_HOME`` or ``~/.ghostarch``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

#: Packaged templates (zshrc, workspace README).
TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

#: Checkout root, used to report whether Ghostarch runs from a git clone.
INSTALL_ROOT = Path(__file__).resolve().parent.parent.parent

_state_dir: Optional[Path] = None


def set_state_dir(path: Path) -> None:
    """Register the state directory for the current process."""
    global _state_dir
    _state_dir = path


def get_state_dir() -> Path:
    """Return the state directory (not created here)."""
    if _state_dir is not None:
        return _state_dir
    env = os.environ.get("GHOSTARCH_HOME")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".ghostarch"


def default_log_file() -> Path:
    """``install.log`` inside the state directory."""
    return get_state_dir() / "install.log"
