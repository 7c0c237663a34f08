"""
Logging configuration: central setup for the CLI.

Called once at startup by main.py. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console levels are resolved in precedence order:
    --debug  >  --verbose  >  --quiet  >  GHOSTARCH_LOG_LEVEL  >  INFO

The install log (``~/.ghostarch/install.log`` unless GHOSTARCH_LOG_FILE
says otherwise) always gets timestamped records.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ── Format strings ──────────────────────────────────────────────

_FMT_CONSOLE = "%(levelname)s %(message)s"

# DEBUG level: full diagnostic with file:line
_FMT_DEBUG = "%(levelname)s %(name)s:%(lineno)d: %(message)s"

# File output: always full detail
_FMT_FILE = "[%(asctime)s] [%(levelname)s] %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_TAGS = {
    logging.DEBUG: ("DEBUG", "\033[0;34m"),
    logging.INFO: ("INFO", "\033[0;32m"),
    logging.WARNING: ("WARN", "\033[1;33m"),
    logging.ERROR: ("ERROR", "\033[0;31m"),
    logging.CRITICAL: ("ERROR", "\033[0;31m"),
}
_RESET = "\033[0m"


class LevelTagFormatter(logging.Formatter):
    """Render the level as ``[INFO]``/``[WARN]``/``[ERROR]``, coloured on a TTY."""

    def __init__(self, fmt: str, color: bool = False):
        super().__init__(fmt)
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        tag, color = _TAGS.get(record.levelno, (record.levelname, ""))
        label = f"[{tag}]"
        if self._color and color:
            label = f"{color}{label}{_RESET}"
        original = record.levelname
        record.levelname = label
        try:
            return super().format(record)
        finally:
            record.levelname = original


class FileTagFormatter(logging.Formatter):
    """File records use the same short level tags as the console."""

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        record.levelname = _TAGS.get(record.levelno, (original, ""))[0]
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console log level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path to the install log. Parent directories
            are created; an unwritable log file is skipped silently.
        log_file_level: Optional separate level for the log file.
            Defaults to INFO, or DEBUG when the console is at DEBUG.
    """
    numeric_level = _parse_level(level)

    # ── Console handler (stderr) ────────────────────────────────
    fmt = _FMT_DEBUG if numeric_level <= logging.DEBUG else _FMT_CONSOLE
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(LevelTagFormatter(fmt, color=_isatty(sys.stderr)))

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.addHandler(console)

    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        default_file_level = "DEBUG" if numeric_level <= logging.DEBUG else "INFO"
        file_level = _parse_level(log_file_level or default_file_level)
        path = Path(log_file).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(path, encoding="utf-8")
        except OSError:
            fh = None
        if fh is not None:
            effective_level = min(effective_level, file_level)
            fh.setLevel(file_level)
            fh.setFormatter(FileTagFormatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
            root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def _isatty(stream: object) -> bool:
    try:
        return bool(stream.isatty())  # type: ignore[attr-defined]
    except (AttributeError, ValueError):
        return False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.INFO
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
