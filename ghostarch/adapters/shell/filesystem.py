"""
Filesystem adapter: file and directory operations on paths the
installing user owns.

Privileged writes (``/etc/wsl.conf``, another user's home) go through
the shell adapter with ``sudo tee`` instead.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from ghostarch.adapters.base import Adapter, ExecutionContext
from ghostarch.core.models.action import Receipt

_OPERATIONS = {"write", "mkdir", "copy", "remove"}


class FilesystemAdapter(Adapter):
    """File and directory operations with receipts.

    Action params:
        operation (str): One of write, mkdir, copy, remove.
        path (str): Target path (relative to working_dir or absolute).
        content (str): Content for write.
        source (str): Source path for copy.
    """

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.param("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"

        if operation not in _OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_OPERATIONS))}"

        if not context.param("path"):
            return False, "Missing required param: 'path'"

        if operation == "write" and "content" not in context.action.params:
            return False, f"Missing required param: 'content' for {operation} operation"

        if operation == "copy" and not context.param("source"):
            return False, "Missing required param: 'source' for copy operation"

        return True, ""

    def _resolve(self, context: ExecutionContext, raw: str) -> Path:
        target = Path(raw).expanduser()
        if not target.is_absolute() and context.working_dir:
            target = Path(context.working_dir) / target
        return target

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.param("operation")
        target = self._resolve(context, context.param("path"))

        try:
            handler = getattr(self, f"_{operation}")
            return handler(context, target)
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"operation": operation, "path": str(target)},
            )

    def _write(self, ctx: ExecutionContext, target: Path) -> Receipt:
        content = ctx.param("content")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Written {len(content)} bytes to {target}",
            metadata={"path": str(target), "size": len(content)},
        )

    def _mkdir(self, ctx: ExecutionContext, target: Path) -> Receipt:
        target.mkdir(parents=True, exist_ok=True)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Directory created: {target}",
            metadata={"path": str(target)},
        )

    def _copy(self, ctx: ExecutionContext, target: Path) -> Receipt:
        source = self._resolve(ctx, ctx.param("source"))
        if not source.is_file():
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Source not found: {source}",
            )
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Copied {source} to {target}",
            metadata={"source": str(source), "path": str(target)},
        )

    def _remove(self, ctx: ExecutionContext, target: Path) -> Receipt:
        target.unlink(missing_ok=True)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Removed {target}",
            metadata={"path": str(target)},
        )

