"""
Command adapters: run argv commands and turn the result into a Receipt.

``CommandAdapter`` is the base for every adapter that shells out
(pacman, useradd, git). Subclasses only build the argv; privilege
escalation, stdin, timeouts and receipt construction live here.

Common action params:
    sudo (bool): Prefix with ``sudo`` unless already root.
    run_as (str): Run as another user via ``sudo -u <user>``.
    input (str): Text fed to the command's stdin.
    stream (bool): Let output go straight to the terminal (long installs).
    timeout (int): Timeout in seconds (default: 3600).
    max_lines (int): Keep the first N output lines, then stop the command.
    cwd (str): Working directory.
"""

from __future__ import annotations

import logging
import os
import pwd
import shlex
import shutil
import subprocess
import threading
import time
from abc import abstractmethod

from ghostarch.adapters.base import Adapter, ExecutionContext
from ghostarch.core.models.action import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3600


def is_root() -> bool:
    """Whether the process runs with uid 0."""
    return os.geteuid() == 0


def current_user() -> str:
    """Login name of the effective user."""
    try:
        return pwd.getpwuid(os.geteuid()).pw_name
    except KeyError:
        return os.environ.get("USER", "root")


def privilege_prefix(sudo: bool = False, run_as: str | None = None) -> list[str]:
    """Build the ``sudo`` prefix for a command.

    ``run_as`` wins over ``sudo``; neither adds anything when the target
    is the current user (or when already root, for plain ``sudo``).
    """
    if run_as and run_as != current_user():
        return ["sudo", "-u", run_as]
    if sudo and not is_root():
        return ["sudo"]
    return []


class CommandAdapter(Adapter):
    """Base for adapters that execute a single external command."""

    #: Binary whose presence makes this adapter available.
    binary: str = "sh"

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    @abstractmethod
    def build_command(self, context: ExecutionContext) -> list[str]:
        """Return the argv (without privilege prefix) for this action.

        Raises:
            ValueError: If the params don't describe a valid command.
        """

    def full_command(self, context: ExecutionContext) -> list[str]:
        """argv including the ``sudo`` prefix."""
        prefix = privilege_prefix(
            sudo=bool(context.param("sudo", False)),
            run_as=context.param("run_as"),
        )
        return prefix + self.build_command(context)

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        try:
            argv = self.build_command(context)
        except ValueError as e:
            return False, str(e)
        if not argv:
            return False, "Empty command"

        cwd = context.param("cwd", context.working_dir)
        if cwd and not os.path.isdir(cwd):
            return False, f"Working directory does not exist: {cwd}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        argv = self.full_command(context)
        command = shlex.join(argv)
        stream = bool(context.param("stream", False))
        timeout = context.param("timeout", DEFAULT_TIMEOUT)
        cwd = context.param("cwd", context.working_dir)
        stdin = context.param("input")

        # stdin may carry a password: log the argv only.
        logger.debug("Executing: %s (cwd=%s)", command, cwd)
        max_lines = context.param("max_lines")
        if max_lines:
            return self._execute_head(context, argv, command, cwd, int(max_lines), timeout)

        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                input=stdin,
                capture_output=not stream,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command timed out after {timeout}s",
                metadata={"command": command, "timeout": timeout},
            )
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command not found: {argv[0]}",
                metadata={"command": command},
            )
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command execution error: {e}",
                metadata={"command": command},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return self.interpret(context, command, result, elapsed_ms)

    def _execute_head(
        self,
        context: ExecutionContext,
        argv: list[str],
        command: str,
        cwd: str | None,
        max_lines: int,
        timeout: int,
    ) -> Receipt:
        """Read stdout+stderr line by line; stop the command after ``max_lines``."""
        start = time.monotonic()
        try:
            proc = subprocess.Popen(
                argv,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command not found: {argv[0]}",
                metadata={"command": command},
            )

        killed = threading.Event()

        def _kill() -> None:
            killed.set()
            proc.kill()

        timer = threading.Timer(timeout, _kill)
        timer.start()
        lines: list[str] = []
        truncated = False
        try:
            for line in proc.stdout:
                lines.append(line.rstrip("\n"))
                if len(lines) >= max_lines:
                    truncated = True
                    break
            if truncated:
                proc.terminate()
                try:
                    proc.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    proc.kill()
            proc.wait()
        finally:
            timer.cancel()
            proc.stdout.close()

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = "\n".join(lines).strip()
        metadata = {"command": command, "return_code": proc.returncode, "truncated": truncated}

        if killed.is_set() and not truncated:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command timed out after {timeout}s",
                duration_ms=elapsed_ms,
                metadata={**metadata, "stdout": output, "timeout": timeout},
            )
        if truncated or proc.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=output,
                duration_ms=elapsed_ms,
                metadata=metadata,
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=f"Command exited with code {proc.returncode}",
            duration_ms=elapsed_ms,
            metadata={**metadata, "stdout": output},
        )

    def interpret(
        self,
        context: ExecutionContext,
        command: str,
        result: subprocess.CompletedProcess,
        elapsed_ms: int,
    ) -> Receipt:
        """Turn a finished process into a Receipt. Non-zero exit = failure."""
        output = (result.stdout or "").strip()
        stderr = (result.stderr or "").strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=output,
                duration_ms=elapsed_ms,
                metadata={
                    "command": command,
                    "return_code": result.returncode,
                    "stderr": stderr,
                },
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=stderr or f"Command exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={
                "command": command,
                "return_code": result.returncode,
                "stdout": output,
            },
        )


class ShellCommandAdapter(CommandAdapter):
    """Execute an arbitrary argv command.

    Action params:
        argv (list[str]): The command to execute.
    """

    @property
    def name(self) -> str:
        return "shell"

    def build_command(self, context: ExecutionContext) -> list[str]:
        argv = context.param("argv")
        if not argv:
            raise ValueError("Missing required param: 'argv'")
        if isinstance(argv, str):
            return shlex.split(argv)
        return [str(a) for a in argv]
