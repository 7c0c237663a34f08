"""
Prompt-with-default input.

Core services ask questions through a ``Prompter`` and never read stdin
themselves. In non-interactive mode every question resolves to its
default. The CLI plugs in a click-backed prompter; tests use
``ScriptedPrompter``.
"""

from __future__ import annotations

from collections.abc import Iterable

_YES = {"y", "yes"}
_NO = {"n", "no"}


class Prompter:
    """Base prompter: non-interactive unless a subclass can read answers."""

    def __init__(self, noninteractive: bool = True):
        self.noninteractive = noninteractive

    # ── Hooks ───────────────────────────────────────────────────

    def _read(self, prompt: str, default: str) -> str:
        """Read one answer. Subclasses implement the actual input."""
        return default

    def _read_secret(self, prompt: str) -> str:
        """Read one answer without echo."""
        return ""

    def echo(self, message: str = "") -> None:
        """Show informational text to the user."""

    # ── Questions ───────────────────────────────────────────────

    def ask(self, prompt: str, default: str = "") -> str:
        """Ask a question; empty input means the default."""
        if self.noninteractive:
            return default
        answer = self._read(prompt, default)
        return answer.strip() or default

    def confirm(self, prompt: str = "Continue?", default: bool = True) -> bool:
        """Yes/no question. Anything unrecognised means the default."""
        if self.noninteractive:
            return True
        hint = "Y/n" if default else "y/N"
        answer = self._read(f"{prompt} [{hint}]", "").strip().lower()
        if answer in _YES:
            return True
        if answer in _NO:
            return False
        return default

    def ask_yes_no(self, prompt: str, default: str = "yes") -> bool:
        """``(yes/no)`` question with a textual default, as in the workdir prompts."""
        answer = self.ask(f"{prompt} (yes/no)", default).lower()
        return answer in _YES

    def secret(self, prompt: str) -> str:
        """Hidden input (passwords). Empty in non-interactive mode."""
        if self.noninteractive:
            return ""
        return self._read_secret(prompt)


class ScriptedPrompter(Prompter):
    """Answers questions from a fixed script, in order.

    An exhausted script answers with the default, like pressing Enter.
    """

    def __init__(self, answers: Iterable[str] = (), secrets: Iterable[str] = ()):
        super().__init__(noninteractive=False)
        self._answers = list(answers)
        self._secrets = list(secrets)
        self.asked: list[str] = []
        self.shown: list[str] = []

    def _read(self, prompt: str, default: str) -> str:
        self.asked.append(prompt)
        return self._answers.pop(0) if self._answers else ""

    def _read_secret(self, prompt: str) -> str:
        self.asked.append(prompt)
        return self._secrets.pop(0) if self._secrets else ""

    def echo(self, message: str = "") -> None:
        self.shown.append(message)
