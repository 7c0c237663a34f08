"""
Terminal prompter backed by ``click.prompt``.
"""

from __future__ import annotations

import click

from ghostarch.core.services.prompts import Prompter


class ClickPrompter(Prompter):
    """Ask questions on the terminal; hidden input for passwords."""

    def _read(self, prompt: str, default: str) -> str:
        return click.prompt(prompt, default=default, show_default=bool(default))

    def _read_secret(self, prompt: str) -> str:
        return click.prompt(prompt, default="", hide_input=True, show_default=False)

    def echo(self, message: str = "") -> None:
        click.echo(message)
