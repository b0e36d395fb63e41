"""Terminal messages: warnings, success notes and text styling."""

from __future__ import annotations

import os

from rich.console import Console
from rich.text import Text


def use_emoji() -> bool:
    """Return True unless the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" not in os.environ


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True, emoji=False)


def _announce(symbol: str, message: str, colour: str) -> None:
    line = Text.assemble((symbol, colour), " ", (str(message), colour))
    _console().print(line)


def warn(message: str) -> None:
    """Print a red warning line."""
    _announce("⚠️ " if use_emoji() else "!", message, "red")


def success(message: str) -> None:
    """Print a green success line."""
    _announce("✅" if use_emoji() else "✓", message, "green")


def bold(text: object) -> Text:
    """Return the text styled bold, ready to be printed on a console."""
    return Text(str(text), style="bold")