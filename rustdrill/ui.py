"""Coloured status messages for the terminal."""

from __future__ import annotations

import os

from rich.console import Console
from rich.text import Text


def no_emoji() -> bool:
    """Return True when the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" in os.environ


def styled(text: object, color: str | None = None, bold: bool = False) -> Text:
    """Return ``text`` as a rich Text with the given colour and weight."""
    parts = []
    if bold:
        parts.append("bold")
    if color:
        parts.append(color)
    return Text(str(text), style=" ".join(parts))


def _emit(symbol: str, message: str, color: str) -> None:
    line = Text.assemble(styled(symbol, color), " ", styled(message, color))
    Console(highlight=False, soft_wrap=True).print(line)


def warn(message: str) -> None:
    """Print a warning line in red."""
    _emit("!" if no_emoji() else "⚠️ ", message, "red")


def success(message: str) -> None:
    """Print a success line in green."""
    _emit("✓" if no_emoji() else "✅", message, "green")