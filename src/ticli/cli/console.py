"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.
"""

from __future__ import annotations

import sys
from typing import Any

from ticli.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console(*, stderr: bool = True, colors: bool = True) -> Any:
    """Create a Rich console instance targeting stderr or stdout."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr, no_color=not colors, highlight=False)


class ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback.

    Parameters
    ----------
    stderr:
        Write to stderr (default) instead of stdout.
    colors:
        When ``False`` Rich renders without color.
    quiet:
        When ``True`` nothing is printed.
    """

    def __init__(self, *, stderr: bool = True, colors: bool = True, quiet: bool = False) -> None:
        self.stderr: bool = stderr
        self.colors: bool = colors
        self.quiet: bool = quiet

    def print(self, *objects: object, markup: bool = True) -> None:
        """Render with Rich when available, else plain print."""
        if self.quiet:
            return
        try:
            rich_console = get_rich_console(stderr=self.stderr, colors=self.colors)
        except EnvironmentError:
            print(*objects, file=sys.stderr if self.stderr else sys.stdout)
            return
        rich_console.print(*objects, markup=markup, soft_wrap=True)


console = ConsoleProxy()
"""Stderr console used by the error boundary; never silenced."""


def escape(text: object) -> str:
    """Escape Rich markup in *text*; identity when Rich is missing."""
    try:
        from rich.markup import escape as rich_escape
    except ModuleNotFoundError:
        return str(text)
    return rich_escape(str(text))
