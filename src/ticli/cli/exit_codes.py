"""Process exit codes returned by :func:`ticli.cli.app.cli`.

Command handlers and the processor return these; only the error
boundary turns exceptions into them.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The command (or ``--version``/``help``) finished normally."""

GENERAL_ERROR: int = 1
"""Fatal bootstrap failure, bad command argv, or a command reported failure."""

UNEXPECTED_ERROR: int = 2
"""An exception outside the :class:`~ticli.exceptions.TicliError` tree."""

KEYBOARD_INTERRUPT: int = 130
"""Ctrl+C; 128 + SIGINT."""
