"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations, so that scanning and resolution can be exercised
against a virtual filesystem.
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol


class DirectoryLister(Protocol):
    """Contract for listing the immediate children of a directory."""

    def __call__(self, path: Path) -> Sequence[Path]:
        """Return the entries of *path* in a stable order.

        A missing or unreadable directory yields an empty sequence.
        """
        ...  # pragma: no cover


class ModuleLoader(Protocol):
    """Contract for loading a plugin module from a file path."""

    def __call__(self, path: Path) -> Any:
        """Load *path* and return the module object.

        Raises
        ------
        PluginLoadError
            When the module cannot be imported.
        """
        ...  # pragma: no cover


class LocaleProbe(Protocol):
    """Contract for asking the host system for its locale."""

    def __call__(self) -> Awaitable[str]:
        """Return a locale string such as ``"en_US"``, or ``""``."""
        ...  # pragma: no cover


class AnalyticsSender(Protocol):
    """Contract for the fire-and-forget telemetry transport."""

    def send(self, event: Mapping[str, Any]) -> None:
        """Queue *event* for delivery.  Must not raise."""
        ...  # pragma: no cover

    def auth_status(self) -> Mapping[str, Any]:
        """Return login/session fields merged into the exit event."""
        ...  # pragma: no cover


class Translator(Protocol):
    """Contract for the message catalog lookup."""

    def __call__(self, key: str, *args: object) -> str:
        ...  # pragma: no cover
