"""Custom exception hierarchy for ticli.

All exceptions that cross layer boundaries must inherit from
:class:`TicliError`.  Raw exceptions from the filesystem, ``json`` or
plugin modules must not propagate beyond the infrastructure layer; they
are caught there and re-raised as a typed subclass defined here.

Hierarchy
---------
TicliError
├── ConfigLoadError
├── ConfigOverrideParseError
├── SDKNotFoundError
├── SDKIncompatibleError
├── PluginLoadError
├── CommandArgumentError
├── CommandFailedError
├── SelectionCancelledError
└── EnvironmentError
"""

from __future__ import annotations

from pathlib import Path


class TicliError(Exception):
    """Base exception for all ticli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Configuration ---------------------------------------------------------

class ConfigLoadError(TicliError):
    """Raised when the persisted config file exists but cannot be parsed."""


class ConfigOverrideParseError(TicliError):
    """Raised for a malformed ``--config`` JSON blob.

    Recoverable: the override is skipped and the error is reported as a
    warning.
    """


# --- SDK resolution --------------------------------------------------------

class SDKNotFoundError(TicliError):
    """Raised when the SDK selector matches nothing installed."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        selector: str | None = None,
        available: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message, hint=hint)
        self.selector: str | None = selector
        self.available: tuple[str, ...] = available


class SDKIncompatibleError(TicliError):
    """Raised when the resolved SDK is older than the supported minimum."""


# --- Plugins ---------------------------------------------------------------

class PluginLoadError(TicliError):
    """Raised when a single command or hook module fails to load.

    The scanner catches this, logs it and moves on to the next module.
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to load plugin {path}: {reason}")
        self.path: Path = path
        self.reason: str = reason


# --- Commands --------------------------------------------------------------

class CommandArgumentError(TicliError):
    """Raised when argv cannot be parsed against a command schema."""


class CommandFailedError(TicliError):
    """Raised by command handlers to report a user-facing failure."""


class SelectionCancelledError(TicliError):
    """Raised when the user dismisses an interactive prompt."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(TicliError):
    """Raised when an optional runtime dependency is not available."""

