"""Domain models for ticli.

Value objects are **frozen** dataclasses with no behaviour beyond data
access and small derived properties.  They carry zero I/O.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

LATEST: str = "latest"
"""Version selector token meaning "greatest installed version"."""

DEFAULT_HOOK_PRIORITY: int = 1000


# ---------------------------------------------------------------------------
# SDK descriptors
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SDKManifest:
    """Parsed ``manifest.json`` of an installed SDK."""

    version: str | None
    """Semantic version used for compatibility checks, if declared."""

    raw: Mapping[str, Any] = field(default_factory=dict, compare=False)
    """The manifest document as read from disk."""


@dataclass(frozen=True, slots=True)
class PlatformDescriptor:
    """A platform add-on bundled inside an SDK."""

    name: str
    path: Path


@dataclass(frozen=True, slots=True)
class SDKDescriptor:
    """One installed SDK found during a scan pass."""

    name: str
    """Install directory name, also the exact-match version selector."""

    path: Path
    """Install root."""

    manifest: SDKManifest

    platforms: tuple[PlatformDescriptor, ...] = ()
    """Platform add-ons, sorted by name."""

    @property
    def version(self) -> str:
        """Manifest version, falling back to :attr:`name`."""
        return self.manifest.version or self.name

    @property
    def commands_dir(self) -> Path:
        return self.path / "cli" / "commands"

    @property
    def hooks_dir(self) -> Path:
        return self.path / "cli" / "hooks"

    def platform(self, name: str) -> PlatformDescriptor | None:
        """Return the platform add-on called *name*, if installed."""
        return next((p for p in self.platforms if p.name == name), None)


# ---------------------------------------------------------------------------
# Plugin registrations
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandSchema:
    """Declarative configuration of a command, loaded without running it.

    ``flags`` and ``options`` map a long name to its settings
    (``abbr``, ``default``, ``desc``, ``negate`` for flags, ``hint`` for
    options).
    """

    description: str = ""
    flags: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    options: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    subcommands: tuple[str, ...] = ()
    skip_banner: bool = False

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any],
        *,
        description: str = "",
    ) -> CommandSchema:
        """Build a schema from a plugin's ``config`` mapping.

        Raises
        ------
        TypeError
            If a section has the wrong shape.
        """
        flags = raw.get("flags") or {}
        options = raw.get("options") or {}
        if not isinstance(flags, Mapping) or not isinstance(options, Mapping):
            raise TypeError("'flags' and 'options' must be mappings")
        for section in (flags, options):
            for name, settings in section.items():
                if not isinstance(settings, Mapping):
                    raise TypeError(f"settings for {name!r} must be a mapping")

        subcommands = raw.get("subcommands") or ()
        if isinstance(subcommands, Mapping):
            subcommands = tuple(subcommands)
        if isinstance(subcommands, str) or not all(isinstance(s, str) for s in subcommands):
            raise TypeError("'subcommands' must be a list of names")

        return cls(
            description=str(raw.get("desc") or raw.get("description") or description),
            flags={str(k): dict(v) for k, v in flags.items()},
            options={str(k): dict(v) for k, v in options.items()},
            subcommands=tuple(subcommands),
            skip_banner=bool(raw.get("skip_banner", False)),
        )


@dataclass(frozen=True, slots=True)
class CommandRegistration:
    """A command known to the processor, keyed by :attr:`name`."""

    name: str
    source_path: Path | None
    """Module the command came from; ``None`` for built-in commands."""

    configuration: CommandSchema
    handler: Callable[..., Any] = field(compare=False, repr=False)
    """Called as ``handler(ctx, invocation)`` at dispatch time only."""

    @property
    def is_builtin(self) -> bool:
        return self.source_path is None


@dataclass(frozen=True, slots=True)
class HookRegistration:
    """A lifecycle callback registered for :attr:`event_name`."""

    event_name: str
    source_path: Path | None
    handler: Callable[..., Any] = field(compare=False, repr=False)
    priority: int = DEFAULT_HOOK_PRIORITY
    """Lower runs first; equal priorities keep registration order."""


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    """Parsed argv handed to a command handler."""

    name: str
    options: Mapping[str, Any]
    positionals: tuple[str, ...] = ()

    def get(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)
