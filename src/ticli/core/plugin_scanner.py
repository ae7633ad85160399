"""Discovery of command and lifecycle-hook plugin modules.

The scanner depends on an injected :class:`DirectoryLister` and
:class:`ModuleLoader`, so it can be exercised against a virtual
directory tree.  It only reads declarative data from the modules it
loads: command handlers are not called until dispatch, and hook
handlers are not called until their event fires.

Guarantees
----------
* A module that fails to load is logged and skipped; the scan goes on.
* Each root is scanned at most once per scanner instance.
* Registrations come back in sorted file order, so repeated scans of an
  unchanged tree produce identical results.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

from ticli.core.models import (
    DEFAULT_HOOK_PRIORITY,
    CommandRegistration,
    CommandSchema,
    HookRegistration,
)
from ticli.core.protocols import DirectoryLister, ModuleLoader
from ticli.exceptions import PluginLoadError

logger = logging.getLogger(__name__)


class PluginScanner:
    """Accumulating scanner for plugin roots.

    Parameters
    ----------
    lister:
        Returns the entries of a directory.
    loader:
        Loads one module from a path.
    """

    def __init__(self, lister: DirectoryLister, loader: ModuleLoader) -> None:
        self._lister: DirectoryLister = lister
        self._loader: ModuleLoader = loader
        self._scanned_roots: set[tuple[str, Path]] = set()
        self.errors: list[PluginLoadError] = []
        """Every module skipped so far, in the order it was skipped."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def scan_commands(self, root_dir: Path) -> list[CommandRegistration]:
        """Return a registration for every command module in *root_dir*."""
        registrations: list[CommandRegistration] = []
        for path, module in self._iter_modules("commands", root_dir):
            if not hasattr(module, "config"):
                logger.debug("Skipping %s: no command configuration", path)
                continue
            try:
                registrations.append(self._command_from_module(path, module))
            except PluginLoadError as exc:
                self._skip(exc)
        logger.debug("Found %d command(s) in %s", len(registrations), root_dir)
        return registrations

    def scan_hooks(self, root_dir: Path) -> list[HookRegistration]:
        """Return every hook declared by the modules in *root_dir*."""
        registrations: list[HookRegistration] = []
        for path, module in self._iter_modules("hooks", root_dir):
            declared = getattr(module, "HOOKS", None)
            if declared is None:
                logger.debug("Skipping %s: no HOOKS table", path)
                continue
            try:
                registrations.extend(self._hooks_from_module(path, module, declared))
            except PluginLoadError as exc:
                self._skip(exc)
        logger.debug("Found %d hook(s) in %s", len(registrations), root_dir)
        return registrations

    # ------------------------------------------------------------------
    # Module iteration
    # ------------------------------------------------------------------

    def _iter_modules(self, kind: str, root_dir: Path) -> Iterator[tuple[Path, Any]]:
        key = (kind, root_dir)
        if key in self._scanned_roots:
            logger.debug("Already scanned %s for %s", root_dir, kind)
            return
        self._scanned_roots.add(key)

        for path in sorted(self._lister(root_dir)):
            if path.suffix != ".py" or path.name.startswith("_"):
                continue
            try:
                module = self._loader(path)
            except PluginLoadError as exc:
                self._skip(exc)
                continue
            except Exception as exc:
                self._skip(PluginLoadError(path, str(exc) or type(exc).__name__))
                continue
            yield path, module

    def _skip(self, exc: PluginLoadError) -> None:
        self.errors.append(exc)
        logger.warning("%s (skipped)", exc)

    # ------------------------------------------------------------------
    # Module -> registration parsers
    # ------------------------------------------------------------------

    @staticmethod
    def _command_from_module(path: Path, module: Any) -> CommandRegistration:
        handler = getattr(module, "run", None)
        if not callable(handler):
            raise PluginLoadError(path, "command module does not define run()")

        raw = module.config
        try:
            if callable(raw):
                raw = raw()
            if not isinstance(raw, Mapping):
                raise TypeError("config must be a mapping")
            schema = CommandSchema.from_mapping(
                raw,
                description=str(getattr(module, "DESCRIPTION", "") or ""),
            )
        except Exception as exc:
            raise PluginLoadError(path, f"invalid command configuration: {exc}") from exc

        return CommandRegistration(
            name=str(getattr(module, "NAME", path.stem)),
            source_path=path,
            configuration=schema,
            handler=handler,
        )

    @staticmethod
    def _hooks_from_module(
        path: Path,
        module: Any,
        declared: object,
    ) -> list[HookRegistration]:
        if not isinstance(declared, Mapping):
            raise PluginLoadError(path, "HOOKS must map event names to handlers")

        default_priority = getattr(module, "PRIORITY", DEFAULT_HOOK_PRIORITY)
        registrations: list[HookRegistration] = []
        for event_name, entries in declared.items():
            if not isinstance(entries, (list, tuple)):
                entries = [entries]
            for entry in entries:
                handler, priority = _unpack_hook(path, event_name, entry, default_priority)
                registrations.append(
                    HookRegistration(
                        event_name=str(event_name),
                        source_path=path,
                        handler=handler,
                        priority=priority,
                    )
                )
        return registrations


def _unpack_hook(
    path: Path,
    event_name: object,
    entry: object,
    default_priority: object,
) -> tuple[Callable[..., Any], int]:
    """Return ``(handler, priority)`` for one entry of a ``HOOKS`` table."""
    priority: object = default_priority
    if isinstance(entry, Mapping):
        priority = entry.get("priority", default_priority)
        entry = entry.get("handler")
    if not callable(entry):
        raise PluginLoadError(path, f"hook for {event_name!r} is not callable")
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise PluginLoadError(path, f"hook priority for {event_name!r} must be an integer")
    return entry, priority


def merge_commands(
    registry: dict[str, CommandRegistration],
    registrations: Sequence[CommandRegistration],
) -> None:
    """Add *registrations* to *registry*; a later name replaces an earlier one."""
    for registration in registrations:
        previous = registry.get(registration.name)
        if previous is not None:
            logger.debug(
                "Command %r from %s shadows %s",
                registration.name,
                registration.source_path,
                previous.source_path,
            )
        registry[registration.name] = registration
