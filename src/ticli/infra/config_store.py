"""Layered JSON configuration store.

Three layers, lowest precedence first:

``defaults``
    Programmatic defaults set with :meth:`ConfigStore.set_default`.
``file``
    The persisted JSON document.  :meth:`ConfigStore.set` writes here.
``override``
    Transient values from ``--config`` and from global-flag callbacks.
    Never written back to disk.

Reads merge the layers on the fly; lower layers are never mutated by a
write to a higher one.  Persistence only happens on :meth:`save`.

This module is the **only** place that reads or writes the config file.
All ``OSError`` / ``json`` failures are re-raised as
:class:`~ticli.exceptions.ConfigLoadError`.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from ticli.exceptions import ConfigLoadError, ConfigOverrideParseError
from ticli.infra.paths import default_config_path

logger = logging.getLogger(__name__)

_MISSING = object()


class ConfigStore:
    """Dotted-key access to the ``defaults``/``file``/``override`` layers.

    Parameters
    ----------
    default_path:
        Location used by :meth:`load` when no explicit path is given.
        Defaults to ``~/.ticli/config.json``.
    """

    def __init__(self, default_path: Path | None = None) -> None:
        self._default_path: Path = default_path or default_config_path()
        self._path: Path = self._default_path
        self.defaults: dict[str, Any] = {}
        self.file: dict[str, Any] = {}
        self.cli_override: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def get_config_path(self) -> Path:
        """Path the document was (or will be) loaded from and saved to."""
        return self._path

    def load(self, explicit_path: str | Path | None = None) -> ConfigStore:
        """Read the persisted document into the ``file`` layer.

        A missing file is treated as an empty document.

        Raises
        ------
        ConfigLoadError
            If the file exists but cannot be read or is not a JSON object.
        """
        self._path = Path(explicit_path).expanduser() if explicit_path else self._default_path
        if not self._path.is_file():
            logger.debug("No config file at %s", self._path)
            self.file = {}
            return self

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigLoadError(
                f"Unable to read config file {self._path}: {exc}",
            ) from exc
        except json.JSONDecodeError as exc:
            raise ConfigLoadError(
                f"Unable to parse config file {self._path}: {exc}",
                hint="Fix or remove the file, then run the command again.",
            ) from exc

        if not isinstance(document, dict):
            raise ConfigLoadError(
                f"Config file {self._path} must contain a JSON object.",
                hint="Fix or remove the file, then run the command again.",
            )
        self.file = document
        logger.debug("Loaded config from %s", self._path)
        return self

    def save(self) -> Path:
        """Write ``defaults`` merged with ``file`` to :meth:`get_config_path`."""
        document = deep_merge(self.defaults, self.file)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(document, indent=4) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ConfigLoadError(
                f"Unable to write config file {self._path}: {exc}",
                hint="Check that the directory exists and is writable.",
            ) from exc
        logger.debug("Saved config to %s", self._path)
        return self._path

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: str, fallback: Any = None) -> Any:
        """Return the value of dotted *key*, or *fallback*.

        The highest layer holding *key* wins.  When it holds a mapping,
        the mappings of all layers holding *key* are deep-merged.
        """
        return _merged_lookup(self._layers(), key, fallback)

    def get_persisted(self, key: str, fallback: Any = None) -> Any:
        """Like :meth:`get`, ignoring the ``override`` layer.

        This is the value :meth:`save` would write for *key*.
        """
        return _merged_lookup(self._layers()[:2], key, fallback)

    def __contains__(self, key: str) -> bool:
        return any(_lookup(layer, key) is not _MISSING for layer in self._layers())

    def as_dict(self, *, include_override: bool = True) -> dict[str, Any]:
        """The layers merged into one document.

        With ``include_override=False`` this is exactly what :meth:`save`
        would write.
        """
        layers = self._layers() if include_override else self._layers()[:2]
        merged: dict[str, Any] = {}
        for layer in layers:
            merged = deep_merge(merged, layer)
        return merged

    def flatten(self, *, include_override: bool = True) -> list[tuple[str, Any]]:
        """Every leaf of :meth:`as_dict` as ``(dotted_key, value)``, sorted."""
        document = self.as_dict(include_override=include_override)
        return sorted(_flatten(document), key=lambda item: item[0])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_default(self, key: str, value: Any) -> None:
        """Set *key* in the ``defaults`` layer unless it is already set there."""
        if _lookup(self.defaults, key) is _MISSING:
            _assign(self.defaults, key, value)

    def set(self, key: str, value: Any) -> None:
        """Set *key* in the ``file`` layer.  Call :meth:`save` to persist."""
        _assign(self.file, key, value)

    def unset(self, key: str) -> bool:
        """Remove *key* from the ``file`` layer; return whether it was there."""
        parts = _split(key)
        node: Any = self.file
        for part in parts[:-1]:
            node = node.get(part) if isinstance(node, dict) else None
            if node is None:
                return False
        if isinstance(node, dict) and parts[-1] in node:
            del node[parts[-1]]
            return True
        return False

    def override(self, key: str, value: Any) -> None:
        """Set *key* in the transient ``override`` layer."""
        _assign(self.cli_override, key, value)

    def merge_override(self, json_text: str | None) -> ConfigOverrideParseError | None:
        """Deep-merge the JSON object *json_text* into the override layer.

        Malformed input is not fatal: the layer is left unchanged and the
        error is returned for the caller to report.
        """
        if json_text is None or not json_text.strip():
            return None
        try:
            document = json.loads(json_text)
        except json.JSONDecodeError as exc:
            error = ConfigOverrideParseError(
                f"Ignoring --config value, it is not valid JSON: {exc}",
                hint='Pass a JSON object, e.g. --config \'{"cli": {"colors": false}}\'',
            )
        else:
            if isinstance(document, dict):
                self.cli_override = deep_merge(self.cli_override, document)
                return None
            error = ConfigOverrideParseError(
                "Ignoring --config value, it must be a JSON object.",
            )
        logger.debug("%s", error)
        return error

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _layers(self) -> tuple[dict[str, Any], ...]:
        return (self.defaults, self.file, self.cli_override)


# ---------------------------------------------------------------------------
# Dotted-path helpers (pure)
# ---------------------------------------------------------------------------

def _split(key: str) -> list[str]:
    parts = [part for part in key.split(".") if part]
    if not parts:
        raise ValueError(f"Invalid config key: {key!r}")
    return parts


def _lookup(document: Mapping[str, Any], key: str) -> Any:
    node: Any = document
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _merged_lookup(
    layers: tuple[dict[str, Any], ...], key: str, fallback: Any,
) -> Any:
    found = [
        value
        for value in (_lookup(layer, key) for layer in layers)
        if value is not _MISSING
    ]
    if not found:
        return fallback
    top = found[-1]
    if not isinstance(top, dict):
        return copy.deepcopy(top)
    merged: dict[str, Any] = {}
    for value in found:
        if isinstance(value, dict):
            merged = deep_merge(merged, value)
    return merged


def _assign(document: dict[str, Any], key: str, value: Any) -> None:
    parts = _split(key)
    node = document
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def _flatten(document: Mapping[str, Any], prefix: str = "") -> Iterator[tuple[str, Any]]:
    for key, value in document.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            yield from _flatten(value, dotted)
        else:
            yield dotted, value


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new mapping with *overlay* merged over *base*.

    Nested mappings merge recursively; any other value in *overlay*
    replaces the one in *base*.  Neither argument is modified.
    """
    result: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result
