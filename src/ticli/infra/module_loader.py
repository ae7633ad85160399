"""Plugin module loading from arbitrary file paths.

This module is the **only** place that imports plugin code.  Any
exception raised while importing a plugin is re-raised as
:class:`~ticli.exceptions.PluginLoadError`.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from types import ModuleType

from ticli.exceptions import PluginLoadError

logger = logging.getLogger(__name__)

_MODULE_PREFIX = "ticli_plugins"


def list_directory(path: Path) -> Sequence[Path]:
    """List the entries of *path* sorted by name; ``[]`` if unreadable."""
    try:
        return sorted(path.iterdir())
    except OSError:
        return []


def _module_name(path: Path) -> str:
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
    return f"{_MODULE_PREFIX}.{path.stem}_{digest}"


def load_module(path: Path) -> ModuleType:
    """Import the Python file at *path* under a unique module name.

    Raises
    ------
    PluginLoadError
        If the file cannot be found, compiled or executed.
    """
    name = _module_name(path)
    cached = sys.modules.get(name)
    if cached is not None:
        return cached

    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(path, "not an importable Python file")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        del sys.modules[name]
        raise PluginLoadError(path, f"{type(exc).__name__}: {exc}") from exc

    logger.debug("Loaded plugin module %s from %s", name, path)
    return module
