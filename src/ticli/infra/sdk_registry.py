"""Filesystem scan for installed SDKs.

An SDK install is a directory directly under one of the search paths
that contains a ``manifest.json`` object::

    <search-path>/
        3.1.0.GA/
            manifest.json          {"version": "3.1.0", ...}
            cli/commands/*.py
            cli/hooks/*.py
            platforms/
                android/cli/commands/*.py
                ios/cli/commands/*.py

Scanning is the only I/O here; resolution and compatibility checks are
delegated to the pure helpers in :mod:`ticli.core.sdk_selection`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from ticli.core import sdk_selection
from ticli.core.models import PlatformDescriptor, SDKDescriptor, SDKManifest

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME: str = "manifest.json"
PLATFORMS_DIR_NAME: str = "platforms"


class SDKRegistry:
    """Locate installed SDKs and pick one of them."""

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------

    def scan(self, search_paths: Iterable[str | Path]) -> tuple[SDKDescriptor, ...]:
        """Return every SDK under *search_paths*, in discovery order.

        When two search paths hold an SDK with the same name, the one
        from the earlier path is kept and later ones are ignored.
        """
        found: dict[str, SDKDescriptor] = {}
        for search_path in search_paths:
            root = Path(search_path).expanduser()
            for candidate in _subdirectories(root):
                if candidate.name in found:
                    logger.debug(
                        "Ignoring %s, SDK %r already found at %s",
                        candidate,
                        candidate.name,
                        found[candidate.name].path,
                    )
                    continue
                descriptor = self._read_sdk(candidate)
                if descriptor is not None:
                    found[descriptor.name] = descriptor
        logger.debug("Found %d SDK(s)", len(found))
        return tuple(found.values())

    def _read_sdk(self, sdk_dir: Path) -> SDKDescriptor | None:
        manifest_path = sdk_dir / MANIFEST_FILE_NAME
        if not manifest_path.is_file():
            return None
        try:
            raw = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring SDK at %s, unreadable manifest: %s", sdk_dir, exc)
            return None
        if not isinstance(raw, dict):
            logger.warning("Ignoring SDK at %s, manifest is not a JSON object", sdk_dir)
            return None

        version = raw.get("version")
        platforms = tuple(
            PlatformDescriptor(name=p.name, path=p)
            for p in _subdirectories(sdk_dir / PLATFORMS_DIR_NAME)
        )
        return SDKDescriptor(
            name=sdk_dir.name,
            path=sdk_dir,
            manifest=SDKManifest(version=str(version) if version else None, raw=raw),
            platforms=platforms,
        )

    # ------------------------------------------------------------------
    # Selection (pure delegation)
    # ------------------------------------------------------------------

    @staticmethod
    def resolve(
        selector: str | None,
        scanned: Sequence[SDKDescriptor],
    ) -> SDKDescriptor | None:
        return sdk_selection.resolve_sdk(selector, scanned)

    @staticmethod
    def is_compatible(descriptor: SDKDescriptor, min_version: str) -> bool:
        return sdk_selection.is_compatible(descriptor, min_version)


def _subdirectories(path: Path) -> list[Path]:
    """Sorted child directories of *path*; empty when *path* is unusable."""
    try:
        return sorted(child for child in path.iterdir() if child.is_dir())
    except OSError:
        return []
