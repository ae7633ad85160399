"""Pure SDK version parsing, selection and compatibility logic.

Every function in this module is a **pure** transformation: no I/O,
no side effects, fully deterministic, and trivially unit-testable.

Selection rules (enforced by :func:`resolve_sdk`):

1. **Explicit**: a selector other than ``latest`` must equal an
   installed SDK's name exactly (case-sensitive).
2. **Latest**: ``latest`` or ``None`` picks the greatest parsed
   version, with prereleases below their release; equal versions fall
   back to comparing names lexically.
3. **No fallback**: anything else resolves to ``None``.
"""

from __future__ import annotations

import difflib
import re
from collections.abc import Iterable, Sequence

from ticli.core.models import LATEST, SDKDescriptor

_VERSION_RE = re.compile(r"^\s*v?(\d+(?:\.\d+){0,2})(.*)$")
_PRERELEASE_WORD = re.compile(r"^\.?(alpha|beta|rc|pre|dev)", re.IGNORECASE)

VersionCore = tuple[int, int, int]
VersionKey = tuple[int, int, int, int, tuple[tuple[int, int | str], ...]]


# ---------------------------------------------------------------------------
# 1. Parse
# ---------------------------------------------------------------------------

def parse_version(text: str | None) -> VersionCore | None:
    """Parse an SDK version string into ``(major, minor, patch)``, or ``None``.

    SDK install names such as ``3.1.0.GA`` or ``7.0.0.v20171017`` carry a
    non-standard qualifier, so only the leading numeric core is used.
    Missing components count as zero.
    """
    key = version_key(text)
    return None if key is None else key[:3]


def version_key(text: str | None) -> VersionKey | None:
    """Sort key for *text*: ``(major, minor, patch, is_release, prerelease)``.

    A ``-`` suffix (``3.1.0-beta.2``) or a qualifier starting with
    alpha/beta/rc/pre/dev (``8.0.0.RC``, ``2.3.1rc1``) marks a prerelease,
    which sorts below the release with the same core.  Other qualifiers
    (``.GA``, ``.v20171017``, ``+build``) do not change the order.
    Prerelease identifiers compare numerically when they are digits and
    lexically otherwise, digits first.
    """
    if not text:
        return None
    match = _VERSION_RE.match(text)
    if match is None:
        return None
    parts = [int(part) for part in match.group(1).split(".")]
    parts.extend([0] * (3 - len(parts)))

    suffix = match.group(2).strip().split("+", 1)[0]
    if suffix.startswith("-"):
        prerelease = suffix[1:]
    elif _PRERELEASE_WORD.match(suffix):
        prerelease = suffix.lstrip(".")
    else:
        prerelease = ""
    identifiers = tuple(
        (0, int(token)) if token.isdigit() else (1, token.lower())
        for token in re.split(r"[.-]", prerelease)
        if token
    )
    return (parts[0], parts[1], parts[2], 0 if identifiers else 1, identifiers)


def _latest_key(sdk: SDKDescriptor) -> tuple[bool, VersionKey, str]:
    key = version_key(sdk.version)
    return (key is not None, key or (0, 0, 0, 0, ()), sdk.name)


# ---------------------------------------------------------------------------
# 2. Resolve
# ---------------------------------------------------------------------------

def is_latest_selector(selector: str | None) -> bool:
    return selector is None or selector == "" or selector == LATEST


def resolve_sdk(
    selector: str | None,
    scanned: Sequence[SDKDescriptor],
) -> SDKDescriptor | None:
    """Resolve *selector* against *scanned*, or return ``None``.

    The result does not depend on the enumeration order of *scanned*.
    """
    if not scanned:
        return None
    if is_latest_selector(selector):
        return max(scanned, key=_latest_key)
    return next((sdk for sdk in scanned if sdk.name == selector), None)


# ---------------------------------------------------------------------------
# 3. Compatibility
# ---------------------------------------------------------------------------

def is_compatible(sdk: SDKDescriptor, min_version: str) -> bool:
    """Return whether *sdk* is at least *min_version*.

    Unparseable versions on either side count as incompatible, and a
    prerelease of *min_version* is below it.
    """
    actual = version_key(sdk.version)
    minimum = version_key(min_version)
    if actual is None or minimum is None:
        return False
    return actual >= minimum


def compatible_names(
    scanned: Iterable[SDKDescriptor],
    min_version: str,
) -> list[str]:
    """Names of the SDKs in *scanned* that pass :func:`is_compatible`."""
    return [sdk.name for sdk in scanned if is_compatible(sdk, min_version)]


# ---------------------------------------------------------------------------
# 4. Suggestions
# ---------------------------------------------------------------------------

def suggest(
    name: str | None,
    candidates: Sequence[str],
    *,
    limit: int = 3,
) -> list[str]:
    """Return up to *limit* candidates that look like *name*.

    Used for "did you mean" hints when an explicit selector matches
    nothing installed.
    """
    if not name or not candidates:
        return []
    return difflib.get_close_matches(name, list(candidates), n=limit, cutoff=0.6)
