"""Interactive SDK picker for ``ticli sdk select``.

This module is responsible for:

* Prompting the user to pick an installed SDK via questionary arrow keys.
* Returning the chosen SDK name as a string.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ticli.core.models import SDKDescriptor
from ticli.exceptions import EnvironmentError, SelectionCancelledError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _build_choice_label(index: int, sdk: SDKDescriptor, current: str | None) -> str:
    """Single-line label: ``"  1.  3.1.0.GA    3.1.0   android, ios  (selected)"``."""
    platforms = ", ".join(p.name for p in sdk.platforms) or "-"
    marker = "  (selected)" if sdk.name == current else ""
    return f"  {index + 1}.  {sdk.name:<14} {sdk.version:<10} {platforms}{marker}"


def prompt_sdk_selection(
    sdks: Sequence[SDKDescriptor],
    current: str | None = None,
) -> str:
    """Prompt the user to choose one of *sdks*.

    Returns
    -------
    str
        The ``name`` of the chosen SDK.

    Raises
    ------
    SelectionCancelledError
        If the user cancels the prompt (Esc / Ctrl+C).
    """
    questionary = _import_questionary()

    choices = [
        questionary.Choice(
            title=_build_choice_label(i, sdk, current),
            value=sdk.name,
        )
        for i, sdk in enumerate(sdks)
    ]
    default = current if any(sdk.name == current for sdk in sdks) else None

    selected: str | None = questionary.select(
        "Select the SDK to use by default:",
        choices=choices,
        default=default,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()  # Returns None on Ctrl+C / Esc

    if selected is None:
        raise SelectionCancelledError(
            "No SDK selected.",
            hint="Use arrow keys to pick an SDK, then press Enter.",
        )
    return selected
