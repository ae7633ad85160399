"""``ticli sdk`` — list installed SDKs and choose the default one.

Forms::

    ticli sdk [list] [--output json]
    ticli sdk select [<version>|latest]

``list`` renders a Rich table when Rich is installed and a plain text
table otherwise.  ``select`` prompts interactively when no version is
given and prompting is enabled.
"""

from __future__ import annotations

import json
import sys

from ticli.cli import exit_codes
from ticli.cli.context import BootstrapContext
from ticli.core import sdk_selection
from ticli.core.models import LATEST, CommandInvocation, CommandSchema, SDKDescriptor
from ticli.exceptions import (
    CommandArgumentError,
    SDKIncompatibleError,
    SDKNotFoundError,
)
from ticli.version import APP_NAME, MIN_SDK_VERSION

SUBCOMMANDS: tuple[str, ...] = ("list", "select")

SCHEMA = CommandSchema(
    description="manage installed SDKs",
    subcommands=SUBCOMMANDS,
    options={
        "output": {
            "abbr": "o",
            "default": "report",
            "desc": "output format",
            "hint": "report|json",
        },
    },
)


# ---------------------------------------------------------------------------
# Row collectors
# ---------------------------------------------------------------------------

def _rows(ctx: BootstrapContext) -> list[tuple[str, str, str, str, str]]:
    """Return (name, version, platforms, status, path) per installed SDK."""
    selected = ctx.config.get("sdk.selected")
    latest = sdk_selection.resolve_sdk(LATEST, ctx.installed_sdks)
    rows = []
    for sdk in ctx.installed_sdks:
        marks = []
        if sdk.name == selected:
            marks.append("selected")
        if latest is not None and sdk.name == latest.name:
            marks.append("latest")
        if not sdk_selection.is_compatible(sdk, MIN_SDK_VERSION):
            marks.append("unsupported")
        rows.append(
            (
                sdk.name,
                sdk.version,
                ", ".join(p.name for p in sdk.platforms) or "-",
                ", ".join(marks),
                str(sdk.path),
            )
        )
    return rows


def _print_plain_table(
    ctx: BootstrapContext, rows: list[tuple[str, str, str, str, str]],
) -> None:
    """Render the SDK table without Rich."""
    out = ctx.out
    out.print(f"{'Name':<16} {'Version':<10} {'Platforms':<20} {'Status':<18} Path", markup=False)
    out.print("-" * 80, markup=False)
    for name, version, platforms, status, path in rows:
        out.print(f"{name:<16} {version:<10} {platforms:<20} {status:<18} {path}", markup=False)
    out.print()


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def _list(ctx: BootstrapContext, output: str) -> int:
    __ = ctx.translate
    if output == "json":
        document = {
            "selected": ctx.config.get("sdk.selected"),
            "installed": [
                {
                    "name": sdk.name,
                    "version": sdk.version,
                    "path": str(sdk.path),
                    "platforms": [p.name for p in sdk.platforms],
                }
                for sdk in ctx.installed_sdks
            ],
        }
        ctx.out.print(json.dumps(document, indent=2), markup=False)
        return exit_codes.SUCCESS

    if not ctx.installed_sdks:
        ctx.out.print(__("No SDKs installed."), markup=False)
        return exit_codes.SUCCESS

    rows = _rows(ctx)
    if ctx.out.quiet:
        return exit_codes.SUCCESS
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_table(ctx, rows)
        return exit_codes.SUCCESS

    table = Table(
        title=__("Installed SDKs"),
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Name", style="bold", min_width=10)
    table.add_column("Version", min_width=8)
    table.add_column("Platforms")
    table.add_column("Status")
    table.add_column("Path", overflow="fold")
    for row in rows:
        table.add_row(*row)
    ctx.out.print(table)
    return exit_codes.SUCCESS


def _choose(ctx: BootstrapContext, candidates: list[SDKDescriptor]) -> str:
    if not ctx.prompt_enabled or not sys.stdin.isatty():
        raise CommandArgumentError(
            ctx.translate("No SDK version specified"),
            hint=f"Run '{APP_NAME} sdk select <version>'.",
        )
    from ticli.cli.sdk_prompt import prompt_sdk_selection

    return prompt_sdk_selection(candidates, ctx.config.get("sdk.selected"))


def _select(ctx: BootstrapContext, version: str | None) -> int:
    __ = ctx.translate
    candidates = [
        sdk for sdk in ctx.installed_sdks
        if sdk_selection.is_compatible(sdk, MIN_SDK_VERSION)
    ]
    if not candidates:
        raise SDKNotFoundError(__("No SDKs found!"))

    if version is None:
        version = _choose(ctx, candidates)

    sdk = sdk_selection.resolve_sdk(version, candidates)
    if sdk is None:
        installed = sdk_selection.resolve_sdk(version, ctx.installed_sdks)
        if installed is not None:
            raise SDKIncompatibleError(
                __('Specified SDK "%s" is too old', installed.name),
                hint=__("%s requires SDK %s or newer.", APP_NAME, MIN_SDK_VERSION),
            )
        names = tuple(s.name for s in candidates)
        suggestions = sdk_selection.suggest(version, names)
        hint = __("Available SDKs: %s", ", ".join(names))
        if suggestions:
            hint = "\n".join((__("Did you mean this? %s", ", ".join(suggestions)), hint))
        raise SDKNotFoundError(
            __('Invalid SDK "%s"', version),
            hint=hint,
            selector=version,
            available=names,
        )

    ctx.config.set("sdk.selected", sdk.name)
    ctx.config.save()
    ctx.out.print(__("Configuration saved: default SDK is now %s", sdk.name), markup=False)
    return exit_codes.SUCCESS


def run(ctx: BootstrapContext, invocation: CommandInvocation) -> int:
    positionals = invocation.positionals
    subcommand = positionals[0] if positionals else "list"
    output = str(invocation.get("output") or "report")

    if subcommand == "list":
        return _list(ctx, output)
    if subcommand == "select":
        return _select(ctx, positionals[1] if len(positionals) > 1 else None)
    raise CommandArgumentError(
        ctx.translate('Unknown sdk subcommand "%s"', subcommand),
        hint=ctx.translate("Available subcommands: %s", ", ".join(SUBCOMMANDS)),
    )
