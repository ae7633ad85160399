"""``ticli config`` — read and write the persisted CLI configuration.

Forms::

    ticli config                       list every persisted value
    ticli config <key>                 print one value
    ticli config <key> <value> [...]   set a value (several values make a list)
    ticli config <key> --remove        delete a key
"""

from __future__ import annotations

import json
from typing import Any

from ticli.cli import exit_codes
from ticli.cli.context import BootstrapContext
from ticli.core.models import CommandInvocation, CommandSchema
from ticli.exceptions import CommandArgumentError, CommandFailedError

SCHEMA = CommandSchema(
    description="get and set config options",
    flags={
        "remove": {"abbr": "r", "desc": "removes the specified config key"},
    },
    options={
        "output": {
            "abbr": "o",
            "default": "report",
            "desc": "output format",
            "hint": "report|json",
        },
    },
)


def parse_value(text: str) -> Any:
    """Interpret *text* as JSON when possible, else keep it as a string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _render(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def _list(ctx: BootstrapContext, output: str) -> int:
    if output == "json":
        document = ctx.config.as_dict(include_override=False)
        ctx.out.print(json.dumps(document, indent=2), markup=False)
        return exit_codes.SUCCESS
    entries = ctx.config.flatten(include_override=False)
    if not entries:
        ctx.err.print(ctx.translate("No config values set."), markup=False)
        return exit_codes.SUCCESS
    width = max(len(key) for key, _ in entries)
    for key, value in entries:
        ctx.out.print(f"{key:<{width}} = {_render(value)}", markup=False)
    return exit_codes.SUCCESS


def _get(ctx: BootstrapContext, key: str, output: str) -> int:
    if key not in ctx.config:
        raise CommandFailedError(ctx.translate('Key "%s" not found', key))
    value = ctx.config.get(key)
    text = json.dumps(value, indent=2) if output == "json" else _render(value)
    ctx.out.print(text, markup=False)
    return exit_codes.SUCCESS


def _set(ctx: BootstrapContext, key: str, raw_values: tuple[str, ...]) -> int:
    values = [parse_value(v) for v in raw_values]
    ctx.config.set(key, values[0] if len(values) == 1 else values)
    ctx.config.save()
    ctx.out.print(ctx.translate("%s saved", key), markup=False)
    return exit_codes.SUCCESS


def _remove(ctx: BootstrapContext, key: str | None) -> int:
    __ = ctx.translate
    if key is None:
        raise CommandArgumentError(__("Missing key of the config setting to remove"))
    if not ctx.config.unset(key):
        raise CommandFailedError(__('Unable to remove "%s", key not found', key))
    ctx.config.save()
    ctx.out.print(__("%s removed", key), markup=False)
    return exit_codes.SUCCESS


def run(ctx: BootstrapContext, invocation: CommandInvocation) -> int:
    key = invocation.positionals[0] if invocation.positionals else None
    values = invocation.positionals[1:]
    output = str(invocation.get("output") or "report")

    if invocation.get("remove"):
        return _remove(ctx, key)
    if key is None:
        return _list(ctx, output)
    if not values:
        return _get(ctx, key, output)
    return _set(ctx, key, values)
