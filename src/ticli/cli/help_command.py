"""``ticli help`` — usage for the CLI or for one command.

Everything is printed as plain text (``markup=False``) so that option
hints such as ``<version>`` and JSON examples render verbatim.
"""

from __future__ import annotations

import difflib

from ticli.cli import exit_codes
from ticli.cli.context import BootstrapContext
from ticli.core.models import CommandInvocation, CommandRegistration, CommandSchema
from ticli.version import APP_NAME

DESCRIPTION: str = "displays help"
SCHEMA = CommandSchema(description=DESCRIPTION)

_COLUMN_WIDTH = 28


# ---------------------------------------------------------------------------
# Formatting helpers (pure)
# ---------------------------------------------------------------------------

def _row(label: str, description: str) -> str:
    if len(label) >= _COLUMN_WIDTH - 2:
        return f"  {label}\n  {'':<{_COLUMN_WIDTH - 2}}{description}"
    return f"  {label:<{_COLUMN_WIDTH - 2}}{description}"


def _flag_label(name: str, abbreviation: object, negatable: bool) -> str:
    label = f"--no-{name}" if negatable else f"--{name}"
    if isinstance(abbreviation, str) and abbreviation:
        label = f"-{abbreviation}, {label}"
    return label


def _option_label(name: str, abbreviation: object, hint: object) -> str:
    label = f"--{name} <{hint or 'value'}>"
    if isinstance(abbreviation, str) and abbreviation:
        label = f"-{abbreviation}, {label}"
    return label


def format_schema(schema: CommandSchema) -> list[str]:
    """Flag, option and subcommand rows of a command schema."""
    lines: list[str] = []
    if schema.subcommands:
        lines.append("Subcommands:")
        lines.extend(f"  {name}" for name in schema.subcommands)
        lines.append("")
    if schema.flags:
        lines.append("Flags:")
        for name, settings in schema.flags.items():
            label = _flag_label(name, settings.get("abbr"), bool(settings.get("negate")))
            lines.append(_row(label, str(settings.get("desc") or "")))
        lines.append("")
    if schema.options:
        lines.append("Options:")
        for name, settings in schema.options.items():
            label = _option_label(name, settings.get("abbr"), settings.get("hint"))
            description = str(settings.get("desc") or "")
            if settings.get("default") is not None:
                description = f"{description} [default: {settings['default']}]".strip()
            lines.append(_row(label, description))
        lines.append("")
    return lines


def format_usage(ctx: BootstrapContext) -> list[str]:
    """Top-level usage: commands, then global flags and options."""
    __ = ctx.translate
    lines = [f"{__('Usage')}: {APP_NAME} <command> [options]", ""]

    commands: dict[str, CommandRegistration] = {**ctx.builtins, **ctx.commands}
    lines.append(__("Commands:"))
    for name in sorted(commands):
        lines.append(_row(name, commands[name].configuration.description))
    lines.append("")

    registry = ctx.flag_registry
    if registry is not None:
        lines.append(__("Global Flags:"))
        for flag in registry.flags:
            label = _flag_label(flag.name, flag.abbreviation, flag.negatable)
            lines.append(_row(label, flag.description))
        lines.append("")
        lines.append(__("Global Options:"))
        for option in registry.options:
            label = _option_label(option.name, option.abbreviation, option.hint)
            default = option.default
            if option.name == "config-file":
                default = str(ctx.config.get_config_path())
            description = option.description
            if default:
                description = f"{description} [default: {default}]"
            lines.append(_row(label, description))
        lines.append("")
    return lines


def format_command_help(registration: CommandRegistration) -> list[str]:
    schema = registration.configuration
    lines = [f"Usage: {APP_NAME} {registration.name} [options]", ""]
    if schema.description:
        lines.extend((schema.description, ""))
    lines.extend(format_schema(schema))
    if registration.source_path is not None:
        lines.extend((f"Source: {registration.source_path}", ""))
    return lines


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------

def _requested_topic(ctx: BootstrapContext, invocation: CommandInvocation) -> str | None:
    if ctx.command_name and ctx.command_name != invocation.name:
        return ctx.command_name
    return invocation.positionals[0] if invocation.positionals else None


def run(ctx: BootstrapContext, invocation: CommandInvocation) -> int:
    """Print usage, or help for the requested command.

    Returns :data:`exit_codes.GENERAL_ERROR` when the requested command
    does not exist.
    """
    __ = ctx.translate
    topic = _requested_topic(ctx, invocation)
    registration = ctx.find_command(topic)

    if topic is not None and registration is None:
        ctx.err.print(__('Unrecognized command "%s"', topic), markup=False)
        known = sorted({*ctx.builtins, *ctx.commands})
        matches = difflib.get_close_matches(topic, known, n=3, cutoff=0.6)
        if matches:
            ctx.err.print(__("Did you mean this?"), markup=False)
            for match in matches:
                ctx.err.print(f"    {match}", markup=False)
        ctx.err.print()
        for line in format_usage(ctx):
            ctx.out.print(line, markup=False)
        return exit_codes.GENERAL_ERROR

    lines = format_command_help(registration) if registration is not None else format_usage(ctx)
    for line in lines:
        ctx.out.print(line, markup=False)
    return exit_codes.SUCCESS
