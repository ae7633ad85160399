"""argparse helpers shared by the global pre-parse and command dispatch.

The parsers built here never call ``sys.exit``: argparse errors are
raised as :class:`~ticli.exceptions.CommandArgumentError` so that the
error boundary in :mod:`ticli.cli.app` decides the exit code.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from typing import Any, NoReturn

from ticli.core.models import CommandInvocation, CommandSchema
from ticli.exceptions import CommandArgumentError


class StrictArgumentParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises instead of printing and exiting."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("add_help", False)
        kwargs.setdefault("allow_abbrev", False)
        super().__init__(**kwargs)

    def error(self, message: str) -> NoReturn:
        raise CommandArgumentError(
            message,
            hint=f"Run '{self.prog.split()[0]} help' for usage.",
        )


def _option_strings(name: str, abbreviation: object) -> list[str]:
    names = [f"--{name}"]
    if isinstance(abbreviation, str) and abbreviation:
        names.insert(0, f"-{abbreviation}")
    return names


def build_command_parser(prog: str, schema: CommandSchema) -> StrictArgumentParser:
    """Build a parser for the flags and options declared by *schema*.

    Raises
    ------
    CommandArgumentError
        If the schema declares conflicting names.
    """
    parser = StrictArgumentParser(prog=prog, description=schema.description)
    try:
        for name, settings in schema.flags.items():
            parser.add_argument(
                *_option_strings(name, settings.get("abbr")),
                dest=name,
                action=argparse.BooleanOptionalAction if settings.get("negate") else "store_true",
                default=bool(settings.get("default", False)),
                help=settings.get("desc"),
            )
        for name, settings in schema.options.items():
            parser.add_argument(
                *_option_strings(name, settings.get("abbr")),
                dest=name,
                default=settings.get("default"),
                metavar=settings.get("hint") or name,
                help=settings.get("desc"),
            )
    except argparse.ArgumentError as exc:
        raise CommandArgumentError(f"Invalid argument schema for {prog}: {exc}") from exc
    return parser


def parse_command_args(
    name: str,
    schema: CommandSchema,
    tokens: Sequence[str],
    *,
    global_values: dict[str, Any] | None = None,
    prog: str = "ticli",
) -> CommandInvocation:
    """Parse *tokens* against *schema*.

    Tokens the schema does not declare are kept, in order, as
    positionals.  *global_values* fill in every key the command did not
    declare itself.
    """
    parser = build_command_parser(f"{prog} {name}", schema)
    namespace, extras = parser.parse_known_args(list(tokens))
    options: dict[str, Any] = dict(global_values or {})
    options.update(vars(namespace))
    return CommandInvocation(name=name, options=options, positionals=tuple(extras))
