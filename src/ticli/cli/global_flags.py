"""Global flags and options recognised before any plugin is loaded.

Declaration order is significant: :meth:`GlobalFlagRegistry.apply` runs
the ``on_set`` callbacks in exactly this order, once each.

=============  ======  =========  =======================
flag           abbrev  negatable  default
=============  ======  =========  =======================
help           -h      no         false
version        -v      no         false
colors                 yes        ``cli.colors`` (true)
quiet          -q      no         ``cli.quiet`` (false)
prompt                 yes        ``cli.prompt`` (true)
progress-bars          yes        ``cli.progressBars`` (true)
banner                 yes        true
=============  ======  =========  =======================

Options: ``--config <json>``, ``--config-file <file>``,
``-s/--sdk <version>``.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ticli.cli.arguments import StrictArgumentParser
from ticli.cli.context import BootstrapContext
from ticli.core.models import LATEST
from ticli.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Specs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class GlobalFlagSpec:
    """A boolean flag evaluated during the pre-parse."""

    name: str
    on_set: Callable[[BootstrapContext, bool], None] = field(compare=False, repr=False)
    description: str = ""
    abbreviation: str | None = None
    default: bool = False
    default_key: str | None = None
    """Config key consulted for the default before :attr:`default`."""

    negatable: bool = False

    @property
    def dest(self) -> str:
        return self.name.replace("-", "_")

    def resolve_default(self, config: Any) -> bool:
        if self.default_key is None:
            return self.default
        return bool(config.get(self.default_key, self.default))


@dataclass(frozen=True, slots=True)
class GlobalOptionSpec:
    """A string-valued option evaluated during the pre-parse."""

    name: str
    description: str = ""
    abbreviation: str | None = None
    default: str | None = None
    hint: str = "value"

    @property
    def dest(self) -> str:
        return self.name.replace("-", "_")


@dataclass(slots=True)
class PreParseResult:
    """Raw global values found in argv, before defaults are applied.

    ``None`` means "not given on the command line".
    """

    flags: dict[str, bool | None]
    options: dict[str, str | None]
    remaining: list[str]
    """Every token the global parser did not consume, in order."""

    @property
    def command(self) -> str | None:
        if self.remaining and not self.remaining[0].startswith("-"):
            return self.remaining[0]
        return None

    @property
    def command_argv(self) -> list[str]:
        return self.remaining[1:] if self.command else list(self.remaining)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class GlobalFlagRegistry:
    """Ordered table of :class:`GlobalFlagSpec` and :class:`GlobalOptionSpec`."""

    def __init__(self) -> None:
        self._flags: list[GlobalFlagSpec] = []
        self._options: list[GlobalOptionSpec] = []

    @property
    def flags(self) -> tuple[GlobalFlagSpec, ...]:
        return tuple(self._flags)

    @property
    def options(self) -> tuple[GlobalOptionSpec, ...]:
        return tuple(self._options)

    def add_flag(self, spec: GlobalFlagSpec) -> None:
        self._check_unique(spec.name, spec.abbreviation)
        self._flags.append(spec)

    def add_option(self, spec: GlobalOptionSpec) -> None:
        self._check_unique(spec.name, spec.abbreviation)
        self._options.append(spec)

    def _check_unique(self, name: str, abbreviation: str | None) -> None:
        specs: list[GlobalFlagSpec | GlobalOptionSpec] = [*self._flags, *self._options]
        if any(spec.name == name for spec in specs):
            raise ValueError(f"Duplicate global flag name: {name}")
        if abbreviation is None:
            return
        if len(abbreviation) != 1:
            raise ValueError(f"Abbreviation for {name} must be a single character")
        if any(spec.abbreviation == abbreviation for spec in specs):
            raise ValueError(f"Duplicate global flag abbreviation: -{abbreviation}")

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def build_parser(self, prog: str = "ticli") -> StrictArgumentParser:
        parser = StrictArgumentParser(prog=prog)
        for spec in self._flags:
            names = [f"--{spec.name}"]
            if spec.abbreviation:
                names.insert(0, f"-{spec.abbreviation}")
            parser.add_argument(
                *names,
                dest=spec.dest,
                action=argparse.BooleanOptionalAction if spec.negatable else "store_const",
                **({} if spec.negatable else {"const": True}),
                default=None,
                help=spec.description,
            )
        for option in self._options:
            names = [f"--{option.name}"]
            if option.abbreviation:
                names.insert(0, f"-{option.abbreviation}")
            parser.add_argument(
                *names,
                dest=option.dest,
                default=None,
                metavar=option.hint,
                help=option.description,
            )
        return parser

    def pre_parse(self, argv: Sequence[str]) -> PreParseResult:
        """Extract global flags and options from raw *argv*.

        No callbacks run here; unknown tokens are left in
        :attr:`PreParseResult.remaining` for the command parser.

        Raises
        ------
        CommandArgumentError
            If a global option is missing its value.
        """
        namespace, remaining = self.build_parser().parse_known_args(list(argv))
        values = vars(namespace)
        return PreParseResult(
            flags={spec.name: values[spec.dest] for spec in self._flags},
            options={spec.name: values[spec.dest] for spec in self._options},
            remaining=remaining,
        )

    def apply(self, result: PreParseResult, ctx: BootstrapContext) -> dict[str, bool]:
        """Run every flag callback once, in declaration order.

        Each callback receives the value given on the command line, or
        the flag's default resolved against the loaded config.

        Returns
        -------
        dict[str, bool]
            The resolved value of every flag.
        """
        resolved: dict[str, bool] = {}
        for spec in self._flags:
            explicit = result.flags.get(spec.name)
            value = spec.resolve_default(ctx.config) if explicit is None else explicit
            resolved[spec.name] = value
            logger.debug("Global flag --%s = %s", spec.name, value)
            spec.on_set(ctx, value)
        return resolved


# ---------------------------------------------------------------------------
# Flag effects
# ---------------------------------------------------------------------------

def _on_help(ctx: BootstrapContext, value: bool) -> None:
    if value:
        ctx.help_requested = True


def _on_version(ctx: BootstrapContext, value: bool) -> None:
    if value:
        ctx.out.print(__version__, markup=False)
        ctx.exit_requested = 0


def _on_colors(ctx: BootstrapContext, value: bool) -> None:
    ctx.set_colors(value)
    ctx.config.override("cli.colors", value)


def _on_quiet(ctx: BootstrapContext, value: bool) -> None:
    ctx.set_quiet(value)
    ctx.config.override("cli.quiet", value)


def _on_prompt(ctx: BootstrapContext, value: bool) -> None:
    ctx.config.override("cli.prompt", value)


def _on_progress_bars(ctx: BootstrapContext, value: bool) -> None:
    ctx.config.override("cli.progressBars", value)


def _on_banner(ctx: BootstrapContext, value: bool) -> None:
    ctx.banner_enabled = value


def default_registry(translate: Callable[..., str]) -> GlobalFlagRegistry:
    """Build the fixed global flag and option table."""
    __ = translate
    registry = GlobalFlagRegistry()
    registry.add_flag(GlobalFlagSpec(
        "help", _on_help, __("displays help"), abbreviation="h",
    ))
    registry.add_flag(GlobalFlagSpec(
        "version", _on_version, __("displays the current version"), abbreviation="v",
    ))
    registry.add_flag(GlobalFlagSpec(
        "colors", _on_colors, __("disable colors"),
        default=True, default_key="cli.colors", negatable=True,
    ))
    registry.add_flag(GlobalFlagSpec(
        "quiet", _on_quiet, __("suppress all output"), abbreviation="q",
        default=False, default_key="cli.quiet",
    ))
    registry.add_flag(GlobalFlagSpec(
        "prompt", _on_prompt, __("disable interactive prompting"),
        default=True, default_key="cli.prompt", negatable=True,
    ))
    registry.add_flag(GlobalFlagSpec(
        "progress-bars", _on_progress_bars, __("disable progress bars"),
        default=True, default_key="cli.progressBars", negatable=True,
    ))
    registry.add_flag(GlobalFlagSpec(
        "banner", _on_banner, __("disable the version banner"),
        default=True, negatable=True,
    ))
    registry.add_option(GlobalOptionSpec(
        "config", __("serialized JSON string to mix into CLI config"), hint="json",
    ))
    registry.add_option(GlobalOptionSpec(
        "config-file", __("path to CLI config file"), hint=__("file"),
    ))
    registry.add_option(GlobalOptionSpec(
        "sdk", __("SDK version to use to bootstrap SDK-level commands"),
        abbreviation="s", default=LATEST, hint=__("version"),
    ))
    return registry
