"""Per-process bootstrap state shared by the processor, hooks and commands.

One :class:`BootstrapContext` is created at startup and passed by
reference through every stage; nothing in ticli keeps this state in
module globals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ticli.cli.console import ConsoleProxy
from ticli.core.events import EventBus
from ticli.core.models import CommandRegistration, SDKDescriptor
from ticli.core.protocols import AnalyticsSender, Translator
from ticli.infra.analytics import LoggingAnalytics
from ticli.infra.config_store import ConfigStore
from ticli.utils import logger as log_config
from ticli.utils.i18n import translate as default_translate

if TYPE_CHECKING:
    from ticli.cli.global_flags import GlobalFlagRegistry


@dataclass
class BootstrapContext:
    """Mutable state of one CLI invocation."""

    config: ConfigStore
    out: ConsoleProxy
    """Command output (stdout)."""

    err: ConsoleProxy
    """Banner, warnings and diagnostics (stderr)."""

    analytics: AnalyticsSender
    translate: Translator
    bus: EventBus = field(default_factory=EventBus)

    commands: dict[str, CommandRegistration] = field(default_factory=dict)
    """Commands contributed by the SDK and its platforms."""

    builtins: dict[str, CommandRegistration] = field(default_factory=dict)

    installed_sdks: tuple[SDKDescriptor, ...] = ()
    sdk: SDKDescriptor | None = None
    sdk_selector: str | None = None
    sdk_explicit: bool = False
    """Whether :attr:`sdk_selector` came from ``--sdk`` or config."""

    argv: tuple[str, ...] = ()
    command_name: str | None = None
    """The command the user typed, before any routing to ``help``."""

    help_requested: bool = False
    exit_requested: int | None = None
    """Set by a global flag that ends the invocation early."""

    global_values: dict[str, Any] = field(default_factory=dict)
    flag_registry: GlobalFlagRegistry | None = None
    """Global flag table, for help output."""

    locale: str = ""
    banner_enabled: bool = True
    banner_rendered: bool = False
    finalized: bool = False

    # ------------------------------------------------------------------
    # Command lookup
    # ------------------------------------------------------------------

    def find_command(self, name: str | None) -> CommandRegistration | None:
        """SDK commands first, then built-ins."""
        if not name:
            return None
        return self.commands.get(name) or self.builtins.get(name)

    def is_builtin(self, name: str | None) -> bool:
        return name is not None and name in self.builtins

    # ------------------------------------------------------------------
    # Flag effects
    # ------------------------------------------------------------------

    def set_colors(self, enabled: bool) -> None:
        self.out.colors = enabled
        self.err.colors = enabled

    def set_quiet(self, quiet: bool) -> None:
        self.out.quiet = quiet
        self.err.quiet = quiet
        log_config.silence(quiet)

    @property
    def prompt_enabled(self) -> bool:
        return bool(self.config.get("cli.prompt", True))

    @property
    def progress_bars_enabled(self) -> bool:
        return bool(self.config.get("cli.progressBars", True))


def create_context(
    *,
    config_path: Path | None = None,
    analytics: AnalyticsSender | None = None,
    translate: Translator | None = None,
) -> BootstrapContext:
    """Build a context with default collaborators where none are given."""
    return BootstrapContext(
        config=ConfigStore(default_path=config_path),
        out=ConsoleProxy(stderr=False),
        err=ConsoleProxy(stderr=True),
        analytics=analytics or LoggingAnalytics(),
        translate=translate or default_translate,
    )
