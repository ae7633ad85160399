"""Bootstrap state machine and top-level dispatch.

States
------
``BOOTSTRAPPING → CONFIG_LOADED → SDK_RESOLVED → COMMANDS_SCANNED →
PRE_VALIDATED → DISPATCHING → EXITED``

* **CONFIG_LOADED**: config file loaded, ``--config`` merged, locale
  resolved, global flag callbacks run.
* **SDK_RESOLVED**: installed SDKs scanned and one selected.  Built-in
  commands may continue without an SDK; anything else fails here, as
  does an SDK older than the supported minimum.  Nothing is scanned on
  failure.
* **COMMANDS_SCANNED**: SDK commands, then each platform's commands;
  SDK hooks, then each platform's hooks.
* **PRE_VALIDATED**: every ``cli:pre-validate`` hook has finished.
* **DISPATCHING**: the command's own argv parsed and its handler run.

The processor never calls ``sys.exit``; fatal conditions are raised as
:class:`~ticli.exceptions.TicliError` subclasses for the boundary in
:mod:`ticli.cli.app`.
"""

from __future__ import annotations

import enum
import inspect
import logging
from collections.abc import Sequence
from pathlib import Path

from ticli.cli import exit_codes
from ticli.cli.arguments import parse_command_args
from ticli.cli.banner import pre_validate_hook, render_banner
from ticli.cli.builtins import builtin_commands
from ticli.cli.context import BootstrapContext
from ticli.cli.global_flags import GlobalFlagRegistry, PreParseResult, default_registry
from ticli.core import sdk_selection
from ticli.core.events import POST_EXECUTE, PRE_EXECUTE, PRE_VALIDATE
from ticli.core.locale_resolver import DEFAULT_PROBE_TIMEOUT, LocaleResolver
from ticli.core.models import LATEST, CommandRegistration, SDKDescriptor
from ticli.core.plugin_scanner import PluginScanner, merge_commands
from ticli.core.protocols import LocaleProbe
from ticli.exceptions import SDKIncompatibleError, SDKNotFoundError, TicliError
from ticli.infra.locale_probe import probe_system_locale
from ticli.infra.module_loader import list_directory, load_module
from ticli.infra.paths import resolve_path
from ticli.infra.sdk_registry import SDKRegistry
from ticli.version import APP_NAME, MIN_SDK_VERSION

logger = logging.getLogger(__name__)

HELP_COMMAND: str = "help"


class ProcessorState(enum.Enum):
    BOOTSTRAPPING = "bootstrapping"
    CONFIG_LOADED = "config-loaded"
    SDK_RESOLVED = "sdk-resolved"
    COMMANDS_SCANNED = "commands-scanned"
    PRE_VALIDATED = "pre-validated"
    DISPATCHING = "dispatching"
    EXITED = "exited"


class CLIProcessor:
    """Drive one CLI invocation from raw argv to an exit code.

    Parameters
    ----------
    ctx:
        The invocation's :class:`BootstrapContext`.
    flags:
        Global flag table; :func:`default_registry` when omitted.
    registry:
        SDK locator.
    scanner:
        Plugin scanner; defaults to one that imports real files.
    locale_probe:
        Host locale probe used when config has no ``user.locale``.
    min_sdk_version:
        Oldest SDK whose plugins will be loaded.
    """

    def __init__(
        self,
        ctx: BootstrapContext,
        *,
        flags: GlobalFlagRegistry | None = None,
        registry: SDKRegistry | None = None,
        scanner: PluginScanner | None = None,
        locale_probe: LocaleProbe | None = None,
        locale_timeout: float = DEFAULT_PROBE_TIMEOUT,
        min_sdk_version: str = MIN_SDK_VERSION,
    ) -> None:
        self.ctx: BootstrapContext = ctx
        self.flags: GlobalFlagRegistry = flags or default_registry(ctx.translate)
        self.registry: SDKRegistry = registry or SDKRegistry()
        self.scanner: PluginScanner = scanner or PluginScanner(list_directory, load_module)
        self.min_sdk_version: str = min_sdk_version
        self._locale_probe: LocaleProbe = locale_probe or probe_system_locale
        self._locale_timeout: float = locale_timeout
        self.search_paths: list[str] = []

        self.state: ProcessorState = ProcessorState.BOOTSTRAPPING
        self.history: list[ProcessorState] = [self.state]

        ctx.flag_registry = self.flags
        for registration in builtin_commands():
            ctx.builtins.setdefault(registration.name, registration)
        ctx.bus.on(PRE_VALIDATE, pre_validate_hook, priority=0)

    def _advance(self, state: ProcessorState) -> None:
        logger.debug("%s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self, argv: Sequence[str]) -> int:
        """Run every stage for *argv* and return the exit code."""
        try:
            pre = await self.load_config(argv)
            if self.ctx.exit_requested is not None:
                return self.ctx.exit_requested

            self.resolve_sdk(pre)
            if self.ctx.sdk is not None:
                self.scan_plugins()
            await self.pre_validate()
            return await self.dispatch(pre)
        finally:
            self._advance(ProcessorState.EXITED)

    # ------------------------------------------------------------------
    # BOOTSTRAPPING -> CONFIG_LOADED
    # ------------------------------------------------------------------

    async def load_config(self, argv: Sequence[str]) -> PreParseResult:
        """Pre-parse argv, load config and run the global flag callbacks.

        Raises
        ------
        ConfigLoadError
            If the config file exists but is not valid JSON.
        """
        ctx = self.ctx
        ctx.argv = tuple(argv)
        pre = self.flags.pre_parse(argv)
        ctx.command_name = pre.command

        ctx.config.load(pre.options.get("config-file"))
        override_error = ctx.config.merge_override(pre.options.get("config"))
        if override_error is not None:
            ctx.err.print(ctx.translate("Warning: %s", str(override_error)), markup=False)
            if override_error.hint:
                ctx.err.print(ctx.translate("Hint: %s", override_error.hint), markup=False)
        ctx.locale = await LocaleResolver(
            ctx.config,
            self._locale_probe,
            timeout=self._locale_timeout,
        ).resolve()

        resolved = self.flags.apply(pre, ctx)
        ctx.global_values = {
            **{name.replace("-", "_"): value for name, value in resolved.items()},
            **{name.replace("-", "_"): value for name, value in pre.options.items()},
        }
        self._advance(ProcessorState.CONFIG_LOADED)
        return pre

    # ------------------------------------------------------------------
    # CONFIG_LOADED -> SDK_RESOLVED
    # ------------------------------------------------------------------

    def sdk_search_paths(self) -> list[str]:
        """``paths.sdks`` plus ``sdk.defaultInstallLocation``.

        When the default install location is missing from the persisted
        ``paths.sdks`` it is appended there and the config is saved.
        Paths passed with ``--config`` are searched but never saved.
        """
        config = self.ctx.config
        paths = _path_list(config.get("paths.sdks"))

        default_location = config.get("sdk.defaultInstallLocation")
        if not default_location:
            return paths
        if not _contains_path(paths, default_location):
            paths.append(str(default_location))

        persisted = _path_list(config.get_persisted("paths.sdks"))
        if not _contains_path(persisted, default_location):
            persisted.append(str(default_location))
            config.set("paths.sdks", persisted)
            try:
                config.save()
            except TicliError as exc:
                logger.warning("%s", exc)
        return paths

    def resolve_sdk(self, pre: PreParseResult) -> SDKDescriptor | None:
        """Scan installed SDKs and select one for this invocation.

        Raises
        ------
        SDKNotFoundError
            No SDK matches and the command is not a built-in.
        SDKIncompatibleError
            The selected SDK is older than :attr:`min_sdk_version`.
        """
        ctx = self.ctx
        config = ctx.config
        self.search_paths = self.sdk_search_paths()
        ctx.installed_sdks = self.registry.scan(self.search_paths)

        selector = pre.options.get("sdk") or config.get("sdk.selected") or config.get("app.sdk")
        ctx.sdk_explicit = not sdk_selection.is_latest_selector(selector)
        ctx.sdk_selector = str(selector) if ctx.sdk_explicit else LATEST
        sdk = self.registry.resolve(ctx.sdk_selector, ctx.installed_sdks)

        if sdk is None:
            if pre.command is None or ctx.is_builtin(pre.command):
                logger.debug("No SDK resolved; continuing with built-in %r", pre.command)
                self._advance(ProcessorState.SDK_RESOLVED)
                return None
            render_banner(ctx)
            raise self._sdk_not_found()

        if not self.registry.is_compatible(sdk, self.min_sdk_version):
            render_banner(ctx)
            raise self._sdk_too_old(sdk)

        ctx.sdk = sdk
        logger.debug("Using SDK %s at %s", sdk.name, sdk.path)
        self._advance(ProcessorState.SDK_RESOLVED)
        return sdk

    def _sdk_not_found(self) -> SDKNotFoundError:
        ctx = self.ctx
        __ = ctx.translate
        available = tuple(
            sdk_selection.compatible_names(ctx.installed_sdks, self.min_sdk_version)
        )
        if not available:
            locations = "\n".join(f"    {p}" for p in self.search_paths) or "    " + __("(none configured)")
            return SDKNotFoundError(
                __("No SDKs found!"),
                hint="\n".join(
                    (
                        __("Install an SDK into one of the SDK search paths:"),
                        locations,
                        __("Add a search path with: %s", f"{APP_NAME} config paths.sdks '[\"/path/to/sdks\"]'"),
                    )
                ),
                selector=ctx.sdk_selector,
            )

        lines: list[str] = []
        suggestions = sdk_selection.suggest(ctx.sdk_selector, available)
        if suggestions:
            lines.append(__("Did you mean this?"))
            lines.extend(f"    {name}" for name in suggestions)
        lines.append(__("Available SDKs:"))
        lines.append("    " + "  ".join(available))
        return SDKNotFoundError(
            __('Invalid SDK "%s"', ctx.sdk_selector),
            hint="\n".join(lines),
            selector=ctx.sdk_selector,
            available=available,
        )

    def _sdk_too_old(self, sdk: SDKDescriptor) -> SDKIncompatibleError:
        __ = self.ctx.translate
        if self.ctx.sdk_explicit:
            message = __('Specified SDK "%s" is too old', sdk.name)
        else:
            message = __('The most recent installed SDK "%s" is too old', sdk.name)
        return SDKIncompatibleError(
            message,
            hint=__("%s requires SDK %s or newer.", APP_NAME, self.min_sdk_version),
        )

    # ------------------------------------------------------------------
    # SDK_RESOLVED -> COMMANDS_SCANNED
    # ------------------------------------------------------------------

    def plugin_roots(self, sdk: SDKDescriptor) -> tuple[list[Path], list[Path]]:
        """Command roots and hook roots of *sdk*, SDK first then platforms."""
        command_roots = [sdk.commands_dir]
        hook_roots = [sdk.hooks_dir]
        for platform in sdk.platforms:
            command_roots.append(platform.path / "cli" / "commands")
            hook_roots.append(platform.path / "cli" / "hooks")
        return command_roots, hook_roots

    def scan_plugins(self) -> None:
        ctx = self.ctx
        assert ctx.sdk is not None
        command_roots, hook_roots = self.plugin_roots(ctx.sdk)
        for root in command_roots:
            merge_commands(ctx.commands, self.scanner.scan_commands(root))
        for root in hook_roots:
            ctx.bus.register_all(self.scanner.scan_hooks(root))
        logger.debug(
            "Registered %d command(s) and %d hook(s) from SDK %s",
            len(ctx.commands),
            len(ctx.bus),
            ctx.sdk.name,
        )
        self._advance(ProcessorState.COMMANDS_SCANNED)

    # ------------------------------------------------------------------
    # COMMANDS_SCANNED -> PRE_VALIDATED
    # ------------------------------------------------------------------

    async def pre_validate(self) -> None:
        await self.ctx.bus.emit(PRE_VALIDATE, self.ctx)
        self._advance(ProcessorState.PRE_VALIDATED)

    # ------------------------------------------------------------------
    # PRE_VALIDATED -> DISPATCHING
    # ------------------------------------------------------------------

    def select_command(self, pre: PreParseResult) -> CommandRegistration:
        """The requested command, or ``help`` when it is missing or unknown."""
        ctx = self.ctx
        if not ctx.help_requested:
            registration = ctx.find_command(pre.command)
            if registration is not None:
                return registration
        help_command = ctx.find_command(HELP_COMMAND)
        assert help_command is not None
        return help_command

    async def dispatch(self, pre: PreParseResult) -> int:
        ctx = self.ctx
        registration = self.select_command(pre)
        tokens = pre.command_argv if registration.name == pre.command else []
        invocation = parse_command_args(
            registration.name,
            registration.configuration,
            tokens,
            global_values=ctx.global_values,
            prog=APP_NAME,
        )

        self._advance(ProcessorState.DISPATCHING)
        await ctx.bus.emit(PRE_EXECUTE, ctx, invocation)
        result = registration.handler(ctx, invocation)
        if inspect.isawaitable(result):
            result = await result
        code = exit_codes.SUCCESS if result is None else int(result)
        await ctx.bus.emit(POST_EXECUTE, ctx, invocation)
        return code


def _path_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(p) for p in value if p]


def _contains_path(paths: Sequence[str], location: str) -> bool:
    target = resolve_path(location)
    return any(resolve_path(p) == target for p in paths)
