"""Startup banner and the one-time terminal checks that follow it.

:func:`pre_validate_hook` is registered on ``cli:pre-validate`` by the
processor before any SDK hook, because that is the earliest point at
which the command (and so its ``skip_banner`` setting) is known.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from ticli.cli.context import BootstrapContext
from ticli.infra.paths import analytics_file_paths
from ticli.version import APP_NAME, __version__


def render_banner(ctx: BootstrapContext) -> bool:
    """Print the banner once per invocation; return whether it was printed."""
    if ctx.banner_rendered or not ctx.banner_enabled or ctx.err.quiet:
        return False
    __ = ctx.translate
    ctx.err.print(f"[bold cyan]{APP_NAME}[/bold cyan], {__('CLI version %s', __version__)}")
    if ctx.sdk is not None:
        ctx.err.print(__("SDK version %s", ctx.sdk.name))
    ctx.err.print()
    ctx.banner_rendered = True
    return True


def unwritable_file(paths: Iterable[Path]) -> Path | None:
    """First of *paths* that exists but cannot be written, if any."""
    for path in paths:
        if path.exists() and not os.access(path, os.W_OK):
            return path
    return None


def terminal_encoding(lang: str | None) -> str | None:
    """Encoding suffix of a ``LANG`` value (``en_US.ISO-8859-1``), if any."""
    if not lang:
        return None
    parts = lang.split(".")
    if len(parts) < 2:
        return None
    return parts[-1].split("@", 1)[0]


def _check_files(ctx: BootstrapContext) -> None:
    path = unwritable_file(analytics_file_paths())
    if path is None:
        return
    __ = ctx.translate
    ctx.err.print(f"[magenta]{__('Required file %s is not writable.', path)}[/magenta]")
    ctx.err.print(
        f"[magenta]{__('Please ensure the CLI has access to modify this file.')}[/magenta]\n"
    )


def _check_encoding(ctx: BootstrapContext) -> None:
    if ctx.config.get("cli.hideCharEncWarning", False):
        return
    encoding = terminal_encoding(os.environ.get("LANG"))
    if encoding is None or encoding.lower().replace("-", "") == "utf8":
        return
    __ = ctx.translate
    detected = __(
        'Detected terminal character encoding as "%s". Some characters may not render properly.',
        encoding,
    )
    advice = __("It is recommended that you change the character encoding to UTF-8.")
    ctx.err.print(f"[magenta]{detected}[/magenta]")
    ctx.err.print(f"[magenta]{advice}[/magenta]\n")


def pre_validate_hook(ctx: BootstrapContext) -> None:
    """Render the banner unless the command opts out, then run the checks."""
    command = ctx.find_command(ctx.command_name)
    if command is not None and command.configuration.skip_banner:
        return
    if render_banner(ctx):
        _check_files(ctx)
        _check_encoding(ctx)
