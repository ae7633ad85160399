"""Console-script entry point for ticli.

Every failure of a bootstrap run surfaces here and nowhere else:
:class:`~ticli.exceptions.TicliError` becomes a red ``Error:`` line plus
its hint, Ctrl+C becomes exit 130, and anything else is reported as an
unexpected error with exit 2.

Notes
-----
* Bootstrap stages live in :class:`~ticli.cli.processor.CLIProcessor`;
  this module only drives it.
* :func:`finalize` sends the exit telemetry event once per context,
  whether the run succeeded or not.
* Exit codes come from :mod:`ticli.cli.exit_codes`; handlers never call
  ``sys.exit`` themselves.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Sequence

from ticli.cli import exit_codes
from ticli.cli.console import console, escape
from ticli.cli.context import BootstrapContext, create_context
from ticli.cli.processor import CLIProcessor
from ticli.exceptions import TicliError
from ticli.infra.analytics import build_exit_event
from ticli.utils.logger import setup_logging

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Bootstrap run
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    context: BootstrapContext | None = None,
) -> int:
    """Run one ticli invocation.

    *argv* defaults to ``sys.argv[1:]``.  *context* is normally built
    fresh; tests pass one wired to temporary paths.  Returns the process
    exit code.
    """
    ctx = context or create_context()
    processor = CLIProcessor(ctx)
    args = list(sys.argv[1:] if argv is None else argv)
    return asyncio.run(processor.run(args))


def finalize(ctx: BootstrapContext) -> None:
    """Send the exit telemetry event; later calls do nothing."""
    if ctx.finalized:
        return
    ctx.finalized = True
    try:
        ctx.analytics.send(build_exit_event(ctx.config, ctx.analytics.auth_status()))
    except Exception:  # noqa: BLE001
        logger.debug("Failed to send exit telemetry", exc_info=True)


# ---------------------------------------------------------------------------
# Console script
# ---------------------------------------------------------------------------

def cli(
    argv: Sequence[str] | None = None,
    *,
    context: BootstrapContext | None = None,
) -> None:
    """Run :func:`main`, report failures on the console and exit."""
    setup_logging()
    ctx = context or create_context()
    try:
        code = main(argv, context=ctx)
    except TicliError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(exc)}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        code = exit_codes.GENERAL_ERROR
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        code = exit_codes.KEYBOARD_INTERRUPT
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(exc)}"
        )
        code = exit_codes.UNEXPECTED_ERROR
    finally:
        finalize(ctx)
    sys.exit(code)
