"""Allow ``python -m ticli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m ticli`` behaves identically to the ``ticli`` console
script.
"""

from __future__ import annotations

from ticli.cli.app import cli

if __name__ == "__main__":
    cli()
