"""ticli — command-line tool whose commands live in versioned SDK packages.

The package itself only bootstraps: it loads layered configuration,
resolves an installed SDK and loads that SDK's command and hook plugins.
"""

from ticli.version import __version__

__all__: list[str] = ["__version__"]
