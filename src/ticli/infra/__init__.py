"""Infrastructure layer — filesystem, subprocess and plugin import.

This layer wraps all interaction with the config file, SDK install
directories, plugin source files and host tools.  Every raw ``OSError``,
``json`` or plugin exception must be caught here and re-raised as a
:class:`~ticli.exceptions.TicliError` subclass, or turned into an empty
result where the operation is best effort.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from ticli.infra.analytics import LoggingAnalytics, build_exit_event
from ticli.infra.config_store import ConfigStore
from ticli.infra.locale_probe import probe_system_locale
from ticli.infra.module_loader import list_directory, load_module
from ticli.infra.sdk_registry import SDKRegistry

__all__: list[str] = [
    "ConfigStore",
    "LoggingAnalytics",
    "SDKRegistry",
    "build_exit_event",
    "list_directory",
    "load_module",
    "probe_system_locale",
]
