"""Core / service layer — pure selection logic and plugin bookkeeping.

Rules
-----
* No ``print()`` calls.
* No direct filesystem or process I/O: listing directories, loading
  modules and probing the host go through :mod:`ticli.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from ticli.core.events import EventBus
from ticli.core.locale_resolver import LocaleResolver
from ticli.core.models import (
    CommandInvocation,
    CommandRegistration,
    CommandSchema,
    HookRegistration,
    PlatformDescriptor,
    SDKDescriptor,
    SDKManifest,
)
from ticli.core.plugin_scanner import PluginScanner
from ticli.core.protocols import AnalyticsSender, DirectoryLister, LocaleProbe, ModuleLoader

__all__: list[str] = [
    "AnalyticsSender",
    "CommandInvocation",
    "CommandRegistration",
    "CommandSchema",
    "DirectoryLister",
    "EventBus",
    "HookRegistration",
    "LocaleProbe",
    "LocaleResolver",
    "ModuleLoader",
    "PlatformDescriptor",
    "PluginScanner",
    "SDKDescriptor",
    "SDKManifest",
]
