"""Process-exit telemetry payload and the default transport.

The real analytics transport is an external collaborator satisfying
:class:`~ticli.core.protocols.AnalyticsSender`.  When none is supplied,
:class:`LoggingAnalytics` records the event at debug level and sends
nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ticli.version import APP_GUID, APP_ID, APP_NAME, __version__

logger = logging.getLogger(__name__)


class LoggingAnalytics:
    """:class:`AnalyticsSender` that only logs what it was given."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    def send(self, event: Mapping[str, Any]) -> None:
        self.sent.append(dict(event))
        logger.debug("Analytics event: %s", dict(event))

    def auth_status(self) -> Mapping[str, Any]:
        return {"loggedIn": False}


def build_exit_event(config: Any, auth_status: Mapping[str, Any]) -> dict[str, Any]:
    """Assemble the telemetry event sent once when the process exits.

    Parameters
    ----------
    config:
        The loaded :class:`~ticli.infra.config_store.ConfigStore`.
    auth_status:
        Session fields from the analytics collaborator; merged last.
    """
    event: dict[str, Any] = {
        "appId": APP_ID,
        "appName": APP_NAME,
        "appGuid": APP_GUID,
        "homeDir": "~/.ticli",
        "version": __version__,
        "deployType": "production",
        "httpProxyServer": config.get("cli.httpProxyServer"),
        "analyticsUrl": config.get("cli.analytics.url"),
        "showErrors": config.get("cli.analytics.showErrors", False),
    }
    event.update(auth_status)
    return event
