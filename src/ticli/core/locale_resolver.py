"""Active-locale resolution.

The persisted ``user.locale`` always wins.  Otherwise the host system is
probed, bounded by a timeout: a probe that fails, hangs or returns
nothing yields ``""``, which downstream code treats as "use the base
strings".
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from ticli.core.protocols import LocaleProbe

logger = logging.getLogger(__name__)

LOCALE_KEY: str = "user.locale"
DEFAULT_PROBE_TIMEOUT: float = 5.0


class _Config(Protocol):
    def get(self, key: str, fallback: Any = None) -> Any: ...

    def set_default(self, key: str, value: Any) -> None: ...


class LocaleResolver:
    """Resolve the locale from config or a platform probe.

    Parameters
    ----------
    config:
        Store read for ``user.locale`` and given the probed value as a
        default.
    probe:
        Coroutine function returning the host locale.
    timeout:
        Seconds to wait for *probe* before giving up.
    """

    def __init__(
        self,
        config: _Config,
        probe: LocaleProbe,
        *,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        self._config = config
        self._probe: LocaleProbe = probe
        self._timeout: float = timeout

    async def resolve(self) -> str:
        configured = self._config.get(LOCALE_KEY)
        if configured:
            return str(configured)

        locale = await self._run_probe()
        self._config.set_default(LOCALE_KEY, locale)
        return locale

    async def _run_probe(self) -> str:
        try:
            result = await asyncio.wait_for(self._probe(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.debug("Locale probe timed out after %.1fs", self._timeout)
            return ""
        except Exception as exc:
            logger.debug("Locale probe failed: %s", exc)
            return ""
        return (result or "").strip()
