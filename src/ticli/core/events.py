"""Lifecycle event bus.

Hooks for one event run one after another in ascending priority, and in
registration order when priorities are equal.  A hook may be a plain
function or a coroutine function; awaitable results are awaited before
the next hook starts, and :meth:`EventBus.emit` returns only after every
hook for the event has finished.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from ticli.core.models import DEFAULT_HOOK_PRIORITY, HookRegistration

logger = logging.getLogger(__name__)

PRE_VALIDATE: str = "cli:pre-validate"
PRE_EXECUTE: str = "cli:pre-execute"
POST_EXECUTE: str = "cli:post-execute"


class EventBus:
    """Ordered registry of :class:`HookRegistration` per event name."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[HookRegistration]] = {}

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())

    def register(self, registration: HookRegistration) -> None:
        self._hooks.setdefault(registration.event_name, []).append(registration)

    def register_all(self, registrations: Iterable[HookRegistration]) -> None:
        for registration in registrations:
            self.register(registration)

    def on(
        self,
        event_name: str,
        handler: Callable[..., Any],
        *,
        priority: int = DEFAULT_HOOK_PRIORITY,
        source_path: Path | None = None,
    ) -> HookRegistration:
        """Register *handler* for *event_name* and return the registration."""
        registration = HookRegistration(
            event_name=event_name,
            source_path=source_path,
            handler=handler,
            priority=priority,
        )
        self.register(registration)
        return registration

    def hooks_for(self, event_name: str) -> list[HookRegistration]:
        """Hooks for *event_name* in the order :meth:`emit` runs them."""
        # sorted() is stable, so equal priorities keep registration order.
        return sorted(self._hooks.get(event_name, []), key=lambda h: h.priority)

    async def emit(self, event_name: str, *args: Any) -> int:
        """Run every hook for *event_name* with *args*.

        A hook that raises is logged and the remaining hooks still run.

        Returns
        -------
        int
            The number of hooks that completed without raising.
        """
        completed = 0
        for hook in self.hooks_for(event_name):
            try:
                result = hook.handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(
                    "Hook for %s from %s failed: %s",
                    event_name,
                    hook.source_path or "<builtin>",
                    exc,
                )
                continue
            completed += 1
        return completed
