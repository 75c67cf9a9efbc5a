"""In-process event bus — delivers cloning/cloned events to registered handlers."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from fnmatch import fnmatchcase
from typing import Any

from cloner.application.interfaces import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None] | None]


class InMemoryEventBus(EventPublisher):
    """Dispatches events to handlers subscribed by name or shell-style pattern.

    Handlers may be plain functions or coroutines. A failing handler is
    logged and never interrupts delivery to the others or the publisher.
    """

    def __init__(self) -> None:
        self._subscriptions: list[tuple[str, EventHandler]] = []

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Register ``handler`` for events matching ``pattern`` (e.g. ``cloned:*``)."""
        self._subscriptions.append((pattern, handler))

    def unsubscribe(self, pattern: str, handler: EventHandler) -> bool:
        """Remove a subscription. Returns False if it was not registered."""
        try:
            self._subscriptions.remove((pattern, handler))
        except ValueError:
            return False
        return True

    async def publish(self, event_name: str, payload: Any) -> None:
        for pattern, handler in list(self._subscriptions):
            if not fnmatchcase(event_name, pattern):
                continue
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Event handler %r failed for '%s'", handler, event_name)

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)
