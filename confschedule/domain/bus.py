"""Synchronous in-process publish/subscribe bus for schedule events."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

from confschedule.utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[Any], None]


class EventBus:
    """Dispatches each published event to the handlers subscribed to its type.

    Handlers run in registration order on the publisher's thread; an exception
    in a handler propagates to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._subscribers[event_type].append(handler)

    def handlers_for(self, event_type: type) -> list[Handler]:
        return list(self._subscribers.get(event_type, []))

    def publish(self, event: Any) -> None:
        handlers = self.handlers_for(type(event))
        logger.debug("publish %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            handler(event)
