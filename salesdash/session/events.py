"""
Cross-view notifications.

A view that changes a filter publishes one of the typed events below;
every subscribed view receives it and recomputes its own aggregate.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, List, Type, Union

import structlog

from salesdash.filters import YearSelection

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class YearChanged:
    year: YearSelection


@dataclass(frozen=True)
class ProviderChanged:
    provider: str


@dataclass(frozen=True)
class CountrySelected:
    country: str


DashboardEvent = Union[YearChanged, ProviderChanged, CountrySelected]
EVENT_TYPES = (YearChanged, ProviderChanged, CountrySelected)

Handler = Callable[[DashboardEvent], None]


class EventChannel:
    """
    Synchronous publish/subscribe channel.

    Handlers run in subscription order on the publishing call stack.
    """

    def __init__(self):
        self._handlers: DefaultDict[Type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type, handler: Handler) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it"""
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event_type!r}")
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def publish(self, event: DashboardEvent) -> int:
        """Deliver an event to its subscribers; returns how many were notified"""
        handlers = list(self._handlers[type(event)])
        logger.debug("Publishing event", event_type=type(event).__name__, subscribers=len(handlers))
        for handler in handlers:
            handler(event)
        return len(handlers)

    def subscriber_count(self, event_type: Type) -> int:
        return len(self._handlers[event_type])
