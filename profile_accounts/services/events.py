"""
Event Bus Interface

The account store announces changes through an injected event bus so it
does not know its subscribers.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable


EventHandler = Callable[[dict[str, Any]], None]


class EventBusInterface(ABC):
    """Publish/subscribe dispatcher."""

    @abstractmethod
    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        pass


class InMemoryEventBus(EventBusInterface):
    """
    Synchronous in-process bus.

    Handlers run in subscription order inside publish(); their
    exceptions propagate to the publisher. Every published event is kept
    in `published`, so use it in tests and short-lived tools only.
    """

    def __init__(self):
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self.published: list[tuple[str, dict[str, Any]]] = []

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers[event_name].append(handler)

    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        self.published.append((event_name, payload))
        for handler in self._handlers.get(event_name, []):
            handler(payload)
