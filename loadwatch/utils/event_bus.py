"""
Lightweight synchronous event bus plus a per-instance observable mixin.

Dispatch happens on the caller's stack, in registration order. Listeners added
or removed while an event is being dispatched take effect on the next publish.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

LOAD_START = "load:start"
LOAD_END = "load:end"
REQUEST = "request"
ERROR = "error"
ROUTE = "route"

Listener = Callable[..., Any]


class EventBus:
    """Simple pub/sub event bus."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, event: str, callback: Listener) -> None:
        self._subscribers[event].append(callback)

    def unsubscribe(self, event: str, callback: Listener | None = None) -> None:
        """Remove one registration of `callback`, or every listener of `event` when omitted."""
        if callback is None:
            self._subscribers.pop(event, None)
            return
        callbacks = self._subscribers.get(event)
        if not callbacks:
            return
        try:
            callbacks.remove(callback)
        except ValueError:
            pass

    def once(self, event: str, callback: Listener) -> Listener:
        """Subscribe `callback` for a single delivery; returns the registered wrapper."""

        def wrapper(*args: Any) -> None:
            self.unsubscribe(event, wrapper)
            callback(*args)

        self.subscribe(event, wrapper)
        return wrapper

    def publish(self, event: str, *args: Any) -> None:
        for cb in list(self._subscribers.get(event, [])):
            try:
                cb(*args)
            except Exception:
                # One failing listener must not starve the rest
                logger.exception("Listener %r failed for event '%s'", cb, event)

    def listener_count(self, event: str) -> int:
        return len(self._subscribers.get(event, []))

    def clear(self) -> None:
        self._subscribers.clear()

    on = subscribe
    off = unsubscribe
    trigger = publish
    emit = publish


class Observable:
    """Mixin giving an object its own `on/off/trigger` scope."""

    @property
    def events(self) -> EventBus:
        bus = self.__dict__.get("_event_bus")
        if bus is None:
            bus = EventBus()
            self.__dict__["_event_bus"] = bus
        return bus

    def on(self, event: str, callback: Listener) -> None:
        self.events.subscribe(event, callback)

    def off(self, event: str, callback: Listener | None = None) -> None:
        self.events.unsubscribe(event, callback)

    def once(self, event: str, callback: Listener) -> Listener:
        return self.events.once(event, callback)

    def trigger(self, event: str, *args: Any) -> None:
        self.events.publish(event, *args)
