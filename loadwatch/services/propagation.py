"""
Load event generation and forwarding between objects.
"""

from __future__ import annotations

from typing import Any

from loadwatch.utils.event_bus import LOAD_END, LOAD_START, Observable


class Loadable:
    """Mixin for objects that announce their own load:start / load:end."""

    def load_start(self: Any, message: str | None = None, background: bool = False) -> None:
        self.trigger(LOAD_START, message, background, self)

    def load_end(self: Any) -> None:
        self.trigger(LOAD_END, self)


class Forwarding:
    """Handle returned by `forward_load_events`."""

    def __init__(self, source: Observable, dest: Observable, once: bool = False) -> None:
        self.source = source
        self.dest = dest
        self.once = once
        self.active = True
        source.on(LOAD_START, self._forward)

    def _forward(self, message: str | None = None, background: bool = False, obj: Any = None) -> None:
        if self.once:
            self.unbind()
        self.dest.trigger(LOAD_START, message, background, obj)

    def unbind(self) -> None:
        self.active = False
        self.source.off(LOAD_START, self._forward)


def forward_load_events(source: Observable, dest: Observable, once: bool = False) -> Forwarding:
    """Re-trigger every `load:start` seen on `source` on `dest`."""
    return Forwarding(source, dest, once)
