"""
Debounced load:start / load:end aggregation.

A `LoadHandler` is registered as the `load:start` listener of some owner object
(a view, the application root scope, ...). Every start it sees is tracked until
the matching `load:end` arrives on the object that started it. The owner only
hears about it through two callbacks:

- `on_start(owner, message, background, signal)` once the episode has been open
  for `start_delay` seconds,
- `on_end(owner, background, signal)` `end_delay` seconds after the last
  sub-load ended, and only when `on_start` ran for that episode.

Loads that finish faster than `start_delay` never reach the UI, and an end that
is immediately followed by another start does not blink the indicator.

Example:
    handler = make_load_handler(
        lambda view, message, background, signal: view.show_spinner(),
        lambda view, background, signal: view.hide_spinner(),
        scheduler=context.scheduler,
    )
    handler.attach(view)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from loadwatch.utils.event_bus import LOAD_END, LOAD_START, Listener, Observable
from loadwatch.utils.timers import Scheduler, TimerHandle, cancel_timer

logger = logging.getLogger(__name__)

DEFAULT_START_DELAY = 0.33
DEFAULT_END_DELAY = 0.10

SIGNAL_ATTR = "_load_signal"

StartCallback = Callable[[Any, "str | None", bool, "LoadSignal"], None]
EndCallback = Callable[[Any, bool, "LoadSignal"], None]


@dataclass(eq=False)
class LoadSignal(Observable):
    """State of one loading episode on one owner."""

    message: str | None = None
    background: bool = False
    started: bool = False
    start_timer: TimerHandle | None = None
    end_timer: TimerHandle | None = None
    pending_sources: list[Any] = field(default_factory=list)


def current_signal(owner: Any) -> LoadSignal | None:
    """Return the open episode for `owner`, if any."""
    return getattr(owner, SIGNAL_ATTR, None)


class LoadHandler:
    """Callable `load:start` listener; see module docstring."""

    def __init__(
        self,
        on_start: StartCallback,
        on_end: EndCallback,
        scheduler: Scheduler,
        start_delay: float = DEFAULT_START_DELAY,
        end_delay: float = DEFAULT_END_DELAY,
    ) -> None:
        self.on_start = on_start
        self.on_end = on_end
        self.scheduler = scheduler
        self.start_delay = start_delay
        self.end_delay = end_delay

    def attach(self, owner: Observable) -> Listener:
        """Register on `owner`'s `load:start`; returns the listener for `owner.off`."""

        def listener(message: str | None = None, background: bool = False, source: Any = None) -> None:
            self(owner, message, background, source)

        owner.on(LOAD_START, listener)
        return listener

    def __call__(
        self, owner: Any, message: str | None = None, background: bool = False, source: Any = None
    ) -> None:
        if source is None:
            source = owner
        signal = current_signal(owner)
        if signal is None:
            signal = LoadSignal(message=message, background=bool(background))
            setattr(owner, SIGNAL_ATTR, signal)
            logger.debug("Load episode opened on %r (background=%s)", owner, signal.background)
            self._arm_start(owner, signal)
        else:
            # A new start means we are not ending
            cancel_timer(signal.end_timer)
            signal.end_timer = None
            signal.message = message
            if not background and signal.background:
                signal.background = False
                self._arm_start(owner, signal)

        signal.pending_sources.append(source)
        self._watch_end(owner, signal, source)

    def _delay(self, owner: Any, attr: str, fallback: float) -> float:
        value = getattr(owner, attr, None)
        return fallback if value is None else float(value)

    def _arm_start(self, owner: Any, signal: LoadSignal) -> None:
        cancel_timer(signal.start_timer)

        def fire() -> None:
            signal.start_timer = None
            signal.started = True
            self.on_start(owner, signal.message, signal.background, signal)

        delay = self._delay(owner, "loading_start_delay", self.start_delay)
        signal.start_timer = self.scheduler.call_later(delay, fire)

    def _watch_end(self, owner: Any, signal: LoadSignal, source: Any) -> None:
        def end_callback(*_args: Any) -> None:
            source.off(LOAD_END, end_callback)
            if current_signal(owner) is not signal:
                return
            try:
                signal.pending_sources.remove(source)
            except ValueError:
                pass
            if not signal.pending_sources:
                self._arm_end(owner, signal)

        source.on(LOAD_END, end_callback)

    def _arm_end(self, owner: Any, signal: LoadSignal) -> None:
        cancel_timer(signal.end_timer)

        def fire() -> None:
            signal.end_timer = None
            # A late start may have re-populated the episode
            if signal.pending_sources or current_signal(owner) is not signal:
                return
            if signal.started:
                self.on_end(owner, signal.background, signal)
                signal.trigger(LOAD_END, signal)
            cancel_timer(signal.start_timer)
            signal.start_timer = None
            setattr(owner, SIGNAL_ATTR, None)
            logger.debug("Load episode closed on %r (started=%s)", owner, signal.started)

        delay = self._delay(owner, "loading_end_delay", self.end_delay)
        signal.end_timer = self.scheduler.call_later(delay, fire)


def make_load_handler(
    on_start: StartCallback,
    on_end: EndCallback,
    *,
    scheduler: Scheduler,
    start_delay: float = DEFAULT_START_DELAY,
    end_delay: float = DEFAULT_END_DELAY,
) -> LoadHandler:
    """Build a `LoadHandler` pairing the UI start/end callbacks."""
    return LoadHandler(on_start, on_end, scheduler, start_delay=start_delay, end_delay=end_delay)
