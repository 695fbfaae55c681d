"""
Transport boundary for data objects.

A transport performs one request for a data object and reports back through the
`success`/`error`/`complete` slots of the `FetchOptions` it was handed, always
calling `complete` last. `ScheduledTransport` runs a plain loader function after
a fixed latency on a scheduler, which is enough for the demo shell and tests.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from loadwatch.errors import RequestAborted, TransportError
from loadwatch.services.fetch_queue import FetchOptions
from loadwatch.utils.timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

Loader = Callable[[str, Any, dict[str, Any]], Any]


class RequestHandle(Protocol):
    def abort(self) -> None: ...


class Transport(Protocol):
    def sync(self, method: str, data_object: Any, options: FetchOptions) -> RequestHandle: ...


class ScheduledRequest:
    """One pending `ScheduledTransport` request."""

    def __init__(self, method: str, data_object: Any, options: FetchOptions, loader: Loader) -> None:
        self.method = method
        self.data_object = data_object
        self.options = options
        self.loader = loader
        self.timer: TimerHandle | None = None
        self.done = False

    def run(self) -> None:
        if self.done:
            return
        self.done = True
        self.timer = None
        try:
            response = self.loader(self.method, self.data_object, dict(self.options.params))
        except Exception as exc:
            logger.warning("%s request for %r failed: %s", self.method, self.data_object, exc)
            error = exc if isinstance(exc, TransportError) else TransportError(str(exc), method=self.method, cause=exc)
            self._report("error", error)
        else:
            self._report("success", response)
        self._report("complete")

    def abort(self) -> None:
        if self.done:
            return
        self.done = True
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        logger.debug("%s request for %r aborted", self.method, self.data_object)
        self._report("error", RequestAborted(self.method))
        self._report("complete")

    def _report(self, slot: str, *args: Any) -> None:
        callback = getattr(self.options, slot)
        if callback is not None:
            callback(*args)


class ScheduledTransport:
    """Runs `loader(method, data_object, params)` `latency` seconds after each sync."""

    def __init__(self, scheduler: Scheduler, loader: Loader, latency: float = 0.0) -> None:
        self.scheduler = scheduler
        self.loader = loader
        self.latency = latency
        self.calls = 0

    def sync(self, method: str, data_object: Any, options: FetchOptions) -> ScheduledRequest:
        self.calls += 1
        request = ScheduledRequest(method, data_object, options, self.loader)
        request.timer = self.scheduler.call_later(self.latency, request.run)
        return request
