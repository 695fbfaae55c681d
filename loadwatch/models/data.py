"""
Data objects that announce their fetches as load episodes.

`fetch` wraps every request in a `load_start()` / `load_end()` pair and routes
it through the per-object fetch queue, so concurrent callers share one
transport request. `load` adds the view-facing conveniences on top: skip the
fetch when already populated, drop the success callback when the user
navigated away, and abort the request in that case.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial
from typing import Any, Callable, Iterable

from loadwatch.models.transport import RequestHandle, Transport
from loadwatch.services.fetch_queue import FetchOptions, FetchQueue, queue_fetch
from loadwatch.services.propagation import Loadable, forward_load_events
from loadwatch.services.route_guard import History, RouteGuard
from loadwatch.utils.event_bus import ERROR, REQUEST, Observable

logger = logging.getLogger(__name__)

Failback = Callable[..., Any]


class DataObject(Observable, Loadable):
    """Base for `Model` and `Collection`."""

    def __init__(
        self,
        transport: Transport,
        history: History,
        root: Observable | None = None,
        name: str | None = None,
    ) -> None:
        self.transport = transport
        self.history = history
        self.root = root
        self.name = name or type(self).__name__.lower()
        self.request: RequestHandle | None = None
        self.aborted = False
        self.fetch_queue: FetchQueue | None = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    def is_populated(self) -> bool:
        raise NotImplementedError

    def apply_response(self, response: Any) -> None:
        raise NotImplementedError

    # Transport ----------------------------------------------------------
    def sync(self, method: str, options: FetchOptions) -> RequestHandle:
        """Hand the request to the transport, tracking it as `self.request` until complete."""
        complete = options.complete

        def on_complete(*args: Any) -> None:
            self.request = None
            self.aborted = False
            if complete is not None:
                complete(*args)

        options = replace(options, complete=on_complete)
        self.request = self.transport.sync(method, self, options)
        self.trigger(REQUEST, self.request)
        return self.request

    def _perform(self, options: FetchOptions) -> RequestHandle:
        success = options.success
        error = options.error

        def on_success(response: Any = None) -> None:
            self.apply_response(response)
            if success is not None:
                success(self, response)

        def on_error(exc: Any = None) -> None:
            if not options.ignore_errors:
                self.trigger(ERROR, self, exc)
            if error is not None:
                error(self, exc)

        return self.sync("read", replace(options, success=on_success, error=on_error))

    # Fetching -----------------------------------------------------------
    def fetch(self, options: FetchOptions | None = None) -> RequestHandle | None:
        options = options or FetchOptions()
        complete = options.complete

        def on_complete(*args: Any) -> None:
            if complete is not None:
                complete(*args)
            self.load_end()

        options = replace(options, complete=on_complete)
        self.load_start(None, options.background)
        return queue_fetch(self, options, self._perform)

    def load_data(
        self,
        callback: Callable[[Any], Any],
        failback: Failback | None = None,
        options: FetchOptions | None = None,
    ) -> Any:
        """Call `callback(self)` once populated; `failback(is_error, *args)` otherwise."""
        if self.is_populated():
            return callback(self)

        options = options or FetchOptions()
        guard = RouteGuard(self.history, lambda *_args: callback(self), failback and partial(failback, False))
        error = options.error or (failback and partial(failback, True))

        def on_error(*args: Any) -> None:
            # A failed request is settled; later navigation must not report it again
            guard.dispose()
            if error is not None:
                error(*args)

        self.fetch(replace(options.with_defaults(success=guard.resolve), error=on_error))
        return None

    def load(
        self,
        callback: Callable[[Any], Any],
        failback: Failback | None = None,
        options: FetchOptions | None = None,
    ) -> None:
        """`load_data` that aborts the request when the route changes first."""
        options = options or FetchOptions()

        if not options.background and not self.is_populated() and self.root is not None:
            # Let the global scope see this load when no view is watching us
            forward_load_events(self, self.root, once=True)

        def on_failure(is_error: bool, *args: Any) -> None:
            if not is_error:
                # Route changed, kill it
                if self.request is not None:
                    logger.debug("Aborting %r request after navigation", self)
                    self.aborted = True
                    self.request.abort()
            elif self.aborted:
                # Error produced by our own abort; the navigation already reported it
                return
            if failback is not None:
                failback(is_error, *args)

        self.load_data(callback, on_failure, options)


class Model(DataObject):
    """Attribute bag populated from a mapping response."""

    id_attribute = "id"

    def __init__(
        self,
        transport: Transport,
        history: History,
        root: Observable | None = None,
        attributes: dict[str, Any] | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(transport, history, root, name)
        self.attributes: dict[str, Any] = dict(attributes or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def is_populated(self) -> bool:
        return any(key != self.id_attribute for key in self.attributes)

    def apply_response(self, response: Any) -> None:
        if response:
            self.attributes.update(dict(response))


class Collection(DataObject):
    """Ordered items populated from an iterable response."""

    def __init__(
        self,
        transport: Transport,
        history: History,
        root: Observable | None = None,
        items: Iterable[Any] | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(transport, history, root, name)
        self.items: list[Any] = list(items or [])
        self.fetched = False

    def __len__(self) -> int:
        return len(self.items)

    def is_populated(self) -> bool:
        return self.fetched or len(self.items) > 0

    def apply_response(self, response: Any) -> None:
        self.items = list(response or [])
        self.fetched = True
