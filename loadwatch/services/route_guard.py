"""
Route-bound callbacks.

`bind_to_route` wraps the success path of an async operation so that it is
abandoned when client-side navigation happens first. The returned trigger runs
`success` when called on the page it was created on, and `failure` otherwise.
Either way only one of them ever runs, and only once.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from loadwatch.utils.event_bus import ROUTE, Observable

logger = logging.getLogger(__name__)


class History(Observable):
    """Navigation state: the current fragment and a `route` notification per navigation."""

    def __init__(self, fragment: str = "") -> None:
        self.fragment = fragment

    def get_fragment(self) -> str:
        return self.fragment

    def navigate(self, fragment: str, trigger: bool = True) -> None:
        """Switch to `fragment`; publishes `route(fragment)` unless `trigger` is False."""
        self.fragment = fragment
        if trigger:
            logger.debug("Navigated to '%s'", fragment)
            self.trigger(ROUTE, fragment)

    def bind_to_route(
        self, success: Callable[..., Any], failure: Callable[..., Any] | None = None
    ) -> Callable[..., None]:
        return bind_to_route(self, success, failure)


class RouteGuard:
    """Single-use finalizer racing a success trigger against navigation."""

    def __init__(
        self,
        history: History,
        success: Callable[..., Any],
        failure: Callable[..., Any] | None = None,
    ) -> None:
        self.history = history
        self.success = success
        self.failure = failure
        self.origin_fragment = history.get_fragment()
        self.completed = False
        history.on(ROUTE, self.cancel)

    def cancel(self, *args: Any) -> None:
        self.finalize(True, *args)

    def resolve(self, *args: Any) -> None:
        self.finalize(False, *args)

    def dispose(self) -> None:
        """Stop watching navigation without running either callback."""
        if self.completed:
            return
        self.completed = True
        self.history.off(ROUTE, self.cancel)

    def finalize(self, is_canceled: bool, *args: Any) -> None:
        same = self.origin_fragment == self.history.get_fragment()

        if self.completed:
            # Canceled earlier but the success callback still ran, or vice versa
            return

        if is_canceled and same:
            # Route notification for the page we are on; not a real navigation
            return

        self.dispose()

        if not is_canceled and same:
            self.success(*args)
        else:
            logger.debug(
                "Route changed from '%s' to '%s'; dropping success callback",
                self.origin_fragment,
                self.history.get_fragment(),
            )
            if self.failure is not None:
                self.failure(*args)


def bind_to_route(
    history: History, success: Callable[..., Any], failure: Callable[..., Any] | None = None
) -> Callable[..., None]:
    """Return a trigger that runs `success` only if no navigation happened meanwhile."""
    return RouteGuard(history, success, failure).resolve
