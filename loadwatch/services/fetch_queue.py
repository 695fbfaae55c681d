"""
Per-object fetch de-duplication.

While a fetch is outstanding on a data object, further fetch requests do not hit
the transport. Their callbacks are queued and replayed, in call order and with
the same arguments, when the single underlying request reports back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable

logger = logging.getLogger(__name__)

QUEUE_ATTR = "fetch_queue"
HANDLERS = ("success", "error", "complete")


@dataclass
class FetchOptions:
    """Callbacks and flags for one fetch request."""

    success: Callable[..., Any] | None = None
    error: Callable[..., Any] | None = None
    complete: Callable[..., Any] | None = None
    background: bool = False
    reset_queue: bool = False
    ignore_errors: bool = False
    params: dict[str, Any] = field(default_factory=dict)

    def with_defaults(self, **defaults: Any) -> "FetchOptions":
        """Fill callback slots that are still empty, keeping the ones already set."""
        updates = {key: value for key, value in defaults.items() if getattr(self, key) is None}
        return replace(self, **updates)


class FetchQueue:
    """Callers waiting on the one in-flight fetch of an owner."""

    def __init__(self, first: FetchOptions) -> None:
        self.pending: list[FetchOptions] = [first]

    def __len__(self) -> int:
        return len(self.pending)

    def append(self, options: FetchOptions) -> None:
        self.pending.append(options)

    def flush(self, owner: Any, handler: str) -> Callable[..., None]:
        """Build the transport-facing `handler` callback replaying every queued entry."""

        def flush_queue(*args: Any) -> None:
            for options in list(self.pending):
                callback = getattr(options, handler)
                if callback is not None:
                    callback(*args)
            # Only reset if we are still the active request
            if getattr(owner, QUEUE_ATTR, None) is self:
                setattr(owner, QUEUE_ATTR, None)

        return flush_queue


def queue_fetch(owner: Any, options: FetchOptions, perform: Callable[[FetchOptions], Any]) -> Any:
    """
    Issue `perform(options)` unless `owner` already has a fetch in flight.

    Returns whatever `perform` returned for the first caller, or the owner's
    current `request` for callers that were queued.
    """
    if options.reset_queue:
        # Callers opting into this must protect their loaders from out of band data
        setattr(owner, QUEUE_ATTR, None)

    queue: FetchQueue | None = getattr(owner, QUEUE_ATTR, None)
    if queue is None:
        queue = FetchQueue(options)
        setattr(owner, QUEUE_ATTR, queue)
        merged = replace(
            options,
            success=queue.flush(owner, "success"),
            error=queue.flush(owner, "error"),
            complete=queue.flush(owner, "complete"),
        )
        return perform(merged)

    queue.append(options)
    logger.debug("Fetch on %r queued behind in-flight request (%d waiting)", owner, len(queue))
    return getattr(owner, "request", None)
