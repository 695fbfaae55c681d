"""
Errors delivered to fetch callbacks. Nothing in the loading core raises these at callers.
"""

from __future__ import annotations

from typing import Any


class LoadwatchError(Exception):
    """Base class for loadwatch errors."""


class TransportError(LoadwatchError):
    """A fetch failed in the underlying transport."""

    def __init__(self, message: str, *, method: str | None = None, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.cause = cause


class RequestAborted(TransportError):
    """The in-flight request was aborted before it completed."""

    def __init__(self, method: str | None = None, reason: Any = None) -> None:
        super().__init__("request aborted", method=method)
        self.reason = reason
