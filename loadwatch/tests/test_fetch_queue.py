from __future__ import annotations

from typing import Any

from loadwatch.services.fetch_queue import FetchOptions, queue_fetch


class FakePerform:
    """Stands in for the transport; keeps the merged options of every real call."""

    def __init__(self) -> None:
        self.calls: list[FetchOptions] = []

    def __call__(self, options: FetchOptions) -> str:
        self.calls.append(options)
        return f"request-{len(self.calls)}"

    def succeed(self, index: int = -1, *args: Any) -> None:
        options = self.calls[index]
        options.success(*args)
        options.complete()


def _callbacks(log: list[tuple[str, str, tuple]], name: str) -> FetchOptions:
    return FetchOptions(
        success=lambda *args: log.append((name, "success", args)),
        error=lambda *args: log.append((name, "error", args)),
        complete=lambda *args: log.append((name, "complete", args)),
    )


def test_concurrent_fetches_share_one_request(make_source) -> None:
    owner = make_source("model")
    perform = FakePerform()
    log: list[tuple[str, str, tuple]] = []

    assert queue_fetch(owner, _callbacks(log, "first"), perform) == "request-1"
    queue_fetch(owner, _callbacks(log, "second"), perform)

    assert len(perform.calls) == 1
    assert len(owner.fetch_queue) == 2

    perform.succeed(0, owner, {"id": 1})

    assert log == [
        ("first", "success", (owner, {"id": 1})),
        ("second", "success", (owner, {"id": 1})),
        ("first", "complete", ()),
        ("second", "complete", ()),
    ]
    assert owner.fetch_queue is None


def test_errors_are_replayed_to_every_caller(make_source) -> None:
    owner = make_source("model")
    perform = FakePerform()
    log: list[tuple[str, str, tuple]] = []
    queue_fetch(owner, _callbacks(log, "first"), perform)
    queue_fetch(owner, _callbacks(log, "second"), perform)

    failure = RuntimeError("offline")
    perform.calls[0].error(owner, failure)

    assert [entry[:2] for entry in log] == [("first", "error"), ("second", "error")]
    assert log[1][2] == (owner, failure)


def test_queue_resets_after_completion(make_source) -> None:
    owner = make_source("model")
    perform = FakePerform()
    queue_fetch(owner, FetchOptions(), perform)
    perform.succeed(0)

    queue_fetch(owner, FetchOptions(), perform)

    assert len(perform.calls) == 2


def test_missing_callbacks_are_skipped(make_source) -> None:
    owner = make_source("model")
    perform = FakePerform()
    log: list[tuple[str, str, tuple]] = []
    queue_fetch(owner, FetchOptions(), perform)
    queue_fetch(owner, FetchOptions(success=lambda *args: log.append(("only", "success", args))), perform)

    perform.succeed(0, "payload")

    assert log == [("only", "success", ("payload",))]


def test_reset_queue_starts_a_new_epoch_that_old_cleanup_keeps(make_source) -> None:
    owner = make_source("model")
    perform = FakePerform()
    log: list[tuple[str, str, tuple]] = []
    queue_fetch(owner, _callbacks(log, "old"), perform)
    queue_fetch(owner, _reset(_callbacks(log, "new")), perform)

    assert len(perform.calls) == 2
    fresh_queue = owner.fetch_queue

    # The first request finishing must not clobber the replacement queue
    perform.succeed(0, "stale")
    assert owner.fetch_queue is fresh_queue
    assert [entry[0] for entry in log] == ["old", "old"]

    perform.succeed(1, "fresh")
    assert owner.fetch_queue is None
    assert ("new", "success", ("fresh",)) in log


def _reset(options: FetchOptions) -> FetchOptions:
    options.reset_queue = True
    return options


def test_queued_caller_gets_in_flight_request(make_source) -> None:
    owner = make_source("model")
    owner.request = "in-flight"
    perform = FakePerform()
    queue_fetch(owner, FetchOptions(), perform)

    assert queue_fetch(owner, FetchOptions(), perform) == "in-flight"


def test_with_defaults_keeps_caller_callbacks() -> None:
    mine = lambda *args: None  # noqa: E731
    fallback = lambda *args: None  # noqa: E731
    options = FetchOptions(success=mine).with_defaults(success=fallback, error=fallback)

    assert options.success is mine
    assert options.error is fallback
