from __future__ import annotations

import pytest

from loadwatch.utils.timers import ManualScheduler, QtScheduler, cancel_timer


def test_manual_scheduler_fires_in_due_order() -> None:
    scheduler = ManualScheduler()
    fired: list[tuple[str, float]] = []
    scheduler.call_later(0.5, lambda: fired.append(("late", scheduler.now)))
    scheduler.call_later(0.2, lambda: fired.append(("early", scheduler.now)))

    scheduler.advance(0.3)
    assert fired == [("early", pytest.approx(0.2))]

    scheduler.advance(0.3)
    assert [name for name, _ in fired] == ["early", "late"]
    assert scheduler.now == pytest.approx(0.6)


def test_manual_scheduler_fires_timers_armed_while_advancing() -> None:
    scheduler = ManualScheduler()
    fired: list[str] = []

    def first() -> None:
        fired.append("first")
        scheduler.call_later(0.1, lambda: fired.append("second"))

    scheduler.call_later(0.1, first)
    scheduler.advance(0.25)

    assert fired == ["first", "second"]


def test_cancel_is_idempotent_and_safe_after_firing() -> None:
    scheduler = ManualScheduler()
    fired: list[str] = []
    handle = scheduler.call_later(0.1, lambda: fired.append("x"))

    handle.cancel()
    handle.cancel()
    cancel_timer(None)
    scheduler.advance(1.0)
    assert fired == []

    done = scheduler.call_later(0.1, lambda: fired.append("y"))
    scheduler.advance(0.1)
    done.cancel()
    assert fired == ["y"]
    assert not done.active


def test_run_until_idle_drains_everything() -> None:
    scheduler = ManualScheduler()
    fired: list[int] = []
    scheduler.call_later(3.0, lambda: fired.append(3))
    scheduler.call_later(1.0, lambda: fired.append(1))

    scheduler.run_until_idle()

    assert fired == [1, 3]
    assert scheduler.pending == 0


def test_qt_scheduler_fires_on_event_loop(qtbot) -> None:
    scheduler = QtScheduler()
    fired: list[str] = []
    scheduler.call_later(0.01, lambda: fired.append("fired"))

    qtbot.waitUntil(lambda: fired == ["fired"], timeout=2000)
    assert scheduler.pending == 0


def test_qt_scheduler_cancel_prevents_callback(qtbot) -> None:
    scheduler = QtScheduler()
    fired: list[str] = []
    handle = scheduler.call_later(0.01, lambda: fired.append("cancelled"))
    scheduler.call_later(0.05, lambda: fired.append("kept"))

    handle.cancel()
    handle.cancel()

    qtbot.waitUntil(lambda: "kept" in fired, timeout=2000)
    assert fired == ["kept"]
