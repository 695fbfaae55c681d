from __future__ import annotations

import pytest

from loadwatch.ui.main_window import MainWindow


@pytest.fixture
def window(context, qtbot) -> MainWindow:
    context.config["demo"]["latency"] = 1.0
    win = MainWindow(context)
    qtbot.addWidget(win)
    return win


def _rows(window: MainWindow) -> list[str]:
    return [window.content.item(i).text() for i in range(window.content.count())]


def test_page_loads_after_latency(window, scheduler) -> None:
    window.show_page("inbox")

    scheduler.advance(0.5)
    assert window.view.is_loading
    assert window.status.text() == "Loading…"

    scheduler.advance(1.0)
    assert _rows(window)[0] == "inbox item 1"
    assert not window.view.is_loading
    assert window.status.text() == ""


def test_navigating_away_drops_stale_page(window, scheduler) -> None:
    window.show_page("inbox")
    scheduler.advance(0.5)
    window.show_page("reports")
    scheduler.run_until_idle()

    assert window.context.history.get_fragment() == "reports"
    assert _rows(window)[0] == "reports item 1"
    assert window.collection_for("inbox").items == []
    assert window.transport.calls == 2


def test_reload_while_loading_shares_request(window, scheduler) -> None:
    window.show_page("home")
    window.reload()
    window.reload(background=True)
    scheduler.run_until_idle()

    assert window.transport.calls == 1
    assert len(_rows(window)) == 5


def test_cached_page_renders_without_fetch(window, scheduler) -> None:
    window.show_page("inbox")
    scheduler.run_until_idle()
    window.show_page("home")
    scheduler.run_until_idle()

    window.show_page("inbox")

    assert window.transport.calls == 2
    assert _rows(window)[0] == "inbox item 1"
