"""
Demo shell: navigation list, a content list bound to a LoadingView, and a
status bar following the root scope's busy state.

Every page is backed by a Collection fetched through a ScheduledTransport, so
navigation, overlapping reloads and background refreshes can be tried by hand.
"""

from __future__ import annotations

from typing import Any, Dict

from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from loadwatch.app_context import BUSY_END, BUSY_START, AppContext
from loadwatch.models.data import Collection
from loadwatch.models.transport import ScheduledTransport
from loadwatch.services.fetch_queue import FetchOptions
from loadwatch.ui.loading_view import LoadingView

PAGES = ("home", "inbox", "reports", "settings")

STYLE = """
QListWidget[loading="true"] { background: #f0f0f0; color: #999999; }
"""


def demo_loader(method: str, collection: Any, params: dict[str, Any]) -> list[str]:
    """Produce fake rows for a page collection."""
    page = collection.name
    if params.get("fail"):
        raise RuntimeError(f"{page} is unavailable")
    return [f"{page} item {idx}" for idx in range(1, 6)]


class MainWindow(QMainWindow):
    """Navigation + content list wired through the loading core."""

    def __init__(self, context: AppContext) -> None:
        super().__init__()
        self.context = context
        self.setWindowTitle("loadwatch demo")
        self.setStyleSheet(STYLE)

        latency = float(self.context.config.get("demo", {}).get("latency", 1.2))
        self.transport = ScheduledTransport(context.scheduler, demo_loader, latency=latency)
        self._collections: Dict[str, Collection] = {}

        self.nav = QListWidget(self)
        self.content = QListWidget(self)
        self.status = QLabel("")
        self.reload_btn = QPushButton("Reload")
        self.background_btn = QPushButton("Refresh in background")
        self.view = LoadingView(context, widget=self.content)

        self._build_ui()
        self.context.events.subscribe(BUSY_START, self._on_busy_start)
        self.context.events.subscribe(BUSY_END, self._on_busy_end)

    def _build_ui(self) -> None:
        container = QWidget(self)
        layout = QHBoxLayout()
        layout.setContentsMargins(8, 8, 8, 8)

        self.nav.setFixedWidth(160)
        for page in PAGES:
            QListWidgetItem(page, self.nav)
        self.nav.currentTextChanged.connect(self.show_page)

        right = QVBoxLayout()
        buttons = QHBoxLayout()
        buttons.addWidget(self.reload_btn)
        buttons.addWidget(self.background_btn)
        buttons.addStretch(1)
        right.addLayout(buttons)
        right.addWidget(self.content, 1)

        layout.addWidget(self.nav)
        layout.addLayout(right, 1)
        container.setLayout(layout)
        self.setCentralWidget(container)
        self.statusBar().addWidget(self.status)

        self.reload_btn.clicked.connect(lambda: self.reload(background=False))
        self.background_btn.clicked.connect(lambda: self.reload(background=True))

    def collection_for(self, page: str) -> Collection:
        collection = self._collections.get(page)
        if collection is None:
            collection = Collection(self.transport, self.context.history, self.context.root, name=page)
            self._collections[page] = collection
        return collection

    def show_page(self, page: str) -> None:
        if not page:
            return
        self.context.history.navigate(page)
        collection = self.collection_for(page)
        self.view.set_collection(collection)
        self.content.clear()
        collection.load(self._render, self._on_failed, self.view.fetch_options())

    def reload(self, background: bool = False) -> None:
        collection = self.view.collection
        if collection is None:
            return
        options = FetchOptions(background=background, success=lambda coll, _resp: self._render(coll))
        collection.fetch(self.view.fetch_options(options))

    def _render(self, collection: Collection) -> None:
        if collection is not self.view.collection:
            return
        self.content.clear()
        for row in collection.items:
            QListWidgetItem(str(row), self.content)

    def _on_failed(self, is_error: bool, *args: Any) -> None:
        if is_error:
            self.status.setText("Load failed")

    def _on_busy_start(self, message: str | None, background: bool) -> None:
        self.status.setText(message or "Loading…")

    def _on_busy_end(self, background: bool) -> None:
        self.status.setText("")
