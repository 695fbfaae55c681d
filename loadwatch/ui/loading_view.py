"""
View-side loading state.

A `LoadingView` owns a widget and keeps a `loading` dynamic property on it in
sync with the debounced load episodes of the view and of the model/collection
bound to it. Stylesheets can key on it, e.g. `QWidget[loading="true"] { ... }`.
Blocking loads are re-announced on the application root scope so app-wide
indicators (status bar, busy cursor) can follow them.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from PyQt6.QtWidgets import QWidget

from loadwatch.app_context import AppContext
from loadwatch.models.data import Collection, DataObject, Model
from loadwatch.services.fetch_queue import FetchOptions
from loadwatch.services.load_handler import LoadSignal, make_load_handler
from loadwatch.services.propagation import Loadable
from loadwatch.utils.event_bus import LOAD_START, Observable


def _view_started(view: "LoadingView", message: str | None, background: bool, signal: LoadSignal) -> None:
    view.on_load_start(message, background, signal)


def _view_ended(view: "LoadingView", background: bool, signal: LoadSignal) -> None:
    view.on_load_end(background, signal)


class LoadingView(Observable, Loadable):
    loading_property = "loading"
    # None falls back to the configured [loading] delays
    loading_start_delay: float | None = None
    loading_end_delay: float | None = None
    non_blocking_load = False
    ignore_fetch_error = False

    def __init__(self, context: AppContext, widget: QWidget | None = None) -> None:
        self.context = context
        self.widget = widget
        self.model: Model | None = None
        self.collection: Collection | None = None
        self._bound: dict[str, tuple[DataObject, Any]] = {}
        self._loading = False
        self._load_handler = make_load_handler(
            _view_started,
            _view_ended,
            scheduler=context.scheduler,
            start_delay=context.start_delay,
            end_delay=context.end_delay,
        )
        self._load_handler.attach(self)

    @property
    def is_loading(self) -> bool:
        return self._loading

    # Data binding -------------------------------------------------------
    def set_model(self, model: Model | None, options: FetchOptions | None = None, fetch: bool = False) -> None:
        self.model = model
        self._bind("model", model, options, fetch)

    def set_collection(
        self, collection: Collection | None, options: FetchOptions | None = None, fetch: bool = False
    ) -> None:
        self.collection = collection
        self._bind("collection", collection, options, fetch)

    def fetch_options(self, options: FetchOptions | None = None) -> FetchOptions:
        """Fetch options carrying this view's loading preferences."""
        options = options or FetchOptions()
        return replace(
            options,
            background=options.background or self.non_blocking_load,
            ignore_errors=options.ignore_errors or self.ignore_fetch_error,
        )

    def _bind(self, slot: str, data: DataObject | None, options: FetchOptions | None, fetch: bool) -> None:
        previous = self._bound.pop(slot, None)
        if previous is not None:
            previous[0].off(LOAD_START, previous[1])
        if data is None:
            return

        def forward(message: str | None = None, background: bool = False, obj: Any = None) -> None:
            self.trigger(LOAD_START, message, background, obj)

        data.on(LOAD_START, forward)
        self._bound[slot] = (data, forward)
        if fetch:
            data.fetch(self.fetch_options(options))

    # Extension points ---------------------------------------------------
    def on_load_start(self, message: str | None, background: bool, signal: LoadSignal) -> None:
        if not self.non_blocking_load and not background:
            self.context.root.trigger(LOAD_START, message, background, signal)
        self._set_loading(True)

    def on_load_end(self, background: bool, signal: LoadSignal) -> None:
        self._set_loading(False)

    def _set_loading(self, value: bool) -> None:
        self._loading = value
        if self.widget is None:
            return
        self.widget.setProperty(self.loading_property, value)
        style = self.widget.style()
        if style is not None:
            style.unpolish(self.widget)
            style.polish(self.widget)
