from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from loadwatch.app_context import AppContext, build_context  # noqa: E402
from loadwatch.config.defaults import DEFAULTS  # noqa: E402
from loadwatch.utils.event_bus import Observable  # noqa: E402
from loadwatch.utils.timers import ManualScheduler  # noqa: E402


class Recorder:
    """Collects calls as `(name, args)` tuples."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def __call__(self, name: str):
        def record(*args: Any) -> None:
            self.calls.append((name, args))

        return record

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


class Source(Observable):
    """Bare observable standing in for a model or collection."""

    def __init__(self, name: str = "source") -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<Source {self.name}>"


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def context(scheduler: ManualScheduler, tmp_path: Path) -> AppContext:
    return build_context(copy.deepcopy(DEFAULTS), tmp_path / "config.toml", scheduler=scheduler)


@pytest.fixture
def make_source():
    return Source
