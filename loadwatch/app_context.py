"""
Application bootstrap helpers.

Responsibilities:
- Locate/load configuration.
- Configure logging under the config directory.
- Build the root load scope that app-wide busy indicators listen to.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loadwatch.config.loader import load_config, loading_delays
from loadwatch.logging.setup import setup_logging
from loadwatch.services.load_handler import LoadHandler, LoadSignal, make_load_handler
from loadwatch.services.route_guard import History
from loadwatch.utils.event_bus import EventBus, Observable
from loadwatch.utils.timers import QtScheduler, Scheduler

logger = logging.getLogger(__name__)

ENV_CONFIG_DIR = "LOADWATCH_CONFIG_DIR"

BUSY_START = "busy:start"
BUSY_END = "busy:end"


class RootScope(Observable):
    """Application-wide load scope; blocking loads from any view or standalone object land here."""

    def __init__(self) -> None:
        self.busy = False
        self.message: str | None = None


@dataclass
class AppContext:
    """Shared application context passed into the UI."""

    config: dict[str, Any]
    config_path: Path
    scheduler: Scheduler
    history: History
    root: RootScope
    events: EventBus
    start_delay: float
    end_delay: float
    root_handler: LoadHandler | None = None


def default_config_dir() -> Path:
    """Return the directory to hold config files, honoring env override."""
    override = os.getenv(ENV_CONFIG_DIR)
    if override:
        return Path(override)
    return Path.home() / ".loadwatch"


def default_config_path() -> Path:
    """Return default config file path."""
    return default_config_dir() / "config.toml"


def attach_root_indicator(context: AppContext) -> LoadHandler:
    """
    Debounce the root scope's load episodes into `busy:start` / `busy:end`
    on the application event bus.
    """

    def started(root: RootScope, message: str | None, background: bool, signal: LoadSignal) -> None:
        root.busy = True
        root.message = message
        context.events.publish(BUSY_START, message, background)

    def ended(root: RootScope, background: bool, signal: LoadSignal) -> None:
        root.busy = False
        root.message = None
        context.events.publish(BUSY_END, background)

    handler = make_load_handler(
        started,
        ended,
        scheduler=context.scheduler,
        start_delay=context.start_delay,
        end_delay=context.end_delay,
    )
    handler.attach(context.root)
    context.root_handler = handler
    return handler


def build_context(
    config: dict[str, Any], config_path: Path, scheduler: Scheduler | None = None
) -> AppContext:
    """Assemble an AppContext from already-loaded configuration."""
    start_delay, end_delay = loading_delays(config)
    demo_cfg = config.get("demo", {}) if isinstance(config, dict) else {}
    context = AppContext(
        config=config,
        config_path=config_path,
        scheduler=scheduler or QtScheduler(),
        history=History(str(demo_cfg.get("initial_fragment", ""))),
        root=RootScope(),
        events=EventBus(),
        start_delay=start_delay,
        end_delay=end_delay,
    )
    attach_root_indicator(context)
    return context


def initialize_app(
    config_path: Path | None = None,
    scheduler: Scheduler | None = None,
    log_dir: Path | None = None,
) -> AppContext:
    """
    Load configuration, set up logging, and return an AppContext.
    """
    config_path = config_path or default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config = load_config(config_path)

    log_dir = log_dir or config_path.parent / "logs"
    setup_logging(log_dir=log_dir, level=str(config.get("logging", {}).get("level", "INFO")))

    context = build_context(config, config_path, scheduler=scheduler)
    logger.info(
        "Loading delays: start=%.2fs end=%.2fs (config %s)",
        context.start_delay,
        context.end_delay,
        config_path,
    )
    return context
