"""
PyQt application entry point.

Bootstraps configuration, logging and the demo shell.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from loadwatch.app_context import AppContext, initialize_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="loadwatch", description="Loading indicator demo shell.")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.toml")
    parser.add_argument("--page", default=None, help="Page to open first")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Start the PyQt application with the demo shell."""
    args = build_parser().parse_args(argv)

    from loadwatch.ui.main_window import PAGES, MainWindow

    app = QApplication(sys.argv[:1])
    # QTimers need the application object to exist first
    context: AppContext = initialize_app(config_path=args.config)

    window = MainWindow(context)
    page = args.page or context.history.get_fragment()
    window.nav.setCurrentRow(PAGES.index(page) if page in PAGES else 0)
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
