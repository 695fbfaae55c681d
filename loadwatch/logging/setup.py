"""
Logging setup: console plus a rotating file under the config directory.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(
    log_dir: Path | None = None,
    level: str = "INFO",
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
) -> Path:
    """Configure console + rotating file handlers and return the log file path."""
    log_dir = log_dir or Path(".") / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "app.log"
    handlers = [
        RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"),
        logging.StreamHandler(),
    ]
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
        force=True,
    )
    return log_path
