# src/asteritime/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Minimum console level per logger prefix; the first match wins.
# The reconciler ticks every minute, so only its problems reach the prompt.
CONSOLE_THRESHOLDS: tuple[tuple[str, int], ...] = (
    ("asteritime.tasks.task_reconciler", logging.WARNING),
    ("asteritime.", logging.NOTSET),
)

# Chatty libraries: per-request INFO lines are dropped even from the log file.
QUIET_LIBRARIES = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """Console-only filter: app records by CONSOLE_THRESHOLDS, everything else ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, level in CONSOLE_THRESHOLDS:
            if record.name.startswith(prefix):
                return record.levelno >= level
        # Third-party loggers and captured 'py.warnings'.
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/asteritime",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all logging to stderr (filtered) and to <log_dir>/asteritime.log.

    Replaces any handlers already on the root logger, so calling it twice does
    not duplicate output. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "asteritime.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
