# src/asteritime/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the lifecycle engine (reconciliation loop) in a background thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..cli.runner import start_engine_in_background
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s against %s ...", settings.app_name, settings.api_base_url)

    state = create_initial_state(settings=settings)

    engine = start_engine_in_background(state)
    if engine is None:
        logger.error("Could not start the engine; exiting.")
        return

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        # With the console on, Ctrl+C must still interrupt input() as KeyboardInterrupt.
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not in the main thread, or the platform lacks SIGTERM.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Reconciling in the background. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        engine.stop()
        engine.join(timeout=settings.http_timeout_seconds + 5.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
