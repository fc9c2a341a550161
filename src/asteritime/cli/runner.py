# src/asteritime/cli/runner.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass
from typing import Any, Awaitable

from ..core.state import AppState
from ..tasks.task_reconciler import ReconciliationLoop

logger = logging.getLogger(__name__)


async def _run_engine(state: AppState, stop_event: asyncio.Event) -> None:
    """
    Engine (async): reconciliation loop until stop_event is set.

    Shutdown model:
    - main thread sets stop_event via loop.call_soon_threadsafe(stop_event.set)
    - the loop finishes its current tick, then the HTTP client is closed.
    """
    settings = state.settings
    recon_loop: ReconciliationLoop | None = None

    if getattr(settings, "reconcile_enabled", True):
        recon_loop = ReconciliationLoop(
            state.reconciler,
            interval_seconds=float(getattr(settings, "reconcile_interval_seconds", 60.0)),
        )
        recon_loop.start()
    else:
        logger.info("Automatic reconciliation disabled; loading tasks once.")
        try:
            await state.reconciler.load_tasks(auto_update=False)
        except Exception:
            logger.exception("Initial task load failed.")

    try:
        await stop_event.wait()
    finally:
        if recon_loop is not None:
            await recon_loop.stop()

        aclose = getattr(state.repo, "aclose", None)
        if callable(aclose):
            with contextlib.suppress(Exception):
                await aclose()

        logger.info("Engine stopped.")


@dataclass
class EngineRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def call(self, coro: Awaitable[Any], timeout: float | None = None) -> Any:
        fut = asyncio.run_coroutine_threadsafe(coro, self.loop)  # type: ignore[arg-type]
        return fut.result(timeout=timeout)

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Failed to signal engine stop (loop already closed).", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_engine_in_background(state: AppState) -> EngineRunner | None:
    """
    Start the engine in a background thread (so the console REPL can run in parallel).

    Why a thread:
    - console REPL is blocking (input()).
    - the engine is async and wants its own event loop.

    On success the runner is also stored on state.runner.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_run_engine(state, stop_event))
        except Exception:
            logger.exception("Engine crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.run_until_complete(loop.shutdown_asyncgens())
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="asteritime-engine", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Engine thread did not initialize properly.")
        return None

    engine = EngineRunner(thread=t, loop=loop, stop_event=stop_event)
    state.runner = engine
    logger.info("Engine background thread started.")
    return engine
