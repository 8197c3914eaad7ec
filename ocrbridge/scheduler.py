"""Periodic sweep of expired temporary images."""
from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path

from .logger import get_logger
from .tempfiles import MAX_AGE_MS, TEMP_PREFIX, cleanup_temp_files

logger = get_logger(__name__)


class CleanupScheduler:
    """Run :func:`cleanup_temp_files` at start-up and then on a fixed interval.

    The sweep runs in a worker thread so directory listing does not block the
    event loop.  Errors are logged and the next tick runs regardless.
    """

    def __init__(
        self,
        directory: Path,
        interval_ms: int = 3_600_000,
        max_age_ms: int = MAX_AGE_MS,
        prefix: str = TEMP_PREFIX,
    ) -> None:
        self.directory = directory
        self.interval_ms = interval_ms
        self.max_age_ms = max_age_ms
        self.prefix = prefix
        self.runs = 0
        self._task: asyncio.Task | None = None

    async def sweep(self) -> None:
        """Run a single sweep, logging any failure."""
        try:
            await asyncio.to_thread(cleanup_temp_files, self.directory, self.prefix, self.max_age_ms)
        except Exception:
            logger.exception("Temporary file cleanup failed")
        finally:
            self.runs += 1

    async def _loop(self) -> None:
        while True:
            await self.sweep()
            await asyncio.sleep(self.interval_ms / 1000)

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop())
            logger.info("Cleaning %s every %d ms", self.directory, self.interval_ms)

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
