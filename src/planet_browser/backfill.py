"""Best-effort background walk of the remaining listing pages.

Follows cursors from the base service into a :class:`LocalIndex` so local
search can see records the user never browsed to. At most one walk runs per
walker; the walk stops quietly at the last page or on the first failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from planet_browser.errors import PlanetsError
from planet_browser.index import LocalIndex
from planet_browser.models import BackfillState, Cursor

if TYPE_CHECKING:
    from planet_browser.services.interfaces import PlanetsService

logger = logging.getLogger(__name__)


class BackfillWalker:
    """Single-flight cursor walker feeding a LocalIndex."""

    def __init__(self, base: PlanetsService, index: LocalIndex, *, enabled: bool = False) -> None:
        self._base = base
        self._index = index
        self._enabled = enabled
        self._in_flight = False
        self._task: asyncio.Task[None] | None = None
        self._pages_fetched = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> BackfillState:
        return BackfillState(in_flight=self._in_flight, next_cursor=self._index.next_cursor)

    @property
    def pages_fetched(self) -> int:
        """Pages ingested by walks so far (diagnostics)."""
        return self._pages_fetched

    def trigger(self) -> bool:
        """Start a walk from the index's last known cursor.

        Returns True only if a new walk was started. Disabled walkers, a walk
        already in flight, or an exhausted cursor chain make this a no-op.
        Must be called from a running event loop.
        """
        if not self._enabled:
            return False
        if self._in_flight:
            logger.debug("Backfill already in flight; trigger ignored")
            return False
        cursor = self._index.next_cursor
        if cursor is None:
            return False
        # Claimed before the first await so concurrent triggers see it.
        self._in_flight = True
        self._task = asyncio.create_task(self._walk(cursor))
        self._task.add_done_callback(self._on_task_done)
        logger.debug("Backfill started at %s", cursor)
        return True

    async def _walk(self, cursor: Cursor) -> None:
        next_cursor: Cursor | None = cursor
        try:
            while next_cursor is not None:
                try:
                    page = await self._base.fetch_page(next_cursor)
                except PlanetsError as exc:
                    logger.warning("Backfill stopped at %s: %s", next_cursor, exc)
                    return
                self._index.ingest(page)
                self._pages_fetched += 1
                next_cursor = page.cursor
            logger.debug("Backfill complete: %d planets indexed", len(self._index))
        finally:
            self._in_flight = False

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from the walk task."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in backfill walk: %s", exc, exc_info=exc)

    async def wait(self) -> None:
        """Wait for the active walk, if any, to finish."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def aclose(self) -> None:
        """Cancel the active walk and wait for it to unwind."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.wait({task})


__all__ = ["BackfillWalker"]
