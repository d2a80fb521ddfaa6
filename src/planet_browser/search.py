"""Debounced, cancellable search pipeline.

Query text flows ``submit() → debounce → de-duplicate → cancel previous →
search → deliver``. Only the most recently issued search may deliver; an
older search is cancelled when a newer one is issued, and a per-issue token
discards any result that still completes late.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from planet_browser.errors import PlanetsError
from planet_browser.models import DEFAULT_DEBOUNCE_INTERVAL_MS, Planet, PlanetsPage

logger = logging.getLogger(__name__)

SearchFn = Callable[[str], Awaitable[PlanetsPage]]


class SearchPipeline:
    """Turns raw query-text edits into at most one outstanding search."""

    def __init__(
        self,
        search: SearchFn,
        *,
        on_searching: Callable[[str], None],
        on_results: Callable[[str, list[Planet]], None],
        on_error: Callable[[PlanetsError], None],
        on_cleared: Callable[[], None],
        debounce_seconds: float = DEFAULT_DEBOUNCE_INTERVAL_MS / 1000,
    ) -> None:
        self._search = search
        self._on_searching = on_searching
        self._on_results = on_results
        self._on_error = on_error
        self._on_cleared = on_cleared
        self._debounce_seconds = max(0.0, debounce_seconds)
        self._pending_text = ""
        self._last_term: str | None = None
        self._request_token = 0
        self._debounce_task: asyncio.Task[None] | None = None
        self._search_task: asyncio.Task[None] | None = None

    @property
    def pending_text(self) -> str:
        return self._pending_text

    @property
    def last_term(self) -> str | None:
        """Trimmed term of the last debounced emission (None before any)."""
        return self._last_term

    @property
    def search_in_flight(self) -> bool:
        return self._search_task is not None and not self._search_task.done()

    def submit(self, text: str) -> None:
        """Record a query-text change and restart the quiet period.

        Must be called from a running event loop.
        """
        self._pending_text = text
        # Atomic swap: capture and clear before cancelling
        old_task, self._debounce_task = self._debounce_task, None
        if old_task is not None:
            old_task.cancel()
        self._debounce_task = asyncio.create_task(self._debounce(text))

    async def _debounce(self, text: str) -> None:
        await asyncio.sleep(self._debounce_seconds)
        self._debounce_task = None
        self._emit(text)

    def _emit(self, text: str) -> None:
        term = text.strip()
        if term == self._last_term:
            logger.debug("Search term %r unchanged; skipping", term)
            return
        self._last_term = term

        self._cancel_search()
        # Invalidate in-flight responses from older requests.
        self._request_token += 1

        if not term:
            self._on_cleared()
            return

        self._on_searching(term)
        token = self._request_token
        task = asyncio.create_task(self._run_search(term, token))
        task.add_done_callback(self._on_task_done)
        self._search_task = task
        logger.debug("Search issued: %r (token %d)", term, token)

    async def _run_search(self, term: str, token: int) -> None:
        try:
            page = await self._search(term)
        except PlanetsError as exc:
            if token != self._request_token:
                return
            logger.info("Search %r failed: %s", term, exc)
            self._on_error(exc)
            return

        # Ignore stale responses after newer requests.
        if token != self._request_token:
            logger.debug("Discarding stale results for %r", term)
            return
        self._on_results(term, list(page.planets))

    def _cancel_search(self) -> None:
        task, self._search_task = self._search_task, None
        if task is not None and not task.done():
            logger.debug("Cancelling in-flight search")
            task.cancel()

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from search tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in search task: %s", exc, exc_info=exc)

    async def wait_idle(self) -> None:
        """Wait until no debounce timer or search is outstanding."""
        while True:
            pending = {
                task
                for task in (self._debounce_task, self._search_task)
                if task is not None and not task.done()
            }
            if not pending:
                return
            # Superseded searches leave the slots; re-read them after each completion.
            await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)

    async def aclose(self) -> None:
        """Cancel the pending debounce and any in-flight search."""
        tasks = [task for task in (self._debounce_task, self._search_task) if task is not None]
        self._debounce_task = None
        self._search_task = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)


__all__ = ["SearchPipeline"]
