"""Orchestrator combining paging, the session index, backfill, and search.

``PlanetsBrowser`` is the consumer-facing surface: a presentation layer calls
the navigation intents and reads the observable state properties. Paging
unifies two models: while the server still reports a cursor, "next" stays
available and the total is unknown; once no cursor remains, navigation is
pure slicing over the accumulated browsing snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from planet_browser.backfill import BackfillWalker
from planet_browser.errors import PlanetsError
from planet_browser.index import LocalIndex
from planet_browser.models import (
    BackfillState,
    BrowseMode,
    BrowserConfig,
    Cursor,
    PageDirection,
    Planet,
)
from planet_browser.pager import Pager
from planet_browser.query import sort_planets_alpha
from planet_browser.search import SearchPipeline
from planet_browser.services.indexing_service import IndexingPlanetsService
from planet_browser.services.interfaces import PlanetsService

logger = logging.getLogger(__name__)

StateListener = Callable[["PlanetsBrowser"], None]


class PlanetsBrowser:
    """Browsing + searching state machine over a remote planets listing."""

    def __init__(self, base: PlanetsService, config: BrowserConfig | None = None) -> None:
        self._config = config if config is not None else BrowserConfig()
        self._index = LocalIndex()
        self._backfill = BackfillWalker(
            base, self._index, enabled=self._config.background_backfill_enabled
        )
        self._service = IndexingPlanetsService(
            base,
            self._index,
            self._backfill,
            search_locally=self._config.search_backend == "local",
            latency_seconds=self._config.search_latency_ms / 1000,
        )
        self._pager = Pager(self._config.page_size)
        self._pipeline = SearchPipeline(
            self._service.search_planets,
            on_searching=self._on_search_started,
            on_results=self._on_search_results,
            on_error=self._on_search_error,
            on_cleared=self._on_search_cleared,
            debounce_seconds=self._config.debounce_interval_ms / 1000,
        )

        # Observable state
        self._planets: list[Planet] = []
        self._alert: str | None = None
        self._mode = BrowseMode.BROWSING
        self._page_direction = PageDirection.FORWARD
        self._search_term = ""
        self._fetch_loading = False
        self._search_loading = False

        # Browsing snapshot: every planet fetched while browsing, kept sorted
        self._browsing_planets: list[Planet] = []
        self._next_cursor: Cursor | None = None
        self._first_page_loaded = False

        self._listeners: list[StateListener] = []
        self._background_tasks: set[asyncio.Task[Any]] = set()

    # ── Observable state ────────────────────────────────────────────────

    @property
    def config(self) -> BrowserConfig:
        return self._config

    @property
    def service(self) -> IndexingPlanetsService:
        return self._service

    @property
    def index(self) -> LocalIndex:
        return self._index

    @property
    def backfill_state(self) -> BackfillState:
        return self._backfill.state

    @property
    def planets(self) -> list[Planet]:
        """Currently visible window (browsing slice or search results)."""
        return list(self._planets)

    @property
    def is_loading(self) -> bool:
        return self._fetch_loading or self._search_loading

    @property
    def alert(self) -> str | None:
        return self._alert

    @property
    def mode(self) -> BrowseMode:
        return self._mode

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def current_page(self) -> int:
        return self._pager.current_page

    @property
    def page_direction(self) -> PageDirection:
        return self._page_direction

    @property
    def has_server_paging(self) -> bool:
        """True while the API still exposes a next-page cursor."""
        return self._next_cursor is not None

    @property
    def can_load_more(self) -> bool:
        if self._mode is not BrowseMode.BROWSING or self.is_loading:
            return False
        if self.has_server_paging:
            return True
        return self._pager.has_next(len(self._browsing_planets))

    @property
    def current_page_display(self) -> int:
        return self._pager.current_page + 1

    @property
    def total_pages_display(self) -> str:
        if self.has_server_paging:
            # Unknown until the server stops reporting a cursor
            return "?"
        return str(self._pager.total_pages(len(self._browsing_planets)))

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback invoked after every observable state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def clear_alert(self) -> None:
        if self._alert is not None:
            self._alert = None
            self._notify()

    # ── Browsing intents ────────────────────────────────────────────────

    async def load_first_page(self) -> None:
        """Fetch the first listing page and show its first window."""
        if self._mode is not BrowseMode.BROWSING or self.is_loading:
            return
        self._fetch_loading = True
        self._notify()
        try:
            page = await self._service.fetch_first_page()
        except PlanetsError as exc:
            self._fetch_loading = False
            self._fail(exc, "load first page")
            return
        finally:
            self._fetch_loading = False

        self._browsing_planets = sort_planets_alpha(_merge_unique([], page.planets))
        self._next_cursor = page.cursor
        self._first_page_loaded = True
        self._pager.reset()
        self._show_browsing_window()
        logger.debug(
            "First page loaded: %d planets, cursor=%s", len(self._browsing_planets), page.cursor
        )

    async def go_next_page(self) -> None:
        """Advance one window, fetching the next server page only if needed."""
        if self._mode is not BrowseMode.BROWSING:
            return
        self._page_direction = PageDirection.FORWARD

        if self._pager.step_forward_if_possible(len(self._browsing_planets)):
            self._show_browsing_window()
            return

        cursor = self._next_cursor
        if cursor is None or self.is_loading:
            return
        self._fetch_loading = True
        self._notify()
        try:
            page = await self._service.fetch_page(cursor)
        except PlanetsError as exc:
            self._fetch_loading = False
            self._fail(exc, "load next page")
            return
        finally:
            self._fetch_loading = False

        # Re-sorted after every merge so the snapshot has one stable order.
        self._browsing_planets = sort_planets_alpha(
            _merge_unique(self._browsing_planets, page.planets)
        )
        self._next_cursor = page.cursor
        self._pager.step_forward_if_possible(len(self._browsing_planets))
        self._show_browsing_window()
        logger.debug(
            "Merged server page: %d planets known, page %d",
            len(self._browsing_planets),
            self.current_page_display,
        )

    def go_prev_page(self) -> None:
        """Step back one window; never fetches."""
        if self._mode is not BrowseMode.BROWSING:
            return
        self._page_direction = PageDirection.BACKWARD
        if self._pager.step_backward():
            self._show_browsing_window()

    def _show_browsing_window(self) -> None:
        if self._mode is BrowseMode.BROWSING:
            self._planets = self._pager.slice(self._browsing_planets)
        self._notify()

    def _fail(self, exc: PlanetsError, action: str) -> None:
        logger.warning("Could not %s: %s", action, exc)
        self._alert = exc.user_message
        self._notify()

    # ── Searching ───────────────────────────────────────────────────────

    def set_search_term(self, text: str) -> None:
        """Feed a query-text edit into the debounced search pipeline."""
        self._search_term = text
        self._pipeline.submit(text)

    def _on_search_started(self, term: str) -> None:
        self._mode = BrowseMode.SEARCHING
        self._search_loading = True
        self._notify()

    def _on_search_results(self, term: str, results: list[Planet]) -> None:
        self._search_loading = False
        if self._mode is BrowseMode.SEARCHING:
            self._planets = sort_planets_alpha(results)
        logger.debug("Search %r delivered %d planets", term, len(results))
        self._notify()

    def _on_search_error(self, exc: PlanetsError) -> None:
        self._search_loading = False
        self._fail(exc, "search planets")

    def _on_search_cleared(self) -> None:
        self._mode = BrowseMode.BROWSING
        self._search_loading = False
        if not self._first_page_loaded and not self._browsing_planets:
            self._track_task(self.load_first_page())
            self._notify()
            return
        # Restore the current browsing window without refetching
        self._show_browsing_window()

    # ── Lifecycle ───────────────────────────────────────────────────────

    def _track_task(self, coro: Any) -> asyncio.Task[Any]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[Any]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    async def wait_idle(self) -> None:
        """Wait for pending search work and tracked background tasks."""
        await self._pipeline.wait_idle()
        while self._background_tasks:
            await asyncio.wait(set(self._background_tasks))

    async def wait_for_backfill(self) -> None:
        await self._backfill.wait()

    async def aclose(self) -> None:
        """Cancel searches, the backfill walk, and tracked tasks."""
        await self._pipeline.aclose()
        await self._backfill.aclose()
        tasks = set(self._background_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)

    async def __aenter__(self) -> PlanetsBrowser:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _merge_unique(existing: list[Planet], incoming: tuple[Planet, ...]) -> list[Planet]:
    """Append incoming planets whose name is not already present."""
    seen = {planet.name for planet in existing}
    merged = list(existing)
    for planet in incoming:
        if planet.name not in seen:
            seen.add(planet.name)
            merged.append(planet)
    return merged


__all__ = ["PlanetsBrowser"]
