"""Decorator over a PlanetsService that feeds the session index.

Listing fetches pass straight through to the wrapped service and every
successful page is ingested into the :class:`LocalIndex`. Search is served
either by the wrapped service's endpoint or by filtering an index snapshot,
so callers keep using the same ``PlanetsService`` contract in both cases.
"""

from __future__ import annotations

import asyncio
import logging

from planet_browser.backfill import BackfillWalker
from planet_browser.errors import PlanetsError
from planet_browser.index import LocalIndex
from planet_browser.models import Cursor, PlanetsPage
from planet_browser.query import filter_planets
from planet_browser.services.interfaces import PlanetsService

logger = logging.getLogger(__name__)


class IndexingPlanetsService:
    """Pass-through fetches that ingest, plus local or remote search."""

    def __init__(
        self,
        base: PlanetsService,
        index: LocalIndex,
        walker: BackfillWalker,
        *,
        search_locally: bool = True,
        latency_seconds: float = 0.0,
    ) -> None:
        self._base = base
        self._index = index
        self._walker = walker
        self._search_locally = search_locally
        self._latency_seconds = latency_seconds
        self._next_search_failure: PlanetsError | None = None

    @property
    def search_locally(self) -> bool:
        return self._search_locally

    async def fetch_first_page(self) -> PlanetsPage:
        page = await self._base.fetch_first_page()
        self._index.ingest(page)
        return page

    async def fetch_page(self, cursor: Cursor) -> PlanetsPage:
        page = await self._base.fetch_page(cursor)
        self._index.ingest(page)
        return page

    async def search_planets(self, query: str) -> PlanetsPage:
        injected, self._next_search_failure = self._next_search_failure, None
        if injected is not None:
            raise injected

        if not self._search_locally:
            return await self._base.search_planets(query)

        # Results only cover what is indexed now; the walk widens later searches.
        self._walker.trigger()
        matches = filter_planets(self._index.snapshot(), query)
        if self._latency_seconds > 0:
            await asyncio.sleep(self._latency_seconds)
        logger.debug("Local search %r matched %d planets", query, len(matches))
        return PlanetsPage(cursor=None, planets=tuple(matches))

    def set_next_search_failure(self, error: PlanetsError) -> None:
        """Make the next search raise ``error`` once (test hook)."""
        self._next_search_failure = error


__all__ = ["IndexingPlanetsService"]
