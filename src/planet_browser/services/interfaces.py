"""Service interfaces + default adapters for dependency injection."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx

from planet_browser.models import DEFAULT_TIMEOUT_SECONDS, SWAPI_DEFAULT_BASE_URL, Cursor, PlanetsPage
from planet_browser.services import swapi_service as _swapi


@runtime_checkable
class PlanetsService(Protocol):
    """Remote source of planet pages.

    Every operation either returns a page or raises a ``PlanetsError``.
    Pages from different calls may overlap.
    """

    async def fetch_first_page(self) -> PlanetsPage:
        """Fetch the first listing page."""
        ...

    async def fetch_page(self, cursor: Cursor) -> PlanetsPage:
        """Fetch the page a cursor points at."""
        ...

    async def search_planets(self, query: str) -> PlanetsPage:
        """Search planets matching ``query``."""
        ...


class DefaultPlanetsService:
    """Default adapter that delegates to the function-based SWAPI helpers."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        base_url: str = SWAPI_DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = _swapi.USER_AGENT,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent

    async def fetch_first_page(self) -> PlanetsPage:
        return await _swapi.fetch_first_page(
            client=self._client,
            base_url=self._base_url,
            timeout_seconds=self._timeout_seconds,
            user_agent=self._user_agent,
        )

    async def fetch_page(self, cursor: Cursor) -> PlanetsPage:
        return await _swapi.fetch_page_at(
            client=self._client,
            cursor=cursor,
            timeout_seconds=self._timeout_seconds,
            user_agent=self._user_agent,
        )

    async def search_planets(self, query: str) -> PlanetsPage:
        return await _swapi.search_planets(
            client=self._client,
            base_url=self._base_url,
            query=query,
            timeout_seconds=self._timeout_seconds,
            user_agent=self._user_agent,
        )


__all__ = [
    "DefaultPlanetsService",
    "PlanetsService",
]
