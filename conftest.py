"""Shared test fixtures for planet browser tests."""

from __future__ import annotations

import asyncio
import logging

import pytest

from planet_browser.errors import PlanetsError
from planet_browser.models import BrowserConfig, Planet, PlanetsPage

# ── Logging isolation ────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reenable_logging():
    """Undo ``logging.disable`` calls made by CLI tests."""
    yield
    logging.disable(logging.NOTSET)


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_planet():
    """Factory fixture for creating Planet instances with sensible defaults."""

    def _make(
        name: str = "Tatooine",
        climate: str = "arid",
        gravity: str = "1 standard",
        terrain: str = "desert",
        diameter: str = "10465",
        population: str = "200000",
    ) -> Planet:
        return Planet(
            name=name,
            climate=climate,
            gravity=gravity,
            terrain=terrain,
            diameter=diameter,
            population=population,
        )

    return _make


@pytest.fixture
def make_page(make_planet):
    """Factory fixture building a PlanetsPage from planet names."""

    def _make(names: list[str], cursor: str | None = None) -> PlanetsPage:
        return PlanetsPage(cursor=cursor, planets=tuple(make_planet(name=n) for n in names))

    return _make


@pytest.fixture
def fast_config():
    """Factory for BrowserConfig with no artificial delays."""

    def _make(**kwargs) -> BrowserConfig:
        kwargs.setdefault("debounce_interval_ms", 0)
        kwargs.setdefault("search_latency_ms", 0)
        return BrowserConfig(**kwargs)

    return _make


class FakePlanetsService:
    """In-memory PlanetsService serving scripted pages.

    ``pages`` maps a cursor to its page; the first page lives under
    ``FIRST``. Failures can be scripted per cursor, and ``gates`` let a test
    hold a fetch open until it releases the matching event.
    """

    FIRST = "first"

    def __init__(self, pages: dict[str, PlanetsPage] | None = None) -> None:
        self.pages: dict[str, PlanetsPage] = dict(pages or {})
        self.search_results: dict[str, PlanetsPage] = {}
        self.failures: dict[str, PlanetsError] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, str]] = []

    async def _serve(self, kind: str, key: str, table: dict[str, PlanetsPage]) -> PlanetsPage:
        self.calls.append((kind, key))
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        error = self.failures.get(key)
        if error is not None:
            raise error
        return table.get(key, PlanetsPage(cursor=None))

    async def fetch_first_page(self) -> PlanetsPage:
        return await self._serve("first", self.FIRST, self.pages)

    async def fetch_page(self, cursor: str) -> PlanetsPage:
        return await self._serve("page", cursor, self.pages)

    async def search_planets(self, query: str) -> PlanetsPage:
        return await self._serve("search", query, self.search_results)

    def calls_of(self, kind: str) -> list[str]:
        return [key for call_kind, key in self.calls if call_kind == kind]


@pytest.fixture
def fake_service():
    """Factory for FakePlanetsService instances."""

    def _make(pages: dict[str, PlanetsPage] | None = None) -> FakePlanetsService:
        return FakePlanetsService(pages)

    return _make
