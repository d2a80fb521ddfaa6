"""Data models and constants for the planet browser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Application identity — single source of truth for platformdirs config paths
CONFIG_APP_NAME = "planet-browser"

SWAPI_DEFAULT_BASE_URL = "https://swapi.dev/api"
SWAPI_PLANETS_PATH = "/planets/"

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_DEBOUNCE_INTERVAL_MS = 300
MAX_DEBOUNCE_INTERVAL_MS = 5000
DEFAULT_SEARCH_LATENCY_MS = 120
DEFAULT_TIMEOUT_SECONDS = 15

SEARCH_BACKENDS = ("local", "remote")

# Opaque continuation token (the API's absolute ``next`` URL)
Cursor = str


@dataclass(frozen=True, slots=True)
class Planet:
    """A planet as delivered by the API.

    Strings are kept as delivered; formatting happens in presentation layers.
    Identity is the natural key ``name``.
    """

    name: str
    climate: str = field(default="", compare=False)
    gravity: str = field(default="", compare=False)
    terrain: str = field(default="", compare=False)
    diameter: str = field(default="", compare=False)
    population: str = field(default="", compare=False)


@dataclass(frozen=True, slots=True)
class PlanetsPage:
    """One page of planets plus the cursor to the next page (None = last)."""

    cursor: Cursor | None
    planets: tuple[Planet, ...] = ()


class BrowseMode(Enum):
    """Which of the two user-facing modes is active."""

    BROWSING = "browsing"
    SEARCHING = "searching"


class PageDirection(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True, slots=True)
class BackfillState:
    """Point-in-time view of the background walker."""

    in_flight: bool = False
    next_cursor: Cursor | None = None


@dataclass(slots=True)
class BrowserConfig:
    """Settings recognized by the browsing/search core."""

    page_size: int = DEFAULT_PAGE_SIZE
    debounce_interval_ms: int = DEFAULT_DEBOUNCE_INTERVAL_MS
    background_backfill_enabled: bool = False
    search_backend: str = "local"  # "local" | "remote"
    base_url: str = SWAPI_DEFAULT_BASE_URL
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    search_latency_ms: int = DEFAULT_SEARCH_LATENCY_MS
    version: int = 1

    def __post_init__(self) -> None:
        """Clamp page_size and fall back to local search on unknown backends."""
        self.page_size = max(1, min(self.page_size, MAX_PAGE_SIZE))
        if self.search_backend not in SEARCH_BACKENDS:
            self.search_backend = "local"


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_DEBOUNCE_INTERVAL_MS",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SEARCH_LATENCY_MS",
    "DEFAULT_TIMEOUT_SECONDS",
    "MAX_DEBOUNCE_INTERVAL_MS",
    "MAX_PAGE_SIZE",
    "SEARCH_BACKENDS",
    "SWAPI_DEFAULT_BASE_URL",
    "SWAPI_PLANETS_PATH",
    "BackfillState",
    "BrowseMode",
    "BrowserConfig",
    "Cursor",
    "PageDirection",
    "Planet",
    "PlanetsPage",
]
