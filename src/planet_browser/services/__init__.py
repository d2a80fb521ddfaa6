"""Service layer: SWAPI transport helpers, interfaces, and the indexing decorator."""

from planet_browser.services.indexing_service import IndexingPlanetsService
from planet_browser.services.interfaces import DefaultPlanetsService, PlanetsService
from planet_browser.services.swapi_service import (
    build_planets_url,
    fetch_first_page,
    fetch_page_at,
    search_planets,
)

__all__ = [
    "DefaultPlanetsService",
    "IndexingPlanetsService",
    "PlanetsService",
    "build_planets_url",
    "fetch_first_page",
    "fetch_page_at",
    "search_planets",
]
