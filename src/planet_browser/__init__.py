"""Browse and search a paginated remote planets listing.

Public API re-exported for convenience; see the individual modules for
details.
"""

from planet_browser.backfill import BackfillWalker
from planet_browser.browser import PlanetsBrowser
from planet_browser.config import load_config, save_config
from planet_browser.errors import (
    DecodeFailure,
    HttpStatus,
    Message,
    NetworkUnavailable,
    PlanetsError,
)
from planet_browser.index import LocalIndex
from planet_browser.models import (
    BackfillState,
    BrowseMode,
    BrowserConfig,
    PageDirection,
    Planet,
    PlanetsPage,
)
from planet_browser.pager import Pager
from planet_browser.query import filter_planets, sort_planets_alpha
from planet_browser.search import SearchPipeline
from planet_browser.services import DefaultPlanetsService, IndexingPlanetsService, PlanetsService

__all__ = [
    "BackfillState",
    "BackfillWalker",
    "BrowseMode",
    "BrowserConfig",
    "DecodeFailure",
    "DefaultPlanetsService",
    "HttpStatus",
    "IndexingPlanetsService",
    "LocalIndex",
    "Message",
    "NetworkUnavailable",
    "PageDirection",
    "Pager",
    "Planet",
    "PlanetsBrowser",
    "PlanetsError",
    "PlanetsPage",
    "PlanetsService",
    "SearchPipeline",
    "filter_planets",
    "load_config",
    "save_config",
    "sort_planets_alpha",
]
