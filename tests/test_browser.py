"""Behavioral tests for the PlanetsBrowser orchestrator."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from planet_browser.browser import PlanetsBrowser, _merge_unique
from planet_browser.errors import HttpStatus, NetworkUnavailable
from planet_browser.models import BrowseMode, PageDirection
from planet_browser.services.interfaces import DefaultPlanetsService

TWELVE = [
    "Alderaan",
    "Bespin",
    "Coruscant",
    "Dagobah",
    "Endor",
    "Felucia",
    "Geonosis",
    "Hoth",
    "Ilum",
    "Jakku",
    "Kamino",
    "Naboo",
]


def _names(browser: PlanetsBrowser) -> list[str]:
    return [planet.name for planet in browser.planets]


@pytest.fixture
def twelve_service(fake_service, make_page):
    # Served out of order so the browser has to sort.
    return fake_service({"first": make_page(list(reversed(TWELVE)))})


@pytest.fixture
def chained_service(fake_service, make_page):
    return fake_service(
        {
            "first": make_page(["Tatooine", "Alderaan"], cursor="p2"),
            "p2": make_page(["Hoth", "Bespin", "Tatooine"]),
        }
    )


# ── Browsing ─────────────────────────────────────────────────────────────────


class TestLocalPaging:
    @pytest.mark.asyncio
    async def test_first_page_shows_first_sorted_window(self, twelve_service, fast_config):
        browser = PlanetsBrowser(twelve_service, fast_config(page_size=10))

        await browser.load_first_page()

        assert _names(browser) == TWELVE[:10]
        assert browser.current_page_display == 1
        assert browser.total_pages_display == "2"
        assert browser.can_load_more
        assert not browser.has_server_paging
        assert not browser.is_loading

    @pytest.mark.asyncio
    async def test_next_and_prev_slice_without_fetching(self, twelve_service, fast_config):
        browser = PlanetsBrowser(twelve_service, fast_config(page_size=10))
        await browser.load_first_page()

        await browser.go_next_page()
        assert _names(browser) == ["Kamino", "Naboo"]
        assert browser.current_page_display == 2
        assert browser.page_direction is PageDirection.FORWARD
        assert not browser.can_load_more

        await browser.go_next_page()
        assert browser.current_page_display == 2

        browser.go_prev_page()
        assert _names(browser) == TWELVE[:10]
        assert browser.page_direction is PageDirection.BACKWARD

        browser.go_prev_page()
        assert browser.current_page_display == 1
        assert twelve_service.calls == [("first", "first")]

    @pytest.mark.asyncio
    async def test_empty_listing_is_one_page(self, fake_service, make_page, fast_config):
        browser = PlanetsBrowser(fake_service({"first": make_page([])}), fast_config())

        await browser.load_first_page()

        assert browser.planets == []
        assert browser.total_pages_display == "1"
        assert not browser.can_load_more

    @pytest.mark.asyncio
    async def test_duplicate_names_in_first_page_are_dropped(
        self, fake_service, make_page, fast_config
    ):
        service = fake_service({"first": make_page(["Hoth", "Hoth", "Endor"])})
        browser = PlanetsBrowser(service, fast_config())

        await browser.load_first_page()

        assert _names(browser) == ["Endor", "Hoth"]


class TestServerPaging:
    @pytest.mark.asyncio
    async def test_total_unknown_while_cursor_exists(self, chained_service, fast_config):
        browser = PlanetsBrowser(chained_service, fast_config(page_size=2))

        await browser.load_first_page()

        assert _names(browser) == ["Alderaan", "Tatooine"]
        assert browser.has_server_paging
        assert browser.total_pages_display == "?"
        assert browser.can_load_more

    @pytest.mark.asyncio
    async def test_next_fetches_merges_and_resorts(self, chained_service, fast_config):
        browser = PlanetsBrowser(chained_service, fast_config(page_size=2))
        await browser.load_first_page()

        await browser.go_next_page()

        assert chained_service.calls_of("page") == ["p2"]
        assert _names(browser) == ["Hoth", "Tatooine"]
        assert browser.current_page_display == 2
        assert browser.total_pages_display == "2"
        assert not browser.has_server_paging
        assert not browser.can_load_more

        browser.go_prev_page()
        assert _names(browser) == ["Alderaan", "Bespin"]

    @pytest.mark.asyncio
    async def test_fetched_pages_reach_the_index(self, chained_service, fast_config):
        browser = PlanetsBrowser(chained_service, fast_config(page_size=2))
        await browser.load_first_page()
        await browser.go_next_page()

        assert len(browser.index) == 4
        assert browser.index.next_cursor is None

    @pytest.mark.asyncio
    async def test_concurrent_next_fetches_once(self, chained_service, fast_config):
        gate = asyncio.Event()
        browser = PlanetsBrowser(chained_service, fast_config(page_size=2))
        await browser.load_first_page()
        chained_service.gates["p2"] = gate

        first = asyncio.create_task(browser.go_next_page())
        await asyncio.sleep(0)
        assert browser.is_loading
        assert not browser.can_load_more
        await browser.go_next_page()
        gate.set()
        await first

        assert chained_service.calls_of("page") == ["p2"]
        assert browser.current_page_display == 2


class TestLoadFailures:
    @pytest.mark.asyncio
    async def test_first_page_failure_sets_alert(self, fake_service, fast_config):
        service = fake_service()
        service.failures["first"] = HttpStatus(503)
        browser = PlanetsBrowser(service, fast_config())
        loading_seen: list[bool] = []
        browser.add_listener(lambda b: loading_seen.append(b.is_loading))

        await browser.load_first_page()

        assert browser.alert == "Server responded with status 503."
        assert not browser.is_loading
        assert browser.planets == []
        assert loading_seen == [True, False]

    @pytest.mark.asyncio
    async def test_next_page_failure_keeps_current_window(self, chained_service, fast_config):
        chained_service.failures["p2"] = NetworkUnavailable()
        browser = PlanetsBrowser(chained_service, fast_config(page_size=2))
        await browser.load_first_page()

        await browser.go_next_page()

        assert browser.alert == "Network connection appears to be offline."
        assert _names(browser) == ["Alderaan", "Tatooine"]
        assert browser.current_page_display == 1
        assert browser.has_server_paging

        browser.clear_alert()
        assert browser.alert is None

    @pytest.mark.asyncio
    async def test_retry_after_failure_succeeds(self, fake_service, make_page, fast_config):
        service = fake_service({"first": make_page(["Hoth"])})
        service.failures["first"] = HttpStatus(500)
        browser = PlanetsBrowser(service, fast_config())

        await browser.load_first_page()
        del service.failures["first"]
        await browser.load_first_page()

        assert _names(browser) == ["Hoth"]


# ── Searching ────────────────────────────────────────────────────────────────


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_switches_mode_and_shows_sorted_matches(
        self, twelve_service, fast_config
    ):
        browser = PlanetsBrowser(twelve_service, fast_config())
        await browser.load_first_page()

        browser.set_search_term("  O")
        await browser.wait_idle()

        assert browser.mode is BrowseMode.SEARCHING
        assert browser.search_term == "  O"
        assert _names(browser) == [
            "Coruscant",
            "Dagobah",
            "Endor",
            "Geonosis",
            "Hoth",
            "Kamino",
            "Naboo",
        ]
        assert not browser.is_loading
        assert not browser.can_load_more

    @pytest.mark.asyncio
    async def test_clearing_restores_browsing_window_without_fetch(
        self, twelve_service, fast_config
    ):
        browser = PlanetsBrowser(twelve_service, fast_config(page_size=10))
        await browser.load_first_page()
        await browser.go_next_page()

        browser.set_search_term("hoth")
        await browser.wait_idle()
        assert _names(browser) == ["Hoth"]

        browser.set_search_term("")
        await browser.wait_idle()

        assert browser.mode is BrowseMode.BROWSING
        assert _names(browser) == ["Kamino", "Naboo"]
        assert browser.current_page_display == 2
        assert twelve_service.calls == [("first", "first")]

    @pytest.mark.asyncio
    async def test_navigation_is_ignored_while_searching(self, twelve_service, fast_config):
        browser = PlanetsBrowser(twelve_service, fast_config(page_size=10))
        await browser.load_first_page()
        browser.set_search_term("hoth")
        await browser.wait_idle()

        await browser.go_next_page()
        browser.go_prev_page()
        await browser.load_first_page()

        assert _names(browser) == ["Hoth"]
        assert browser.current_page_display == 1
        assert twelve_service.calls == [("first", "first")]

    @pytest.mark.asyncio
    async def test_search_failure_sets_alert(self, twelve_service, fast_config):
        browser = PlanetsBrowser(twelve_service, fast_config())
        await browser.load_first_page()
        browser.service.set_next_search_failure(NetworkUnavailable())

        browser.set_search_term("hoth")
        await browser.wait_idle()

        assert browser.alert == "Network connection appears to be offline."
        assert not browser.is_loading
        assert browser.mode is BrowseMode.SEARCHING

    @pytest.mark.asyncio
    async def test_remote_backend_uses_search_endpoint(
        self, twelve_service, make_page, fast_config
    ):
        twelve_service.search_results["o"] = make_page(["Yavin", "Dantooine"])
        browser = PlanetsBrowser(twelve_service, fast_config(search_backend="remote"))
        await browser.load_first_page()

        browser.set_search_term("o")
        await browser.wait_idle()

        assert _names(browser) == ["Dantooine", "Yavin"]
        assert twelve_service.calls_of("search") == ["o"]

    @pytest.mark.asyncio
    async def test_clearing_before_any_load_loads_first_page(self, twelve_service, fast_config):
        browser = PlanetsBrowser(twelve_service, fast_config(page_size=10))

        browser.set_search_term("hoth")
        await browser.wait_idle()
        assert browser.planets == []

        browser.set_search_term("")
        await browser.wait_idle()

        assert browser.mode is BrowseMode.BROWSING
        assert _names(browser) == TWELVE[:10]
        assert twelve_service.calls_of("first") == ["first"]


class TestBackfill:
    @pytest.fixture
    def three_pages(self, fake_service, make_page):
        return fake_service(
            {
                "first": make_page(["Tatooine", "Alderaan"], cursor="p2"),
                "p2": make_page(["Bespin", "Endor"], cursor="p3"),
                "p3": make_page(["Hoth"]),
            }
        )

    @pytest.mark.asyncio
    async def test_search_triggers_backfill_that_widens_results(self, three_pages, fast_config):
        browser = PlanetsBrowser(
            three_pages, fast_config(page_size=2, background_backfill_enabled=True)
        )
        await browser.load_first_page()

        browser.set_search_term("hoth")
        await browser.wait_idle()
        assert browser.planets == []

        await browser.wait_for_backfill()
        assert three_pages.calls_of("page") == ["p2", "p3"]
        assert browser.backfill_state.in_flight is False
        assert browser.backfill_state.next_cursor is None

        browser.set_search_term("")
        await browser.wait_idle()
        browser.set_search_term("hoth")
        await browser.wait_idle()
        assert _names(browser) == ["Hoth"]

    @pytest.mark.asyncio
    async def test_backfill_does_not_change_browsing_snapshot(self, three_pages, fast_config):
        browser = PlanetsBrowser(
            three_pages, fast_config(page_size=2, background_backfill_enabled=True)
        )
        await browser.load_first_page()
        browser.set_search_term("x")
        await browser.wait_idle()
        await browser.wait_for_backfill()

        browser.set_search_term("")
        await browser.wait_idle()

        assert _names(browser) == ["Alderaan", "Tatooine"]
        assert browser.total_pages_display == "?"

    @pytest.mark.asyncio
    async def test_backfill_disabled_by_default(self, three_pages, fast_config):
        browser = PlanetsBrowser(three_pages, fast_config(page_size=2))
        await browser.load_first_page()

        browser.set_search_term("hoth")
        await browser.wait_idle()
        await browser.wait_for_backfill()

        assert three_pages.calls_of("page") == []


# ── Listeners and lifecycle ──────────────────────────────────────────────────


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_listener_add_and_remove(self, twelve_service, fast_config):
        browser = PlanetsBrowser(twelve_service, fast_config())
        seen: list[int] = []

        def listener(b: PlanetsBrowser) -> None:
            seen.append(len(b.planets))

        browser.add_listener(listener)
        await browser.load_first_page()
        browser.remove_listener(listener)
        browser.remove_listener(listener)
        await browser.go_next_page()

        assert seen == [0, 10]

    @pytest.mark.asyncio
    async def test_context_manager_cancels_pending_search(self, twelve_service, fast_config):
        async with PlanetsBrowser(twelve_service, fast_config(debounce_interval_ms=5000)) as b:
            await b.load_first_page()
            b.set_search_term("hoth")

        await b.wait_idle()
        assert b.mode is BrowseMode.BROWSING
        assert twelve_service.calls_of("search") == []

    def test_default_config(self, twelve_service):
        browser = PlanetsBrowser(twelve_service)

        assert browser.config.page_size == 10
        assert browser.service.search_locally
        assert browser.current_page_display == 1
        assert browser.total_pages_display == "1"


def test_merge_unique_keeps_first_occurrence(make_planet) -> None:
    existing = [make_planet(name="Hoth", climate="frozen")]
    incoming = (make_planet(name="Hoth", climate="temperate"), make_planet(name="Endor"))

    merged = _merge_unique(existing, incoming)

    assert [p.name for p in merged] == ["Hoth", "Endor"]
    assert merged[0].climate == "frozen"


@pytest.mark.asyncio
async def test_malformed_payload_sets_decode_alert(fast_config) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"next": "http://[bad", "results": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        browser = PlanetsBrowser(DefaultPlanetsService(client=client), fast_config())
        await browser.load_first_page()

    assert browser.alert == "We couldn't read the server response."
    assert not browser.is_loading
    assert browser.planets == []
