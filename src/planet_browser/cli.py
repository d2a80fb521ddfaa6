"""Command-line front end for the planet browser core."""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import sys
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import TextIO

import httpx
from platformdirs import user_config_dir

from planet_browser.browser import PlanetsBrowser
from planet_browser.config import load_config
from planet_browser.models import CONFIG_APP_NAME, MAX_PAGE_SIZE, BrowserConfig, Planet
from planet_browser.services.interfaces import DefaultPlanetsService, PlanetsService

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def format_planet_line(planet: Planet) -> str:
    """One-line summary of a planet for terminal output."""
    return f"{planet.name:<20} {planet.climate:<24} {planet.terrain}"


def _print_window(browser: PlanetsBrowser, out: TextIO) -> None:
    print(
        f"-- page {browser.current_page_display}/{browser.total_pages_display} --",
        file=out,
    )
    for planet in browser.planets:
        print(format_planet_line(planet), file=out)


async def run(
    config: BrowserConfig,
    *,
    pages: int,
    search: str | None,
    service: PlanetsService,
    out: TextIO | None = None,
) -> int:
    """Browse ``pages`` windows and optionally run one search. Returns exit code."""
    out = out if out is not None else sys.stdout
    async with PlanetsBrowser(service, config) as browser:
        await browser.load_first_page()
        if browser.alert:
            print(f"Error: {browser.alert}", file=sys.stderr)
            return 1
        _print_window(browser, out)

        for _ in range(max(0, pages - 1)):
            if not browser.can_load_more:
                break
            await browser.go_next_page()
            if browser.alert:
                print(f"Error: {browser.alert}", file=sys.stderr)
                return 1
            _print_window(browser, out)

        if search:
            browser.set_search_term(search)
            await browser.wait_idle()
            if config.background_backfill_enabled and config.search_backend == "local":
                # The first search only saw the browsed pages; repeat once indexed.
                await browser.wait_for_backfill()
                browser.set_search_term("")
                await browser.wait_idle()
                browser.set_search_term(search)
                await browser.wait_idle()
            if browser.alert:
                print(f"Error: {browser.alert}", file=sys.stderr)
                return 1
            print(f"-- search {search!r}: {len(browser.planets)} match(es) --", file=out)
            for planet in browser.planets:
                print(format_planet_line(planet), file=out)
    return 0


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], BrowserConfig] = load_config,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    service_factory: Callable[[httpx.AsyncClient, BrowserConfig], PlanetsService] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = argparse.ArgumentParser(description="Browse and search SWAPI planets")
    parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help=f"Planets per page (1-{MAX_PAGE_SIZE}; default: config value)",
    )
    parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Number of page windows to print (default: 1)",
    )
    parser.add_argument(
        "-s",
        "--search",
        type=str,
        default=None,
        help="Search term to run after browsing",
    )
    parser.add_argument(
        "--backfill",
        action="store_true",
        help="Fetch remaining pages in the background so local search sees everything",
    )
    parser.add_argument(
        "--remote-search",
        action="store_true",
        help="Use the API's search endpoint instead of the local index",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="API base URL (default: config value, https://swapi.dev/api)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/planet-browser/debug.log)",
    )
    args = parser.parse_args(argv)
    if args.page_size is not None and not 1 <= args.page_size <= MAX_PAGE_SIZE:
        print(f"Error: --page-size must be between 1 and {MAX_PAGE_SIZE}", file=sys.stderr)
        return 1

    configure_logging_fn(args.debug)
    config = load_config_fn()

    overrides: dict[str, object] = {}
    if args.page_size is not None:
        overrides["page_size"] = args.page_size
    if args.backfill:
        overrides["background_backfill_enabled"] = True
    if args.remote_search:
        overrides["search_backend"] = "remote"
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.search:
        # Non-interactive: nobody is typing, so there is nothing to debounce.
        overrides["debounce_interval_ms"] = 0
        overrides["search_latency_ms"] = 0
    config = replace(config, **overrides)
    logger.debug("planet-browser starting with %s", config)

    async def _amain() -> int:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            if service_factory is not None:
                service = service_factory(client, config)
            else:
                service = DefaultPlanetsService(
                    client=client,
                    base_url=config.base_url,
                    timeout_seconds=config.timeout_seconds,
                )
            return await run(config, pages=args.pages, search=args.search, service=service)

    return asyncio.run(_amain())


__all__ = ["format_planet_line", "main", "run"]
