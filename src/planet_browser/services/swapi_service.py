"""Internal SWAPI service helpers for URL building and page fetches."""

from __future__ import annotations

import logging

import httpx

from planet_browser.errors import DecodeFailure, classify_http_error
from planet_browser.models import SWAPI_PLANETS_PATH, Cursor, PlanetsPage
from planet_browser.parsing import parse_planets_payload

logger = logging.getLogger(__name__)

USER_AGENT = "planet-browser/1.0"


def build_planets_url(base_url: str) -> str:
    """Build the planets listing URL; query strings are left to httpx."""
    return base_url.rstrip("/") + SWAPI_PLANETS_PATH


async def _get_page(
    *,
    client: httpx.AsyncClient | None,
    url: str,
    params: dict[str, str] | None,
    timeout_seconds: float,
    user_agent: str,
) -> PlanetsPage:
    headers = {"User-Agent": user_agent, "Accept": "application/json"}
    try:
        if client is not None:
            response = await client.get(
                url, params=params, headers=headers, timeout=timeout_seconds
            )
        else:
            async with httpx.AsyncClient(follow_redirects=True) as tmp_client:
                response = await tmp_client.get(
                    url, params=params, headers=headers, timeout=timeout_seconds
                )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("GET %s failed: %s", url, exc)
        raise classify_http_error(exc) from exc

    try:
        data = response.json()
    except ValueError as exc:
        logger.warning("GET %s returned invalid JSON", url, exc_info=True)
        raise DecodeFailure("response body is not JSON") from exc
    return parse_planets_payload(data, str(response.url))


async def fetch_first_page(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    timeout_seconds: float,
    user_agent: str = USER_AGENT,
) -> PlanetsPage:
    """Fetch the first page of the planets listing."""
    return await _get_page(
        client=client,
        url=build_planets_url(base_url),
        params=None,
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )


async def fetch_page_at(
    *,
    client: httpx.AsyncClient | None,
    cursor: Cursor,
    timeout_seconds: float,
    user_agent: str = USER_AGENT,
) -> PlanetsPage:
    """Fetch the page a previous response's cursor points at."""
    return await _get_page(
        client=client,
        url=cursor,
        params=None,
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )


async def search_planets(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    query: str,
    timeout_seconds: float,
    user_agent: str = USER_AGENT,
) -> PlanetsPage:
    """Run the server-side ``?search=`` query (first results page only)."""
    return await _get_page(
        client=client,
        url=build_planets_url(base_url),
        params={"search": query},
        timeout_seconds=timeout_seconds,
        user_agent=user_agent,
    )


__all__ = [
    "USER_AGENT",
    "build_planets_url",
    "fetch_first_page",
    "fetch_page_at",
    "search_planets",
]
