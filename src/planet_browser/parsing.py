"""SWAPI payload decoding.

The planets endpoint has been observed returning three different shapes
depending on the deployment. Candidates are tried in a fixed priority order:

1. paged object ``{"count", "next", "previous", "results": [...]}``
2. raw array ``[{...}, ...]`` (no further pages)
3. a single planet object (no further pages)

Only when none of them match is ``DecodeFailure`` raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import urljoin

from planet_browser.errors import DecodeFailure
from planet_browser.models import Planet, PlanetsPage

logger = logging.getLogger(__name__)

PLANET_FIELDS = ("name", "climate", "gravity", "terrain", "diameter", "population")

# Longest payload prefix echoed into the debug log on decode failure
_PAYLOAD_SNIPPET_LEN = 200


class _ShapeMismatch(Exception):
    """Internal signal: the payload is not this candidate's shape."""


def parse_planet(data: Any) -> Planet:
    """Build a Planet from one JSON object, requiring every known field."""
    if not isinstance(data, dict):
        raise _ShapeMismatch("planet is not an object")
    values: dict[str, str] = {}
    for key in PLANET_FIELDS:
        value = data.get(key)
        if not isinstance(value, str):
            raise _ShapeMismatch(f"planet field {key!r} missing or not a string")
        values[key] = value
    return Planet(**values)


def _parse_paged(data: Any, base_url: str) -> PlanetsPage:
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise _ShapeMismatch("not a paged object")
    next_url = data.get("next")
    if next_url is not None and not isinstance(next_url, str):
        raise _ShapeMismatch("next is not a string")
    try:
        cursor = urljoin(base_url, next_url) if next_url else None
    except ValueError as exc:
        raise _ShapeMismatch(f"next is not a valid URL: {exc}") from exc
    return PlanetsPage(cursor=cursor, planets=tuple(parse_planet(p) for p in data["results"]))


def _parse_array(data: Any, _base_url: str) -> PlanetsPage:
    if not isinstance(data, list):
        raise _ShapeMismatch("not an array")
    return PlanetsPage(cursor=None, planets=tuple(parse_planet(p) for p in data))


def _parse_single(data: Any, _base_url: str) -> PlanetsPage:
    return PlanetsPage(cursor=None, planets=(parse_planet(data),))


_SHAPE_CANDIDATES: list[tuple[str, Callable[[Any, str], PlanetsPage]]] = [
    ("paged", _parse_paged),
    ("array", _parse_array),
    ("single", _parse_single),
]


def parse_planets_payload(data: Any, base_url: str = "") -> PlanetsPage:
    """Decode an already-JSON-parsed payload into a PlanetsPage.

    Args:
        data: The decoded JSON document.
        base_url: URL the payload was fetched from; relative ``next`` links
            are resolved against it.

    Raises:
        DecodeFailure: If no shape candidate matches.
    """
    for shape, parser in _SHAPE_CANDIDATES:
        try:
            page = parser(data, base_url)
        except _ShapeMismatch as exc:
            logger.debug("Payload is not %s shape: %s", shape, exc)
            continue
        logger.debug("Decoded %s payload with %d planets", shape, len(page.planets))
        return page
    snippet = repr(data)[:_PAYLOAD_SNIPPET_LEN]
    logger.warning("Planets decode failed (shape mismatch): %s", snippet)
    raise DecodeFailure("payload matched no known planets shape")


__all__ = [
    "PLANET_FIELDS",
    "parse_planet",
    "parse_planets_payload",
]
