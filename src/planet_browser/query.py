"""Local search filtering and sorting for planets."""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable

from planet_browser.models import Planet


def normalize_search_text(text: str) -> str:
    """Fold case and strip diacritics so "Hoth" matches "hôth"."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def planet_matches(planet: Planet, needle: str) -> bool:
    """Substring match of an already-normalized needle against searchable fields."""
    return any(
        needle in normalize_search_text(value)
        for value in (planet.name, planet.climate, planet.terrain)
    )


def filter_planets(planets: Iterable[Planet], query: str) -> list[Planet]:
    """Filter planets by query; a blank query returns everything unfiltered."""
    needle = normalize_search_text(query.strip())
    if not needle:
        return list(planets)
    return [planet for planet in planets if planet_matches(planet, needle)]


def sort_planets_alpha(planets: Iterable[Planet]) -> list[Planet]:
    """Case-insensitive A→Z by name (stable for equal keys)."""
    return sorted(planets, key=lambda planet: normalize_search_text(planet.name))


__all__ = [
    "filter_planets",
    "normalize_search_text",
    "planet_matches",
    "sort_planets_alpha",
]
