"""Session-only, append-only index of every planet seen so far."""

from __future__ import annotations

import logging
import threading

from planet_browser.models import Cursor, Planet, PlanetsPage

logger = logging.getLogger(__name__)


class LocalIndex:
    """Deduplicated store of planets in first-seen order.

    All mutation goes through :meth:`ingest`, which holds one lock for the
    whole insert loop, so a :meth:`snapshot` observes either all or none of a
    given ingest. Planets are never removed or replaced; the first planet
    seen under a name wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._planets: list[Planet] = []
        self._seen_names: set[str] = set()
        self._next_cursor: Cursor | None = None

    def ingest(self, page: PlanetsPage) -> int:
        """Append the page's unseen planets and remember its cursor.

        Returns the number of planets actually added.
        """
        added = 0
        with self._lock:
            for planet in page.planets:
                if planet.name in self._seen_names:
                    continue
                self._seen_names.add(planet.name)
                self._planets.append(planet)
                added += 1
            self._next_cursor = page.cursor
            total = len(self._planets)
        logger.debug("Ingested page: %d new, %d total, cursor=%s", added, total, page.cursor)
        return added

    def snapshot(self) -> tuple[Planet, ...]:
        """Return an immutable copy of the index as of this call."""
        with self._lock:
            return tuple(self._planets)

    @property
    def next_cursor(self) -> Cursor | None:
        """Cursor of the most recently ingested page."""
        with self._lock:
            return self._next_cursor

    def __len__(self) -> int:
        with self._lock:
            return len(self._planets)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._seen_names


__all__ = ["LocalIndex"]
