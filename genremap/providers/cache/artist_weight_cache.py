"""First-writer-wins cache of artist weights shared by all dispatched units.

The same artist appears on many genre pages, each time with a different
font-size weight.  The output keeps the weight from the *first* page that
was processed for that artist, so every later row reports the same value.

Detail pages are parsed in worker threads (``asyncio.to_thread``), so the
cache is guarded by a ``threading.Lock`` rather than an ``asyncio.Lock``.
The lock is held only around the dictionary lookup/insert, never around
network or parsing work.
"""

from __future__ import annotations

import threading

import structlog

logger = structlog.get_logger(logger_name=__name__)


class ArtistWeightCache:
    """Thread-safe mapping of artist name → first-observed weight.

    Entries are never overwritten or evicted; the cache lives for exactly
    one pipeline run and its size is bounded by the number of distinct
    artists observed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._weights: dict[str, str] = {}
        self._hits = 0

    def get_or_set(self, artist: str, candidate_weight: str) -> str:
        """Return the cached weight for *artist*, storing *candidate_weight* if absent.

        Under concurrency the first caller to take the lock commits its
        candidate; every later caller receives that committed value whatever
        candidate it supplies.
        """
        with self._lock:
            existing = self._weights.get(artist)
            if existing is not None:
                self._hits += 1
                return existing
            self._weights[artist] = candidate_weight
        logger.debug("artist_weight_cached", artist=artist, weight=candidate_weight)
        return candidate_weight

    def get(self, artist: str) -> str | None:
        """Return the cached weight for *artist*, or ``None`` if never seen."""
        with self._lock:
            return self._weights.get(artist)

    def snapshot(self) -> dict[str, str]:
        """Return a point-in-time copy of all cached weights."""
        with self._lock:
            return dict(self._weights)

    @property
    def hits(self) -> int:
        """Number of ``get_or_set`` calls answered from the cache."""
        with self._lock:
            return self._hits

    def __contains__(self, artist: object) -> bool:
        with self._lock:
            return artist in self._weights

    def __len__(self) -> int:
        with self._lock:
            return len(self._weights)
