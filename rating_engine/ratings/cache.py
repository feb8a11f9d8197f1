"""TTL-bounded holder of built rating stores, swapped in whole."""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from .store import RatingStore

logger = logging.getLogger(__name__)


class RatingCache:
    """
    Keeps the most recently built RatingStore per league.

    Rebuilds never mutate an installed store: a new store is built from
    scratch and replaces the old one in a single assignment. Two concurrent
    rebuilds from the same input are equivalent, so whichever installs last
    wins.
    """

    def __init__(self, ttl_seconds: float = 600.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, RatingStore]] = {}

    def get(self, league: str) -> Optional[RatingStore]:
        """Installed store for the league, or None when missing or expired."""
        entry = self._entries.get(league)
        if entry is None:
            return None
        built_at, store = entry
        if self._clock() - built_at >= self.ttl_seconds:
            return None
        return store

    def install(self, league: str, store: RatingStore) -> RatingStore:
        self._entries[league] = (self._clock(), store)
        return store

    def get_or_build(self, league: str, build: Callable[[], RatingStore]) -> RatingStore:
        store = self.get(league)
        if store is not None:
            return store
        logger.info("Rebuilding %s ratings (cache empty or older than %.0fs)", league, self.ttl_seconds)
        return self.install(league, build())

    def invalidate(self, league: Optional[str] = None) -> None:
        if league is None:
            self._entries = {}
        else:
            self._entries.pop(league, None)
