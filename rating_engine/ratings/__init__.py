"""Team rating storage and Elo replay."""

from .cache import RatingCache
from .store import RatingStore
from .updater import RatingUpdater, build_ratings, expected_score

__all__ = [
    "RatingCache",
    "RatingStore",
    "RatingUpdater",
    "build_ratings",
    "expected_score",
]
