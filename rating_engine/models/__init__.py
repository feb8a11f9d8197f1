"""Engine data models."""

from .game import Fixture, GameResult, MarketQuote
from .prediction import PredictionRow, Tier, UpsetCandidate
from .rating import TeamRating

__all__ = [
    "Fixture",
    "GameResult",
    "MarketQuote",
    "PredictionRow",
    "TeamRating",
    "Tier",
    "UpsetCandidate",
]
