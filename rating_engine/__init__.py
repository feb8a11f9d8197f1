"""League rating, prediction and calibration engine."""

from .config import EngineConfig, EngineInputError, LeagueConfig
from .models import Fixture, GameResult, MarketQuote, PredictionRow, TeamRating, Tier, UpsetCandidate
from .pipeline import PredictionEngine
from .ratings import RatingStore

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "EngineInputError",
    "Fixture",
    "GameResult",
    "LeagueConfig",
    "MarketQuote",
    "PredictionEngine",
    "PredictionRow",
    "RatingStore",
    "TeamRating",
    "Tier",
    "UpsetCandidate",
]
