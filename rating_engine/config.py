"""League and engine configuration knobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


class EngineInputError(ValueError):
    """Raised when a caller hands the engine structurally invalid input."""


BASE_RATING = 1500.0


@dataclass
class LeagueConfig:
    """Per-league tuning for ratings, blending and pick discipline."""

    league: str
    k_factor: float = 20.0
    home_advantage: float = 60.0
    base_rating: float = BASE_RATING
    lookback_days: int = 90
    allow_draws: bool = False

    # Pseudo-count blend toward the prior
    prior_strength: float = 20.0
    model_strength: float = 20.0
    market_weight: float = 0.55

    clamp_floor: float = 0.18
    clamp_ceil: float = 0.82
    tournament_floor: float = 0.05
    tournament_ceil: float = 0.95

    min_edge_for_pick: float = 0.0

    def __post_init__(self):
        self.league = str(self.league).strip().lower()
        if not self.league:
            raise ValueError("league must be a non-empty string")
        if self.k_factor <= 0:
            raise ValueError(f"k_factor must be positive, got {self.k_factor}")
        if self.prior_strength < 0 or self.model_strength < 0:
            raise ValueError("prior_strength and model_strength must be non-negative")
        if self.prior_strength + self.model_strength <= 0:
            raise ValueError("prior_strength + model_strength must be positive")
        if not 0.0 <= self.market_weight <= 1.0:
            raise ValueError(f"market_weight must be in [0, 1], got {self.market_weight}")
        if not 0.0 <= self.clamp_floor < self.clamp_ceil <= 1.0:
            raise ValueError(f"Invalid clamp band [{self.clamp_floor}, {self.clamp_ceil}]")
        if not 0.0 <= self.tournament_floor < self.tournament_ceil <= 1.0:
            raise ValueError(
                f"Invalid tournament clamp band [{self.tournament_floor}, {self.tournament_ceil}]"
            )
        if self.min_edge_for_pick < 0:
            raise ValueError("min_edge_for_pick must be non-negative")

    def clamp_band(self, tournament: bool = False):
        """Return the (floor, ceil) probability band for the context."""
        if tournament:
            return self.tournament_floor, self.tournament_ceil
        return self.clamp_floor, self.clamp_ceil


def default_leagues() -> Dict[str, LeagueConfig]:
    """Built-in league table."""
    return {
        "nba": LeagueConfig("nba", k_factor=18.0, home_advantage=55.0, lookback_days=120),
        # OT/shootout finals never tie, but a tied final is scored as a draw
        "nhl": LeagueConfig("nhl", k_factor=20.0, home_advantage=60.0, lookback_days=60, allow_draws=True),
        "ncaam": LeagueConfig("ncaam", k_factor=20.0, home_advantage=65.0, lookback_days=90),
    }


@dataclass
class EngineConfig:
    """Engine-wide configuration."""

    leagues: Dict[str, LeagueConfig] = field(default_factory=default_leagues)
    rating_ttl_seconds: float = 600.0

    def __post_init__(self):
        if self.rating_ttl_seconds < 0:
            raise ValueError("rating_ttl_seconds must be non-negative")

    def league(self, name: Optional[str]) -> LeagueConfig:
        key = str(name or "").strip().lower()
        try:
            return self.leagues[key]
        except KeyError:
            raise EngineInputError(
                f"Unknown league: {name!r} (configured: {', '.join(sorted(self.leagues))})"
            ) from None
