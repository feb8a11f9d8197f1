"""Prediction and upset candidate models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class Tier(str, Enum):
    """Unified confidence tier vocabulary."""

    ELITE = "ELITE"
    STRONG = "STRONG"
    LEAN = "LEAN"
    PASS = "PASS"

    @property
    def legacy_label(self) -> str:
        """HIGH/MED/LOW label used by older dashboards."""
        return _LEGACY_LABELS[self]


_LEGACY_LABELS = {
    Tier.ELITE: "HIGH",
    Tier.STRONG: "MED",
    Tier.LEAN: "LOW",
    Tier.PASS: "LOW",
}

PICK_SIDES = ("home", "away")


@dataclass(frozen=True)
class PredictionRow:
    """
    One engine prediction for one fixture.

    ``win_prob`` is always the probability of the picked side and
    ``edge == win_prob - 0.5``. When the engine abstains, ``pick_side`` is
    None and ``win_prob`` reports the stronger side.
    """

    game_id: str
    date: str
    league: str
    home_team_key: str
    away_team_key: str
    pick_side: Optional[str]
    win_prob: float
    edge: float
    confidence: float
    tier: Tier
    neutral_site: bool = False
    raw_home_prob: Optional[float] = None
    home_prob: Optional[float] = None
    market_home_prob: Optional[float] = None
    pick_note: str = "ok"

    def __post_init__(self):
        if self.pick_side is not None and self.pick_side not in PICK_SIDES:
            raise ValueError(f"pick_side must be 'home', 'away' or None, got {self.pick_side!r}")
        if not 0.0 <= self.win_prob <= 1.0:
            raise ValueError(f"win_prob must be between 0 and 1, got {self.win_prob}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be between 0 and 1, got {self.confidence}")

    @property
    def picked_team_key(self) -> Optional[str]:
        if self.pick_side == "home":
            return self.home_team_key
        if self.pick_side == "away":
            return self.away_team_key
        return None

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "date": self.date,
            "league": self.league,
            "home_team_key": self.home_team_key,
            "away_team_key": self.away_team_key,
            "neutral_site": self.neutral_site,
            "pick_side": self.pick_side,
            "win_prob": self.win_prob,
            "edge": self.edge,
            "confidence": self.confidence,
            "tier": self.tier.value,
            "raw_home_prob": self.raw_home_prob,
            "home_prob": self.home_prob,
            "market_home_prob": self.market_home_prob,
            "pick_note": self.pick_note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PredictionRow":
        return cls(
            game_id=str(data["game_id"]),
            date=str(data.get("date") or ""),
            league=str(data["league"]).lower(),
            home_team_key=str(data["home_team_key"]),
            away_team_key=str(data["away_team_key"]),
            pick_side=data.get("pick_side"),
            win_prob=float(data["win_prob"]),
            edge=float(data["edge"]),
            confidence=float(data["confidence"]),
            tier=Tier(data["tier"]),
            neutral_site=bool(data.get("neutral_site", False)),
            raw_home_prob=data.get("raw_home_prob"),
            home_prob=data.get("home_prob"),
            market_home_prob=data.get("market_home_prob"),
            pick_note=data.get("pick_note", "ok"),
        )


@dataclass
class UpsetCandidate:
    """A fixture where the statistical underdog carries notable win equity."""

    game_id: str
    favorite_team_key: str
    underdog_team_key: str
    underdog_win_prob: float
    score: float
    signals: Dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "favorite_team_key": self.favorite_team_key,
            "underdog_team_key": self.underdog_team_key,
            "underdog_win_prob": self.underdog_win_prob,
            "score": self.score,
            "signals": dict(self.signals),
        }
