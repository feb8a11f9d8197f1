"""Game, fixture and market quote models."""

import math
from dataclasses import dataclass
from datetime import date as _date, datetime
from typing import Optional


def _iso_date(value) -> str:
    if isinstance(value, (datetime, _date)):
        return value.isoformat()
    return str(value or "")


def _score(value) -> Optional[int]:
    """Return an integer score, or None when the value is not a finite integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return None
    if math.isfinite(parsed) and parsed.is_integer():
        return int(parsed)
    return None


@dataclass
class GameResult:
    """A played (or scheduled) game as normalized by the schedule provider."""

    game_id: str
    league: str
    date: str
    home_team_key: str
    away_team_key: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    completed: bool = False

    def __post_init__(self):
        self.league = str(self.league).strip().lower()
        self.date = _iso_date(self.date)
        self.home_score = _score(self.home_score)
        self.away_score = _score(self.away_score)
        self.completed = bool(self.completed)

    @property
    def is_scoreable(self) -> bool:
        """True when the game can move ratings."""
        return (
            self.completed
            and self.home_score is not None
            and self.away_score is not None
            and bool(self.home_team_key)
            and bool(self.away_team_key)
        )

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "league": self.league,
            "date": self.date,
            "home_team_key": self.home_team_key,
            "away_team_key": self.away_team_key,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameResult":
        return cls(
            game_id=str(data["game_id"]),
            league=data["league"],
            date=data["date"],
            home_team_key=str(data["home_team_key"]),
            away_team_key=str(data["away_team_key"]),
            home_score=data.get("home_score"),
            away_score=data.get("away_score"),
            completed=data.get("completed", False),
        )


@dataclass
class Fixture:
    """An unplayed or in-progress game to be predicted."""

    game_id: str
    league: str
    date: str
    home_team_key: str
    away_team_key: str
    neutral_site: bool = False

    def __post_init__(self):
        self.league = str(self.league).strip().lower()
        self.date = _iso_date(self.date)
        self.neutral_site = bool(self.neutral_site)

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "league": self.league,
            "date": self.date,
            "home_team_key": self.home_team_key,
            "away_team_key": self.away_team_key,
            "neutral_site": self.neutral_site,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Fixture":
        return cls(
            game_id=str(data["game_id"]),
            league=data["league"],
            date=data["date"],
            home_team_key=str(data["home_team_key"]),
            away_team_key=str(data["away_team_key"]),
            neutral_site=data.get("neutral_site", False),
        )


@dataclass
class MarketQuote:
    """American moneyline odds for one fixture."""

    home_moneyline: Optional[float] = None
    away_moneyline: Optional[float] = None

    def to_dict(self) -> dict:
        return {"home_moneyline": self.home_moneyline, "away_moneyline": self.away_moneyline}

    @classmethod
    def from_dict(cls, data: dict) -> "MarketQuote":
        return cls(
            home_moneyline=data.get("home_moneyline"),
            away_moneyline=data.get("away_moneyline"),
        )
