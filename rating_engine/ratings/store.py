"""In-memory per-league team rating store."""

from __future__ import annotations

import math
from typing import Dict, Iterator, List, Optional, Tuple

import pandas as pd

from ..config import BASE_RATING
from ..models.rating import TeamRating


class RatingStore:
    """
    Holds the current rating for every (league, team_key) pair.

    Unseen teams read as the league base rating. The store is a plain data
    container: it is not thread-safe and callers swap in freshly built stores
    rather than mutating one that readers are using.
    """

    def __init__(self, base_ratings: Optional[Dict[str, float]] = None, default_base: float = BASE_RATING):
        self._ratings: Dict[Tuple[str, str], float] = {}
        self._updated: Dict[Tuple[str, str], Optional[str]] = {}
        self._base = {str(k).lower(): float(v) for k, v in (base_ratings or {}).items()}
        self.default_base = float(default_base)

    @staticmethod
    def _key(league: str, team_key: str) -> Tuple[str, str]:
        return str(league).strip().lower(), str(team_key)

    def base_rating(self, league: str) -> float:
        return self._base.get(str(league).strip().lower(), self.default_base)

    def get_rating(self, league: str, team_key: str) -> float:
        """Current rating, or the league base rating for an unseen team."""
        key = self._key(league, team_key)
        if key in self._ratings:
            return self._ratings[key]
        return self.base_rating(key[0])

    def set_rating(self, league: str, team_key: str, value: float, updated: Optional[str] = None) -> None:
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Rating must be finite, got {value}")
        key = self._key(league, team_key)
        self._ratings[key] = value
        self._updated[key] = updated

    def has_team(self, league: str, team_key: str) -> bool:
        return self._key(league, team_key) in self._ratings

    def leagues(self) -> List[str]:
        return sorted({league for league, _ in self._ratings})

    def teams(self, league: str) -> List[str]:
        league = str(league).strip().lower()
        return sorted(team for lg, team in self._ratings if lg == league)

    def snapshot(self, league: str, team_key: str) -> TeamRating:
        key = self._key(league, team_key)
        return TeamRating(
            league=key[0],
            team_key=key[1],
            rating=self.get_rating(*key),
            last_updated=self._updated.get(key),
        )

    def rankings(self, league: str) -> List[TeamRating]:
        """Rated teams in a league, highest rating first (team key breaks ties)."""
        rows = [self.snapshot(league, team) for team in self.teams(league)]
        return sorted(rows, key=lambda r: (-r.rating, r.team_key))

    def copy(self) -> "RatingStore":
        clone = RatingStore(self._base, self.default_base)
        clone._ratings = dict(self._ratings)
        clone._updated = dict(self._updated)
        return clone

    def __iter__(self) -> Iterator[TeamRating]:
        for league, team in sorted(self._ratings):
            yield self.snapshot(league, team)

    def __len__(self) -> int:
        return len(self._ratings)

    def to_frame(self) -> pd.DataFrame:
        """Ratings as a DataFrame sorted by league then rating descending."""
        frame = pd.DataFrame(
            [r.to_dict() for r in self],
            columns=["league", "team_key", "rating", "last_updated"],
        )
        if frame.empty:
            return frame
        return frame.sort_values(["league", "rating"], ascending=[True, False]).reset_index(drop=True)

    def to_dict(self) -> dict:
        return {
            "default_base": self.default_base,
            "base_ratings": dict(self._base),
            "ratings": [r.to_dict() for r in self],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RatingStore":
        store = cls(data.get("base_ratings"), data.get("default_base", BASE_RATING))
        for row in data.get("ratings", []):
            store.set_rating(row["league"], row["team_key"], row["rating"], row.get("last_updated"))
        return store
