"""Team rating snapshot model."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TeamRating:
    """Rating of one team within one league at a point in time."""

    league: str
    team_key: str
    rating: float
    last_updated: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "league": self.league,
            "team_key": self.team_key,
            "rating": self.rating,
            "last_updated": self.last_updated,
        }
