"""Elo rating-based home-win predictor."""

from ..ratings.store import RatingStore
from ..ratings.updater import expected_score
from .base import BasePredictor


class EloPredictor(BasePredictor):
    """Turns a RatingStore snapshot into raw home-win probabilities."""

    def __init__(self, store: RatingStore, home_advantage: float = 60.0):
        """
        Initialize Elo predictor.

        Args:
            store: Fully built ratings to read from (never mutated)
            home_advantage: Elo points credited to the home side for the expectation
        """
        super().__init__("elo")
        self.store = store
        self.home_advantage = home_advantage

    def offset(self, neutral_site: bool = False, tournament: bool = False) -> float:
        return 0.0 if (neutral_site or tournament) else self.home_advantage

    def predict(
        self,
        league: str,
        home_team_key: str,
        away_team_key: str,
        neutral_site: bool = False,
        tournament: bool = False,
    ) -> float:
        """
        Raw probability that the home side wins.

        Args:
            league: League of both teams
            home_team_key: Home (or designated first) team
            away_team_key: Away team
            neutral_site: Drop the home-advantage offset
            tournament: Tournament context, treated as a neutral court

        Returns:
            Home win probability (0 to 1)
        """
        home_elo = self.store.get_rating(league, home_team_key)
        away_elo = self.store.get_rating(league, away_team_key)
        return expected_score(home_elo, away_elo, self.offset(neutral_site, tournament))

    def rating_gap(
        self,
        league: str,
        home_team_key: str,
        away_team_key: str,
        neutral_site: bool = False,
        tournament: bool = False,
    ) -> float:
        """Effective home-minus-away gap including any home offset (+ = home favored)."""
        home_elo = self.store.get_rating(league, home_team_key)
        away_elo = self.store.get_rating(league, away_team_key)
        return home_elo + self.offset(neutral_site, tournament) - away_elo
