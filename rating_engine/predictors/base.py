"""Base predictor interface for league matchups."""

from abc import ABC, abstractmethod
from typing import Tuple


class BasePredictor(ABC):
    """Abstract base class for raw home-win probability models."""

    def __init__(self, name: str):
        """
        Initialize predictor.

        Args:
            name: Name of the predictor model
        """
        self.name = name

    @abstractmethod
    def predict(
        self,
        league: str,
        home_team_key: str,
        away_team_key: str,
        neutral_site: bool = False,
        tournament: bool = False,
    ) -> float:
        """
        Probability that the home side wins.

        Args:
            league: League of both teams
            home_team_key: Home (or designated first) team
            away_team_key: Away team
            neutral_site: No home advantage applies
            tournament: Tournament context, treated as a neutral court

        Returns:
            Home win probability (0 to 1)
        """
        pass

    def favorite(
        self,
        league: str,
        home_team_key: str,
        away_team_key: str,
        neutral_site: bool = False,
        tournament: bool = False,
    ) -> Tuple[str, float]:
        """
        Favored side and its win probability.

        An exact coin flip is credited to the home side.
        """
        p_home = self.predict(league, home_team_key, away_team_key, neutral_site, tournament)
        if p_home >= 0.5:
            return "home", p_home
        return "away", 1.0 - p_home
