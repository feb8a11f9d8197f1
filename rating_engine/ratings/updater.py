"""
Elo replay of completed games into a RatingStore.

Every completed game moves the two teams' ratings by
    delta = K * (actual_home - expected_home)
where the expectation includes a transient home-advantage offset that is
never written back into the stored ratings. Games are applied in ascending
date order; equal dates keep their input order.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..config import LeagueConfig
from ..models.game import GameResult
from .store import RatingStore

logger = logging.getLogger(__name__)

SCALE = 400.0


def expected_score(rating: float, opponent_rating: float, offset: float = 0.0) -> float:
    """
    Logistic Elo expectation for a side rated ``rating`` (+ ``offset``).

    Args:
        rating: Rating of the side whose expectation is wanted
        opponent_rating: Rating of the opponent
        offset: Transient bonus (home advantage) added to ``rating``

    Returns:
        Expected score in (0, 1)
    """
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - (rating + offset)) / SCALE))


@dataclass
class RatingUpdater:
    """Replays GameResults for one league through the Elo update rule."""

    config: LeagueConfig
    history: List[dict] = field(default_factory=list, repr=False)

    @property
    def league(self) -> str:
        return self.config.league

    def _actual_home(self, game: GameResult) -> Optional[float]:
        if game.home_score > game.away_score:
            return 1.0
        if game.home_score < game.away_score:
            return 0.0
        if self.config.allow_draws:
            return 0.5
        return None

    def apply(self, store: RatingStore, game: GameResult) -> bool:
        """
        Apply one game to the store.

        Returns:
            True when the game moved ratings, False when it was skipped
        """
        if game.league != self.league:
            logger.debug("Skipping %s: league %s != %s", game.game_id, game.league, self.league)
            return False
        if game.home_team_key == game.away_team_key:
            logger.debug("Skipping %s: %s listed as both home and away", game.game_id, game.home_team_key)
            return False
        if not game.is_scoreable:
            logger.debug("Skipping %s: not completed or missing scores", game.game_id)
            return False

        actual_home = self._actual_home(game)
        if actual_home is None:
            logger.debug("Skipping %s: tied final in a league without draws", game.game_id)
            return False

        home_elo = store.get_rating(self.league, game.home_team_key)
        away_elo = store.get_rating(self.league, game.away_team_key)
        expected_home = expected_score(home_elo, away_elo, self.config.home_advantage)
        delta = self.config.k_factor * (actual_home - expected_home)

        store.set_rating(self.league, game.home_team_key, home_elo + delta, game.date)
        store.set_rating(self.league, game.away_team_key, away_elo - delta, game.date)

        self.history.append(
            {
                "game_id": game.game_id,
                "date": game.date,
                "home_team_key": game.home_team_key,
                "away_team_key": game.away_team_key,
                "home_score": game.home_score,
                "away_score": game.away_score,
                "pregame_prob_home": expected_home,
                "outcome": actual_home,
                "home_rating_after": home_elo + delta,
                "away_rating_after": away_elo - delta,
            }
        )
        return True

    def replay(self, games: Iterable[GameResult], store: Optional[RatingStore] = None) -> RatingStore:
        """
        Replay games in chronological order.

        Args:
            games: GameResults for this league, in any order
            store: Starting store (a fresh one is created when omitted)

        Returns:
            The updated store
        """
        if store is None:
            store = RatingStore({self.league: self.config.base_rating})

        applied = skipped = 0
        for game in sorted(games, key=lambda g: g.date):
            if self.apply(store, game):
                applied += 1
            else:
                skipped += 1

        logger.info("%s ratings: applied %d games, skipped %d", self.league, applied, skipped)
        return store


def build_ratings(config: LeagueConfig, game_results: Iterable[GameResult]) -> RatingStore:
    """Build a fresh RatingStore for one league from its completed games."""
    return RatingUpdater(config).replay(game_results)
