"""End-to-end rating, prediction and calibration engine."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..analysis.upsets import UpsetDetector, UpsetScanParams
from ..calibration.tracker import CalibrationTracker
from ..config import EngineConfig, EngineInputError, LeagueConfig
from ..models.game import Fixture, GameResult, MarketQuote
from ..models.prediction import PredictionRow, Tier, UpsetCandidate
from ..predictors.blender import ProbabilityBlender
from ..predictors.confidence import ConfidenceClassifier
from ..predictors.elo import EloPredictor
from ..ratings.cache import RatingCache
from ..ratings.store import RatingStore
from ..ratings.updater import RatingUpdater

logger = logging.getLogger(__name__)


class PredictionEngine:
    """
    Facade over the rating store, predictor, blender, classifier, upset
    detector and calibration tracker.

    Rating stores are passed in explicitly; the engine only keeps the
    TTL-bounded cache used by ``refresh_ratings`` and the calibration state.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        tracker: Optional[CalibrationTracker] = None,
        cache: Optional[RatingCache] = None,
    ):
        self.config = config or EngineConfig()
        self.tracker = tracker or CalibrationTracker()
        self.cache = cache or RatingCache(self.config.rating_ttl_seconds)
        self.classifier = ConfidenceClassifier()
        self._resolved: Set[Tuple[str, str]] = set()
        self._resolved_lock = threading.Lock()

    def league_config(self, league: str) -> LeagueConfig:
        return self.config.league(league)

    # ------------------------------------------------------------------ #
    # Ratings                                                              #
    # ------------------------------------------------------------------ #

    def build_ratings(self, league: str, game_results: Iterable[GameResult]) -> RatingStore:
        """Build a fresh RatingStore for one league from its game history."""
        cfg = self.league_config(league)
        return RatingUpdater(cfg).replay(game_results)

    def refresh_ratings(self, league: str, load_results: Callable[[], Iterable[GameResult]]) -> RatingStore:
        """
        Return the cached store for the league, rebuilding it when stale.

        ``load_results`` is only called when a rebuild is needed.
        """
        cfg = self.league_config(league)
        return self.cache.get_or_build(cfg.league, lambda: self.build_ratings(cfg.league, load_results()))

    # ------------------------------------------------------------------ #
    # Predictions                                                          #
    # ------------------------------------------------------------------ #

    def predict_fixture(
        self,
        league: str,
        fixture: Fixture,
        rating_store: RatingStore,
        market_quote: Optional[MarketQuote] = None,
        tournament: bool = False,
    ) -> PredictionRow:
        """
        Predict one fixture.

        Args:
            league: League the fixture belongs to
            fixture: The game to predict
            rating_store: Fully built ratings for the league
            market_quote: Optional moneylines to blend with
            tournament: Neutral-court tournament context with the wider clamp band

        Returns:
            A new PredictionRow
        """
        cfg = self.league_config(league)
        if fixture.league != cfg.league:
            raise EngineInputError(
                f"Fixture {fixture.game_id} belongs to {fixture.league!r}, not {cfg.league!r}"
            )

        predictor = EloPredictor(rating_store, cfg.home_advantage)
        raw_home = predictor.predict(
            cfg.league, fixture.home_team_key, fixture.away_team_key, fixture.neutral_site, tournament
        )
        blended = ProbabilityBlender(cfg).blend(raw_home, market_quote, tournament)
        p_home = blended.home_prob

        if p_home == 0.5 or abs(p_home - 0.5) < cfg.min_edge_for_pick:
            pick_side, pick_note = None, "pass_toss_up"
            win_prob = max(p_home, 1.0 - p_home)
        elif p_home > 0.5:
            pick_side, pick_note, win_prob = "home", "ok", p_home
        else:
            pick_side, pick_note, win_prob = "away", "ok", 1.0 - p_home

        edge = win_prob - 0.5
        confidence, tier = self.classifier.classify(win_prob, edge)
        if pick_side is None:
            tier = Tier.PASS

        return PredictionRow(
            game_id=fixture.game_id,
            date=fixture.date,
            league=cfg.league,
            home_team_key=fixture.home_team_key,
            away_team_key=fixture.away_team_key,
            pick_side=pick_side,
            win_prob=win_prob,
            edge=edge,
            confidence=confidence,
            tier=tier,
            neutral_site=fixture.neutral_site or tournament,
            raw_home_prob=raw_home,
            home_prob=p_home,
            market_home_prob=blended.market_home_prob,
            pick_note=pick_note,
        )

    def predict_slate(
        self,
        league: str,
        fixtures: Iterable[Fixture],
        rating_store: RatingStore,
        market_quotes: Optional[Dict[str, MarketQuote]] = None,
        tournament: bool = False,
    ) -> List[PredictionRow]:
        """Predict every fixture of the league; quotes are keyed by game id."""
        cfg = self.league_config(league)
        quotes = market_quotes or {}
        rows = []
        for fixture in fixtures:
            if fixture.league != cfg.league:
                logger.debug("Skipping fixture %s from league %s", fixture.game_id, fixture.league)
                continue
            rows.append(
                self.predict_fixture(cfg.league, fixture, rating_store, quotes.get(fixture.game_id), tournament)
            )
        return rows

    def detect_upsets(
        self,
        league: str,
        prediction_rows: Iterable[PredictionRow],
        rating_store: RatingStore,
        mode: str = "watch",
        min_win: float = 0.30,
        limit: int = 20,
        sort_key: str = "score",
        tournament: bool = False,
    ) -> List[UpsetCandidate]:
        cfg = self.league_config(league)
        params = UpsetScanParams(mode=mode, min_win=min_win, limit=limit, sort_key=sort_key)
        detector = UpsetDetector(EloPredictor(rating_store, cfg.home_advantage))
        return detector.detect(cfg.league, prediction_rows, params, tournament)

    # ------------------------------------------------------------------ #
    # Calibration                                                          #
    # ------------------------------------------------------------------ #

    def record_outcome(self, league: str, prediction_row: PredictionRow, actual_winner_team_key: str) -> bool:
        """
        Feed a resolved prediction to the calibration tracker.

        Rows from another league, rows without a pick, unknown winners and
        games already recorded are ignored.

        Returns:
            True when the outcome was recorded
        """
        cfg = self.league_config(league)
        if prediction_row.league != cfg.league:
            logger.warning(
                "Not recording %s: row belongs to %s, not %s",
                prediction_row.game_id,
                prediction_row.league,
                cfg.league,
            )
            return False

        picked = prediction_row.picked_team_key
        if picked is None:
            logger.info("Not recording %s: engine passed on this game", prediction_row.game_id)
            return False

        winner = str(actual_winner_team_key or "")
        if winner not in (prediction_row.home_team_key, prediction_row.away_team_key):
            logger.warning(
                "Not recording %s: winner %r is neither %s nor %s",
                prediction_row.game_id,
                actual_winner_team_key,
                prediction_row.home_team_key,
                prediction_row.away_team_key,
            )
            return False

        key = (cfg.league, prediction_row.game_id)
        with self._resolved_lock:
            if key in self._resolved:
                logger.warning("Outcome for %s/%s already recorded", *key)
                return False
            self._resolved.add(key)

        self.tracker.record(cfg.league, prediction_row.win_prob, winner == picked)
        return True

    def get_calibration_summary(self, league: str) -> dict:
        return self.tracker.summary(self.league_config(league).league)

    def get_calibration_bins(self, league: str) -> List[dict]:
        return self.tracker.bins(self.league_config(league).league)
