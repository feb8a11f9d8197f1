"""
Upset detection over a slate of predictions.

The favorite/underdog split comes from the raw two-sided Elo probability,
recomputed from the rating store, never from the blended picked-side number.
The underdog's win equity is then read from the engine's own prediction.

Candidate score (higher = more interesting):

    score = UNDERDOG_WEIGHT * underdog_win_prob
            - GAP_WEIGHT * min(|rating_gap| / GAP_NORM, 1)

so a live underdog in a close matchup ranks above the same equity across a
wide rating gap. With these constants the score equals the legacy
``equity * 100 - |gap| * 0.04`` ordering scaled by 1/100 for gaps up to
GAP_NORM.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..config import EngineInputError
from ..models.prediction import PredictionRow, UpsetCandidate
from ..predictors.blender import clamp
from ..predictors.elo import EloPredictor

logger = logging.getLogger(__name__)

MODES = ("watch", "strict")
SORT_KEYS = ("score", "win_prob", "closest")

UNDERDOG_WEIGHT = 1.0
GAP_WEIGHT = 0.16
GAP_NORM = 400.0

MIN_WIN_BOUNDS = (0.05, 0.95)
LIMIT_BOUNDS = (1, 50)


@dataclass
class UpsetScanParams:
    """Upset scan knobs; numeric values are clamped to the supported range."""

    mode: str = "watch"
    min_win: float = 0.30
    limit: int = 20
    sort_key: str = "score"

    def __post_init__(self):
        self.mode = str(self.mode or "watch").strip().lower()
        if self.mode not in MODES:
            raise EngineInputError(f"Invalid upset mode: {self.mode!r} (expected one of {MODES})")
        self.sort_key = str(self.sort_key or "score").strip().lower()
        if self.sort_key not in SORT_KEYS:
            raise EngineInputError(f"Invalid sort key: {self.sort_key!r} (expected one of {SORT_KEYS})")
        self.min_win = clamp(self.min_win, *MIN_WIN_BOUNDS)
        try:
            limit = int(self.limit)
        except (TypeError, ValueError):
            limit = 20
        self.limit = int(min(LIMIT_BOUNDS[1], max(LIMIT_BOUNDS[0], limit)))


def upset_score(underdog_win_prob: float, rating_gap: float) -> float:
    normalized_gap = min(abs(rating_gap) / GAP_NORM, 1.0)
    return UNDERDOG_WEIGHT * underdog_win_prob - GAP_WEIGHT * normalized_gap


def _sort(candidates: List[UpsetCandidate], sort_key: str) -> List[UpsetCandidate]:
    if sort_key == "win_prob":
        key = lambda c: (-c.underdog_win_prob, c.game_id)
    elif sort_key == "closest":
        key = lambda c: (c.signals["rating_gap"], c.game_id)
    else:
        key = lambda c: (-c.score, c.game_id)
    return sorted(candidates, key=key)


class UpsetDetector:
    """Scans prediction rows for underdogs with notable win equity."""

    def __init__(self, predictor: EloPredictor):
        self.predictor = predictor
        self.last_scan: Dict[str, int] = {}

    def _candidate(
        self,
        row: PredictionRow,
        params: UpsetScanParams,
        tournament: bool,
    ) -> Optional[UpsetCandidate]:
        favorite_side, favorite_raw = self.predictor.favorite(
            row.league, row.home_team_key, row.away_team_key, row.neutral_site, tournament
        )
        underdog_side = "away" if favorite_side == "home" else "home"
        picked_underdog = row.pick_side == underdog_side

        if picked_underdog:
            self.last_scan["strict_underdog_picks"] += 1
        if params.mode == "strict" and not picked_underdog:
            return None

        underdog_win_prob = row.win_prob if picked_underdog else 1.0 - row.win_prob
        if underdog_win_prob < params.min_win:
            return None

        gap = abs(
            self.predictor.rating_gap(
                row.league, row.home_team_key, row.away_team_key, row.neutral_site, tournament
            )
        )
        if favorite_side == "home":
            favorite_key, underdog_key = row.home_team_key, row.away_team_key
        else:
            favorite_key, underdog_key = row.away_team_key, row.home_team_key

        return UpsetCandidate(
            game_id=row.game_id,
            favorite_team_key=favorite_key,
            underdog_team_key=underdog_key,
            underdog_win_prob=underdog_win_prob,
            score=upset_score(underdog_win_prob, gap),
            signals={
                "rating_gap": gap,
                "favorite_side": favorite_side,
                "underdog_side": underdog_side,
                "raw_underdog_prob": 1.0 - favorite_raw,
                "model_picked_underdog": picked_underdog,
                "mode": params.mode,
            },
        )

    def detect(
        self,
        league: str,
        rows: Iterable[PredictionRow],
        params: Optional[UpsetScanParams] = None,
        tournament: bool = False,
    ) -> List[UpsetCandidate]:
        """
        Find upset candidates in a slate.

        Args:
            league: League whose rows are scanned (other rows are ignored)
            rows: Prediction rows for the slate
            params: Mode, threshold, limit and output ordering
            tournament: Rows were produced in tournament (neutral court) mode

        Returns:
            Sorted candidates, truncated to ``params.limit``
        """
        params = params or UpsetScanParams()
        league = str(league).strip().lower()
        self.last_scan = {"slate_games": 0, "strict_underdog_picks": 0}

        candidates: List[UpsetCandidate] = []
        for row in rows:
            if row.league != league:
                logger.debug("Skipping %s: league %s != %s", row.game_id, row.league, league)
                continue
            self.last_scan["slate_games"] += 1
            if row.pick_side is None:
                logger.debug("Skipping %s: engine passed on this game", row.game_id)
                continue
            candidate = self._candidate(row, params, tournament)
            if candidate is not None:
                candidates.append(candidate)

        ranked = _sort(candidates, params.sort_key)[: params.limit]
        logger.info(
            "%s upsets (%s): %d of %d games, returning %d",
            league,
            params.mode,
            len(candidates),
            self.last_scan["slate_games"],
            len(ranked),
        )
        return ranked
