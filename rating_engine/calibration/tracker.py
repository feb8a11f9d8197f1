"""Per-league accumulation of resolved predictions."""

import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..predictors.blender import clamp
from .metrics import N_BINS, CalibrationMetrics, metrics_from_counts

logger = logging.getLogger(__name__)

_EPS = 0.0001


@dataclass
class CalibrationBin:
    """Append-only counters for one probability bucket."""

    lo: float
    hi: float
    n: int = 0
    correct: int = 0
    prob_sum: float = 0.0

    @property
    def midpoint(self) -> float:
        return (self.lo + self.hi) / 2.0

    @property
    def accuracy(self) -> Optional[float]:
        return self.correct / self.n if self.n else None

    @property
    def mean_prob(self) -> Optional[float]:
        return self.prob_sum / self.n if self.n else None

    def to_dict(self) -> dict:
        return {
            "lo": self.lo,
            "hi": self.hi,
            "n": self.n,
            "correct": self.correct,
            "accuracy": self.accuracy,
            "mean_prob": self.mean_prob,
        }


def make_bins(n_bins: int = N_BINS) -> List[CalibrationBin]:
    return [CalibrationBin(lo=i / n_bins, hi=(i + 1) / n_bins) for i in range(n_bins)]


@dataclass
class _LeagueState:
    bins: List[CalibrationBin] = field(default_factory=make_bins)
    n: int = 0
    correct: int = 0
    brier_sum: float = 0.0
    log_loss_sum: float = 0.0
    updated_at: Optional[str] = None


def _empty_summary(league: str) -> dict:
    return {"league": league, "n": 0, "accuracy": None, "ece": None, "updated_at": None}


class CalibrationTracker:
    """
    Records resolved predictions and reports hit rate and calibration error.

    Every league keeps fixed-size counters only. ``record`` is safe to call
    from concurrent handlers; each call is one atomic update. Guarding
    against recording the same game twice is the caller's job.
    """

    def __init__(self, n_bins: int = N_BINS):
        self.n_bins = n_bins
        self._states: Dict[str, _LeagueState] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(league: str) -> str:
        return str(league).strip().lower()

    def record(self, league: str, predicted_prob: float, won: bool) -> None:
        """Add one resolved picked-side probability."""
        p = clamp(predicted_prob, _EPS, 1.0 - _EPS)
        hit = 1 if won else 0
        idx = min(self.n_bins - 1, max(0, int(p * self.n_bins)))
        key = self._key(league)

        with self._lock:
            state = self._states.get(key)
            if state is None:
                state = self._states[key] = _LeagueState(bins=make_bins(self.n_bins))
            state.n += 1
            state.correct += hit
            bucket = state.bins[idx]
            bucket.n += 1
            bucket.correct += hit
            bucket.prob_sum += p
            state.brier_sum += (p - hit) ** 2
            state.log_loss_sum -= math.log(p) if hit else math.log(1.0 - p)
            state.updated_at = datetime.now(timezone.utc).isoformat()

    def summary(self, league: str) -> dict:
        """
        ``{league, n, accuracy, ece, updated_at}``.

        ECE weights each non-empty bin by its share of picks and compares the
        bin's hit rate to the bin midpoint. accuracy and ece are None until
        something has been recorded.
        """
        key = self._key(league)
        with self._lock:
            state = self._states.get(key)
            if state is None or not state.n:
                return _empty_summary(key)

            ece = 0.0
            for bucket in state.bins:
                if not bucket.n:
                    continue
                ece += (bucket.n / state.n) * abs(bucket.accuracy - bucket.midpoint)

            return {
                "league": key,
                "n": state.n,
                "accuracy": state.correct / state.n,
                "ece": ece,
                "updated_at": state.updated_at,
            }

    def bins(self, league: str) -> List[dict]:
        with self._lock:
            state = self._states.get(self._key(league))
            bins = state.bins if state is not None else make_bins(self.n_bins)
            return [b.to_dict() for b in bins]

    def metrics(self, league: str) -> Optional[CalibrationMetrics]:
        """
        Brier score, log loss and calibration errors for the league.

        Unlike ``summary``, ECE and MCE here compare each bin's hit rate to
        the mean probability of the picks that landed in it.
        """
        with self._lock:
            state = self._states.get(self._key(league))
            if state is None:
                return None
            return metrics_from_counts(
                state.brier_sum,
                state.log_loss_sum,
                [b.n for b in state.bins],
                [b.correct for b in state.bins],
                [b.prob_sum for b in state.bins],
            )

    def leagues(self) -> List[str]:
        with self._lock:
            return sorted(self._states)
