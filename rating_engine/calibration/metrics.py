"""
Proper scoring and calibration metrics for resolved predictions.

Brier score and log loss are proper scoring rules (lower is better);
ECE/MCE summarize how far stated probabilities sit from observed hit rates.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

N_BINS = 10
_EPS = 1e-7


@dataclass
class CalibrationMetrics:
    """Metrics for evaluating probability calibration."""

    n: int
    brier_score: float  # Mean squared error of probabilities
    log_loss: float  # Cross-entropy
    expected_calibration_error: float  # ECE
    max_calibration_error: float  # MCE
    hit_rate: float  # Fraction of picks that won

    def __str__(self) -> str:
        return (
            f"Calibration Metrics (n={self.n}):\n"
            f"  Brier Score: {self.brier_score:.4f}\n"
            f"  Log Loss: {self.log_loss:.4f}\n"
            f"  ECE: {self.expected_calibration_error:.4f}\n"
            f"  MCE: {self.max_calibration_error:.4f}\n"
            f"  Hit Rate: {self.hit_rate:.4f}"
        )

    def to_dict(self) -> dict:
        return {
            "n": self.n,
            "brier_score": self.brier_score,
            "log_loss": self.log_loss,
            "ece": self.expected_calibration_error,
            "mce": self.max_calibration_error,
            "hit_rate": self.hit_rate,
        }


def bin_indices(predictions: np.ndarray, n_bins: int = N_BINS) -> np.ndarray:
    """Equal-width bin index per probability; 1.0 lands in the top bin."""
    return np.clip(np.floor(predictions * n_bins).astype(int), 0, n_bins - 1)


def calculate_calibration_metrics(
    predictions: Sequence[float],
    outcomes: Sequence[float],
    n_bins: int = N_BINS,
) -> Optional[CalibrationMetrics]:
    """
    Calculate calibration metrics.

    Args:
        predictions: Predicted probabilities of the picked side
        outcomes: 1 when the picked side won, 0 otherwise
        n_bins: Number of equal-width bins over [0, 1]

    Returns:
        CalibrationMetrics, or None when there are no observations
    """
    predictions = np.asarray(predictions, dtype=float)
    outcomes = np.asarray(outcomes, dtype=float)
    n = len(predictions)
    if n == 0:
        return None

    brier = float(np.mean((predictions - outcomes) ** 2))

    clipped = np.clip(predictions, _EPS, 1 - _EPS)
    log_loss = float(-np.mean(outcomes * np.log(clipped) + (1 - outcomes) * np.log(1 - clipped)))

    idx = bin_indices(predictions, n_bins)
    ece = 0.0
    mce = 0.0
    for i in range(n_bins):
        mask = idx == i
        n_k = int(np.sum(mask))
        if n_k == 0:
            continue
        gap = abs(float(np.mean(outcomes[mask])) - float(np.mean(predictions[mask])))
        ece += (n_k / n) * gap
        mce = max(mce, gap)

    return CalibrationMetrics(
        n=n,
        brier_score=brier,
        log_loss=log_loss,
        expected_calibration_error=ece,
        max_calibration_error=mce,
        hit_rate=float(np.mean(outcomes)),
    )


def metrics_from_counts(
    brier_sum: float,
    log_loss_sum: float,
    bin_counts: Sequence[int],
    bin_correct: Sequence[int],
    bin_prob_sums: Sequence[float],
) -> Optional[CalibrationMetrics]:
    """
    Same metrics as ``calculate_calibration_metrics`` from running totals.

    Args:
        brier_sum: Sum of squared errors over all observations
        log_loss_sum: Sum of per-observation cross-entropy
        bin_counts: Observations per bin
        bin_correct: Hits per bin
        bin_prob_sums: Sum of predicted probabilities per bin

    Returns:
        CalibrationMetrics, or None when there are no observations
    """
    counts = np.asarray(bin_counts, dtype=float)
    n = int(counts.sum())
    if n == 0:
        return None

    filled = counts > 0
    hits = np.asarray(bin_correct, dtype=float)[filled]
    probs = np.asarray(bin_prob_sums, dtype=float)[filled]
    sizes = counts[filled]
    gaps = np.abs(hits / sizes - probs / sizes)

    return CalibrationMetrics(
        n=n,
        brier_score=brier_sum / n,
        log_loss=log_loss_sum / n,
        expected_calibration_error=float(np.sum(sizes / n * gaps)),
        max_calibration_error=float(gaps.max()),
        hit_rate=float(hits.sum() / n),
    )
