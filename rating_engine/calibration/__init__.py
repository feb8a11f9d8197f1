"""Calibration tracking of resolved predictions."""

from .metrics import CalibrationMetrics, calculate_calibration_metrics, metrics_from_counts
from .tracker import CalibrationBin, CalibrationTracker

__all__ = [
    "CalibrationBin",
    "CalibrationMetrics",
    "CalibrationTracker",
    "calculate_calibration_metrics",
    "metrics_from_counts",
]
