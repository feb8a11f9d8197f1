"""Engine facade."""

from .engine import PredictionEngine

__all__ = ["PredictionEngine"]
