"""Slate-level analysis of predictions."""

from .upsets import UpsetDetector, UpsetScanParams, upset_score

__all__ = ["UpsetDetector", "UpsetScanParams", "upset_score"]
