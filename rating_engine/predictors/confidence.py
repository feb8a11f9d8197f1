"""Confidence proxy and the unified tier table."""

import math
from typing import Sequence, Tuple

from ..models.prediction import Tier
from .blender import clamp

# Ordered, first match wins
TIER_TABLE: Sequence[Tuple[float, Tier]] = (
    (0.80, Tier.ELITE),
    (0.60, Tier.STRONG),
    (0.45, Tier.LEAN),
)

DISTANCE_WEIGHT = 0.55
EDGE_WEIGHT = 0.45
EDGE_CAP = 0.5
EDGE_SCALE = 0.2


def _finite(x) -> float:
    try:
        n = float(x)
    except (TypeError, ValueError):
        return 0.0
    return n if math.isfinite(n) else 0.0


def confidence_proxy(win_prob: float, edge: float) -> float:
    """
    Display confidence in [0, 1]; a stable proxy, not a calibrated quantity.

    Weighted sum of distance from a coin flip and (capped) edge magnitude.
    """
    p = clamp(win_prob, 0.0, 1.0)
    dist = abs(p - 0.5)
    mag = min(EDGE_CAP, abs(_finite(edge)))
    raw = DISTANCE_WEIGHT * (dist / 0.5) + EDGE_WEIGHT * (mag / EDGE_SCALE)
    return clamp(raw, 0.0, 1.0)


def tier_for(confidence: float, table: Sequence[Tuple[float, Tier]] = TIER_TABLE) -> Tier:
    c = clamp(confidence, 0.0, 1.0)
    for threshold, tier in table:
        if c >= threshold:
            return tier
    return Tier.PASS


class ConfidenceClassifier:
    """Maps (win_prob, edge) to a confidence value and tier."""

    def __init__(self, table: Sequence[Tuple[float, Tier]] = TIER_TABLE):
        self.table = tuple(sorted(table, key=lambda row: row[0], reverse=True))

    def tier(self, confidence: float) -> Tier:
        return tier_for(confidence, self.table)

    def classify(self, win_prob: float, edge: float) -> Tuple[float, Tier]:
        confidence = confidence_proxy(win_prob, edge)
        return confidence, self.tier(confidence)
