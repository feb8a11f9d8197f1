"""Raw prediction, probability blending and confidence classification."""

from .base import BasePredictor
from .blender import (
    BlendResult,
    ProbabilityBlender,
    blend_with_market,
    clamp,
    implied_prob,
    market_home_prob,
    shrink,
)
from .confidence import ConfidenceClassifier, confidence_proxy, tier_for
from .elo import EloPredictor
from .explain import explain

__all__ = [
    "BasePredictor",
    "BlendResult",
    "ConfidenceClassifier",
    "EloPredictor",
    "ProbabilityBlender",
    "blend_with_market",
    "clamp",
    "confidence_proxy",
    "explain",
    "implied_prob",
    "market_home_prob",
    "shrink",
    "tier_for",
]
