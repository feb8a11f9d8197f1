"""
Probability post-processing: prior shrinkage, market blend and safety clamp.

The pipeline order is fixed: raw model probability -> shrink toward prior ->
blend with the market (when a usable quote exists) -> clamp to the band.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..config import LeagueConfig
from ..models.game import MarketQuote

logger = logging.getLogger(__name__)

_EPS = 0.0001


def clamp(x, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp to [lo, hi]; non-numeric or non-finite input collapses to ``lo``."""
    try:
        n = float(x)
    except (TypeError, ValueError):
        return lo
    if not math.isfinite(n):
        return lo
    return min(hi, max(lo, n))


def implied_prob(moneyline) -> Optional[float]:
    """
    Implied win probability of an American moneyline.

    Returns None for zero, non-numeric or non-finite odds.
    """
    try:
        ml = float(moneyline)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(ml) or ml == 0:
        return None
    if ml < 0:
        return abs(ml) / (abs(ml) + 100.0)
    return 100.0 / (ml + 100.0)


def market_home_prob(quote: Optional[MarketQuote]) -> Optional[float]:
    """
    Vig-free home win probability from a two-sided quote.

    Both sides are converted and normalized to sum to one. A quote with
    either side unusable counts as no market at all.
    """
    if quote is None:
        return None
    p_home = implied_prob(quote.home_moneyline)
    p_away = implied_prob(quote.away_moneyline)
    if p_home is None or p_away is None:
        logger.warning(
            "Ignoring unusable market quote (home=%r, away=%r)",
            quote.home_moneyline,
            quote.away_moneyline,
        )
        return None
    return p_home / (p_home + p_away)


def shrink(
    p_model: float,
    p_prior: float = 0.5,
    prior_strength: float = 20.0,
    model_strength: float = 20.0,
) -> float:
    """
    Pseudo-count blend of the model probability toward a prior.

    Args:
        p_model: Model probability
        p_prior: Prior probability (coin flip by default)
        prior_strength: Pseudo-count weight of the prior
        model_strength: Pseudo-count weight of the model

    Returns:
        Posterior probability
    """
    total = prior_strength + model_strength
    if total <= 0:
        return p_model
    return (p_prior * prior_strength + p_model * model_strength) / total


def blend_with_market(p_model: float, p_market: Optional[float], market_weight: float = 0.55) -> float:
    """Linear blend with the market probability; identity when there is no market."""
    if p_market is None:
        return p_model
    w = clamp(market_weight, 0.0, 1.0)
    return p_model * (1.0 - w) + p_market * w


@dataclass(frozen=True)
class BlendResult:
    raw_home_prob: float
    shrunk_home_prob: float
    market_home_prob: Optional[float]
    home_prob: float


class ProbabilityBlender:
    """Applies a league's shrink/market/clamp settings to raw probabilities."""

    def __init__(self, config: LeagueConfig):
        self.config = config

    def blend(
        self,
        raw_home_prob: float,
        quote: Optional[MarketQuote] = None,
        tournament: bool = False,
    ) -> BlendResult:
        cfg = self.config
        p_raw = clamp(raw_home_prob, _EPS, 1.0 - _EPS)
        p_shrunk = shrink(p_raw, 0.5, cfg.prior_strength, cfg.model_strength)

        p_market = market_home_prob(quote)
        p_blend = blend_with_market(p_shrunk, p_market, cfg.market_weight)

        floor, ceil = cfg.clamp_band(tournament)
        return BlendResult(
            raw_home_prob=raw_home_prob,
            shrunk_home_prob=p_shrunk,
            market_home_prob=p_market,
            home_prob=clamp(p_blend, floor, ceil),
        )
