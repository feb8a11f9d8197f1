"""Short human-readable rationale for a prediction row."""

from typing import Dict, List

from ..models.prediction import PredictionRow, Tier


def _pct(x: float, digits: int = 1) -> str:
    return f"{x * 100:.{digits}f}%"


def _headline(pick_side: str, edge: float) -> str:
    side = pick_side.upper()
    if edge >= 0.06:
        return f"{side} side value"
    if edge >= 0.02:
        return f"{side} lean"
    return f"{side} marginal value"


def explain(row: PredictionRow) -> Dict[str, object]:
    """Build a ``{"headline", "bullets"}`` panel for a row."""
    bullets: List[str] = [f"Matchup: {row.away_team_key} @ {row.home_team_key}"]

    if row.pick_side is None or row.tier is Tier.PASS:
        if row.pick_note == "pass_toss_up":
            bullets.append("Pass: edge not strong enough (toss-up).")
        else:
            bullets.append("Pass: confidence below the lean threshold.")
        bullets.append(f"Edge: {row.edge:+.3f}")
        return {"headline": "PASS (no bet)", "bullets": bullets}

    bullets.append(f"Pick: {row.pick_side.upper()} (edge {row.edge:+.3f})")
    bullets.append(f"Model win probability: {_pct(row.win_prob)}")
    bullets.append(f"Confidence tier: {row.tier.value} ({_pct(row.confidence, 0)} proxy)")
    if row.market_home_prob is not None:
        bullets.append(f"Market home probability: {_pct(row.market_home_prob)}")
    if row.neutral_site:
        bullets.append("Neutral site: no home advantage applied")
    return {"headline": _headline(row.pick_side, row.edge), "bullets": bullets}
