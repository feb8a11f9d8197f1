"""Structural checks for engine input files."""

from __future__ import annotations

from typing import Dict, List


def _rows(payload, key: str) -> List[str]:
    if not isinstance(payload, dict):
        return [f"payload must be an object with a '{key}' list"]
    rows = payload.get(key)
    if not isinstance(rows, list):
        return [f"payload must include a '{key}' list"]
    return []


def _check_rows(payload: Dict, key: str, required: List[str]) -> List[str]:
    errors = _rows(payload, key)
    if errors:
        return errors
    for idx, row in enumerate(payload[key]):
        if not isinstance(row, dict):
            errors.append(f"{key}[{idx}] must be an object")
            continue
        missing = [k for k in required if row.get(k) in (None, "")]
        if missing:
            errors.append(f"{key}[{idx}] missing fields: {', '.join(missing)}")
    return errors


def validate_games_payload(payload: Dict) -> List[str]:
    return _check_rows(payload, "games", ["game_id", "home_team_key", "away_team_key"])


def validate_fixtures_payload(payload: Dict) -> List[str]:
    return _check_rows(payload, "fixtures", ["game_id", "home_team_key", "away_team_key"])


def validate_odds_payload(payload: Dict) -> List[str]:
    return _check_rows(payload, "odds", ["game_id"])


def validate_prediction_rows_payload(payload: Dict) -> List[str]:
    return _check_rows(
        payload,
        "rows",
        ["game_id", "league", "home_team_key", "away_team_key", "win_prob", "edge", "confidence", "tier"],
    )


def validate_outcomes_payload(payload: Dict) -> List[str]:
    return _check_rows(payload, "outcomes", ["game_id", "winner_team_key"])
