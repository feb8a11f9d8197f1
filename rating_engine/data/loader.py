"""Load and save engine inputs and outputs (JSON, or CSV for game tables)."""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from ..config import EngineInputError
from ..models.game import Fixture, GameResult, MarketQuote
from ..models.prediction import PredictionRow
from ..ratings.store import RatingStore
from .normalize import normalize_league, normalize_team_key
from .validators import (
    validate_fixtures_payload,
    validate_games_payload,
    validate_odds_payload,
    validate_outcomes_payload,
    validate_prediction_rows_payload,
)

logger = logging.getLogger(__name__)

_MAX_LOGGED_ERRORS = 20
_TRUE = {"1", "true", "yes", "y", "t", "final"}


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE
    if value is None:
        return False
    try:
        if pd.isna(value):
            return False
    except (TypeError, ValueError):
        pass
    return bool(value)


def _read_csv_records(path: Path) -> List[dict]:
    frame = pd.read_csv(path)
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.to_dict(orient="records")


def _load_records(file_path, key: str, validator: Callable[[Dict], List[str]]) -> List[dict]:
    path = Path(file_path)
    if path.suffix.lower() == ".csv":
        payload = {key: _read_csv_records(path)}
    else:
        with open(path, "r") as f:
            payload = json.load(f)
        if isinstance(payload, list):
            payload = {key: payload}

    errors = validator(payload)
    structural = [e for e in errors if not e.startswith(f"{key}[")]
    if structural:
        raise EngineInputError(f"{path}: {structural[0]}")
    for error in errors[:_MAX_LOGGED_ERRORS]:
        logger.warning("%s: %s", path, error)
    if len(errors) > _MAX_LOGGED_ERRORS:
        logger.warning("%s: %d more invalid records", path, len(errors) - _MAX_LOGGED_ERRORS)
    return payload[key]


def _parse_all(records: Iterable[dict], parse: Callable[[dict], object], what: str) -> list:
    parsed = []
    for idx, record in enumerate(records):
        try:
            parsed.append(parse(record))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Dropping %s[%d]: %s", what, idx, exc)
    return parsed


class DataLoader:
    """Reads normalized engine inputs and writes engine outputs."""

    @staticmethod
    def game_from_record(record: dict, league: Optional[str] = None) -> GameResult:
        league = normalize_league(record.get("league") or league)
        home = normalize_team_key(record["home_team_key"], league)
        away = normalize_team_key(record["away_team_key"], league)
        if not home or not away:
            raise ValueError("empty team key")
        return GameResult(
            game_id=str(record["game_id"]),
            league=league,
            date=record.get("date") or "",
            home_team_key=home,
            away_team_key=away,
            home_score=record.get("home_score"),
            away_score=record.get("away_score"),
            completed=_to_bool(record.get("completed")),
        )

    @staticmethod
    def fixture_from_record(record: dict, league: Optional[str] = None) -> Fixture:
        league = normalize_league(record.get("league") or league)
        home = normalize_team_key(record["home_team_key"], league)
        away = normalize_team_key(record["away_team_key"], league)
        if not home or not away:
            raise ValueError("empty team key")
        return Fixture(
            game_id=str(record["game_id"]),
            league=league,
            date=record.get("date") or "",
            home_team_key=home,
            away_team_key=away,
            neutral_site=_to_bool(record.get("neutral_site")),
        )

    @staticmethod
    def load_game_results(file_path: str, league: Optional[str] = None) -> List[GameResult]:
        """
        Load game results from a JSON (``{"games": [...]}``) or CSV file.

        Args:
            file_path: Path to the file
            league: League to assume for records without one

        Returns:
            List of GameResult objects; malformed records are dropped
        """
        records = _load_records(file_path, "games", validate_games_payload)
        return _parse_all(records, lambda r: DataLoader.game_from_record(r, league), "games")

    @staticmethod
    def load_fixtures(file_path: str, league: Optional[str] = None) -> List[Fixture]:
        records = _load_records(file_path, "fixtures", validate_fixtures_payload)
        return _parse_all(records, lambda r: DataLoader.fixture_from_record(r, league), "fixtures")

    @staticmethod
    def load_market_quotes(file_path: str) -> Dict[str, MarketQuote]:
        """Load ``{"odds": [{game_id, home_moneyline, away_moneyline}]}`` keyed by game id."""
        records = _load_records(file_path, "odds", validate_odds_payload)
        quotes = {}
        for record in records:
            if not isinstance(record, dict) or record.get("game_id") in (None, ""):
                continue
            quotes[str(record["game_id"])] = MarketQuote.from_dict(record)
        return quotes

    @staticmethod
    def load_prediction_rows(file_path: str) -> List[PredictionRow]:
        records = _load_records(file_path, "rows", validate_prediction_rows_payload)
        return _parse_all(records, PredictionRow.from_dict, "rows")

    @staticmethod
    def load_outcomes(file_path: str) -> List[Tuple[str, str]]:
        """Load ``{"outcomes": [{game_id, winner_team_key}]}`` as (game_id, winner) pairs."""
        records = _load_records(file_path, "outcomes", validate_outcomes_payload)
        return _parse_all(
            records,
            lambda r: (str(r["game_id"]), normalize_team_key(r["winner_team_key"])),
            "outcomes",
        )

    @staticmethod
    def save_prediction_rows(rows: Iterable[PredictionRow], file_path: str) -> None:
        with open(file_path, "w") as f:
            json.dump({"rows": [row.to_dict() for row in rows]}, f, indent=2)

    @staticmethod
    def save_ratings(store: RatingStore, file_path: str) -> None:
        with open(file_path, "w") as f:
            json.dump(store.to_dict(), f, indent=2)

    @staticmethod
    def load_ratings(file_path: str) -> RatingStore:
        with open(file_path, "r") as f:
            return RatingStore.from_dict(json.load(f))
