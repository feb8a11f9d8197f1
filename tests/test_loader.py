"""Tests for input loading, normalization and the command line interface."""

import json

import pytest

from rating_engine.config import EngineInputError
from rating_engine.data.loader import DataLoader
from rating_engine.data.normalize import normalize_team_key
from rating_engine.data.validators import validate_games_payload, validate_outcomes_payload
from rating_engine.main import main
from rating_engine.models.prediction import Tier
from rating_engine.pipeline.engine import PredictionEngine


GAMES = {
    "games": [
        {"game_id": "g1", "league": "nba", "date": "2025-01-01", "home_team_key": "BOS", "away_team_key": "DET",
         "home_score": 112, "away_score": 100, "completed": True},
        {"game_id": "g2", "league": "nba", "date": "2025-01-02", "home_team_key": "DET", "away_team_key": "MIA",
         "home_score": 99, "away_score": 104, "completed": True},
        {"game_id": "g3", "league": "nba", "date": "2025-01-03", "home_team_key": "MIA", "away_team_key": "BOS",
         "home_score": None, "away_score": None, "completed": False},
    ]
}

FIXTURES = {
    "fixtures": [
        {"game_id": "f1", "league": "nba", "date": "2025-01-10", "home_team_key": "BOS", "away_team_key": "MIA"},
        {"game_id": "f2", "league": "nba", "date": "2025-01-10", "home_team_key": "DET", "away_team_key": "BOS",
         "neutral_site": True},
    ]
}


def _write_json(path, payload):
    path.write_text(json.dumps(payload))
    return str(path)


@pytest.fixture
def games_path(tmp_path):
    """Write a small NBA game history."""
    return _write_json(tmp_path / "games.json", GAMES)


@pytest.fixture
def fixtures_path(tmp_path):
    """Write a two-game NBA slate."""
    return _write_json(tmp_path / "fixtures.json", FIXTURES)


def test_normalize_team_key():
    """Test team key normalization across provider spellings."""
    assert normalize_team_key("BOS") == "bos"
    assert normalize_team_key("Texas A&amp;M") == "texas_a_m"
    assert normalize_team_key("San José State") == "san_jose_state"
    assert normalize_team_key("  St. John's  ") == "st_john_s"
    assert normalize_team_key(None) == ""


def test_league_prefixed_ids_share_the_plain_key():
    """Test that league-prefixed provider ids collapse onto the bare team key."""
    assert normalize_team_key("nba-BOS") == "bos"
    assert normalize_team_key("Nhl:TOR") == "tor"
    assert normalize_team_key("ncaam_duke") == "duke"
    assert normalize_team_key("nba-bos", league="NBA") == "bos"
    # Only the given league's prefix is dropped
    assert normalize_team_key("nba-bos", league="nhl") == "nba_bos"
    assert normalize_team_key("nba") == "nba"


def test_prefixed_and_plain_records_rate_the_same_team():
    """Test that one team under two provider spellings gets a single rating."""
    record = {"game_id": "g1", "league": "NBA", "date": "2025-01-01", "home_team_key": "nba-BOS",
              "away_team_key": "DET", "home_score": 110, "away_score": 100, "completed": True}
    game = DataLoader.game_from_record(record)
    fixture = DataLoader.fixture_from_record({"game_id": "f1", "date": "2025-01-05", "home_team_key": "DET",
                                              "away_team_key": "BOS"}, league="nba")

    assert game.league == "nba"
    assert game.home_team_key == "bos"
    assert fixture.away_team_key == game.home_team_key


def test_validators_report_indexed_errors():
    """Test validator error messages."""
    errors = validate_games_payload({"games": [{"game_id": "g1"}, "nope"]})
    assert errors[0] == "games[0] missing fields: home_team_key, away_team_key"
    assert errors[1] == "games[1] must be an object"
    assert validate_outcomes_payload([]) == ["payload must be an object with a 'outcomes' list"]


def test_load_game_results_json(games_path):
    """Test loading games from JSON."""
    games = DataLoader.load_game_results(games_path)

    assert [g.game_id for g in games] == ["g1", "g2", "g3"]
    assert games[0].home_team_key == "bos"
    assert games[0].is_scoreable
    assert not games[2].is_scoreable


def test_load_game_results_csv(tmp_path):
    """Test loading games from CSV."""
    path = tmp_path / "games.csv"
    path.write_text(
        "game_id,date,home_team_key,away_team_key,home_score,away_score,completed\n"
        "g1,2025-01-01,BOS,DET,112,100,true\n"
        "g2,2025-01-02,DET,MIA,,,false\n"
    )
    games = DataLoader.load_game_results(str(path), league="nba")

    assert len(games) == 2
    assert games[0].league == "nba"
    assert games[0].home_score == 112
    assert games[0].completed is True
    assert games[1].home_score is None
    assert not games[1].is_scoreable


def test_malformed_records_are_dropped(tmp_path):
    """Test that bad records are dropped without failing the file."""
    payload = {
        "games": [
            GAMES["games"][0],
            {"game_id": "bad1", "home_team_key": "!!!", "away_team_key": "DET"},
            {"game_id": "bad2", "away_team_key": "DET"},
        ]
    }
    games = DataLoader.load_game_results(_write_json(tmp_path / "games.json", payload))
    assert [g.game_id for g in games] == ["g1"]


def test_structural_errors_raise(tmp_path):
    """Test that a file without a games list is rejected."""
    with pytest.raises(EngineInputError):
        DataLoader.load_game_results(_write_json(tmp_path / "games.json", {"rows": []}))


def test_bare_list_payload_is_accepted(tmp_path):
    """Test that a bare JSON list is read as the games list."""
    games = DataLoader.load_game_results(_write_json(tmp_path / "games.json", GAMES["games"]))
    assert len(games) == 3


def test_market_quotes_and_outcomes(tmp_path):
    """Test loading odds and outcomes."""
    odds = DataLoader.load_market_quotes(
        _write_json(tmp_path / "odds.json", {"odds": [{"game_id": "f1", "home_moneyline": -150, "away_moneyline": 130}]})
    )
    assert odds["f1"].home_moneyline == -150

    outcomes = DataLoader.load_outcomes(
        _write_json(tmp_path / "outcomes.json", {"outcomes": [{"game_id": "f1", "winner_team_key": "BOS"}]})
    )
    assert outcomes == [("f1", "bos")]


def test_ratings_round_trip(tmp_path, games_path):
    """Test saving and loading ratings."""
    store = PredictionEngine().build_ratings("nba", DataLoader.load_game_results(games_path))
    path = str(tmp_path / "ratings.json")
    DataLoader.save_ratings(store, path)
    assert DataLoader.load_ratings(path).to_dict() == store.to_dict()


def test_cli_ratings(games_path, capsys):
    """Test the ratings command."""
    assert main(["ratings", "--league", "nba", "--games", games_path, "--top", "2"]) == 0
    out = capsys.readouterr().out
    assert "NBA ELO RATINGS (3 teams)" in out
    assert "  1. mia" in out


def test_cli_predict_then_calibrate(tmp_path, games_path, fixtures_path, capsys):
    """Test predicting a slate and then scoring it."""
    predictions = str(tmp_path / "predictions.json")
    assert main(["predict", "-l", "nba", "-g", games_path, "-f", fixtures_path, "-o", predictions]) == 0

    rows = DataLoader.load_prediction_rows(predictions)
    assert [r.game_id for r in rows] == ["f1", "f2"]
    assert all(isinstance(r.tier, Tier) for r in rows)
    assert rows[1].neutral_site is True

    outcomes = _write_json(
        tmp_path / "outcomes.json",
        {"outcomes": [{"game_id": r.game_id, "winner_team_key": r.home_team_key} for r in rows]},
    )
    capsys.readouterr()
    assert main(["calibrate", "-l", "nba", "-p", predictions, "--outcomes", outcomes]) == 0
    out = capsys.readouterr().out
    assert "Recorded 2 resolved picks" in out
    assert "Accuracy:" in out


def test_cli_upsets(tmp_path, games_path, fixtures_path, capsys):
    """Test the upsets command."""
    predictions = str(tmp_path / "predictions.json")
    assert main(["predict", "-l", "nba", "-g", games_path, "-f", fixtures_path, "-o", predictions]) == 0
    output = str(tmp_path / "upsets.json")
    assert main(
        ["upsets", "-l", "nba", "-g", games_path, "-p", predictions, "--min-win", "0.05", "-o", output]
    ) == 0

    with open(output) as f:
        candidates = json.load(f)["candidates"]
    assert {c["game_id"] for c in candidates} == {"f1", "f2"}


def test_cli_reports_bad_input(tmp_path, capsys):
    """Test that a missing input file is reported."""
    missing = str(tmp_path / "nope.json")
    assert main(["ratings", "--league", "nba", "--games", missing]) == 1
    assert "Error:" in capsys.readouterr().out


def test_cli_unknown_league(games_path, capsys):
    """Test that an unknown league is reported."""
    assert main(["ratings", "--league", "mlb", "--games", games_path]) == 1
    assert "Unknown league" in capsys.readouterr().out
