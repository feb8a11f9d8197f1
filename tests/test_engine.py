"""End-to-end tests for the prediction engine facade."""

import pytest

from rating_engine.config import EngineConfig, EngineInputError, LeagueConfig
from rating_engine.models.game import Fixture, GameResult, MarketQuote
from rating_engine.models.prediction import Tier
from rating_engine.pipeline.engine import PredictionEngine
from rating_engine.ratings.cache import RatingCache
from rating_engine.ratings.store import RatingStore


def _fixture(game_id="f1", home="bos", away="det", neutral_site=False, league="nba"):
    return Fixture(
        game_id=game_id,
        league=league,
        date="2025-02-01",
        home_team_key=home,
        away_team_key=away,
        neutral_site=neutral_site,
    )


@pytest.fixture
def engine():
    """Create an engine with the built-in league table."""
    return PredictionEngine()


@pytest.fixture
def strong_store():
    """Create NBA ratings with a clear favorite."""
    store = RatingStore()
    store.set_rating("nba", "bos", 1700.0)
    store.set_rating("nba", "det", 1400.0)
    return store


def test_unseen_teams_lean_home(engine):
    """Test that home advantage alone tips two unrated teams."""
    row = engine.predict_fixture("nba", _fixture(), RatingStore())

    assert row.raw_home_prob == pytest.approx(0.5785, abs=1e-4)
    assert row.home_prob == pytest.approx(0.53925, abs=1e-4)
    assert row.pick_side == "home"
    assert row.win_prob == pytest.approx(row.home_prob)
    assert row.edge == pytest.approx(row.win_prob - 0.5)
    assert row.tier is Tier.PASS
    assert row.market_home_prob is None


def test_exact_coin_flip_abstains(engine):
    """Test abstention on an exact 50/50 neutral-site game."""
    row = engine.predict_fixture("nba", _fixture(neutral_site=True), RatingStore())

    assert row.pick_side is None
    assert row.picked_team_key is None
    assert row.pick_note == "pass_toss_up"
    assert row.win_prob == pytest.approx(0.5)
    assert row.edge == pytest.approx(0.0)
    assert row.tier is Tier.PASS


def test_min_edge_for_pick_abstains():
    """Test abstention below the league's minimum edge."""
    config = EngineConfig(leagues={"nba": LeagueConfig("nba", home_advantage=55.0, min_edge_for_pick=0.05)})
    row = PredictionEngine(config).predict_fixture("nba", _fixture(), RatingStore())

    assert row.pick_side is None
    assert row.win_prob == pytest.approx(0.53925, abs=1e-4)
    assert row.tier is Tier.PASS


def test_strong_favorite_is_clamped(engine, strong_store):
    """Test that a lopsided blended probability stops at the clamp ceiling."""
    quote = MarketQuote(home_moneyline=-5000, away_moneyline=2000)
    row = engine.predict_fixture("nba", _fixture(), strong_store, market_quote=quote)

    assert row.raw_home_prob > 0.82
    # 0.45 * shrunk + 0.55 * market is about 0.836 before the clamp
    assert row.home_prob == 0.82
    assert row.win_prob == 0.82
    assert row.pick_side == "home"
    assert row.picked_team_key == "bos"

    flipped = engine.predict_fixture(
        "nba",
        _fixture(home="det", away="bos"),
        strong_store,
        market_quote=MarketQuote(home_moneyline=10000, away_moneyline=-10000),
    )
    assert flipped.home_prob == 0.18
    assert flipped.pick_side == "away"


def test_away_pick_reports_away_probability(engine, strong_store):
    """Test that an away pick reports the away side's probability."""
    row = engine.predict_fixture("nba", _fixture(home="det", away="bos"), strong_store)

    assert row.pick_side == "away"
    assert row.win_prob == pytest.approx(1.0 - row.home_prob)
    assert row.win_prob > 0.5


def test_market_quote_is_blended(engine):
    """Test the market blend against hand-computed values."""
    quote = MarketQuote(home_moneyline=-300, away_moneyline=250)
    row = engine.predict_fixture("nba", _fixture(), RatingStore(), market_quote=quote)

    assert row.market_home_prob == pytest.approx(0.75 / (0.75 + 100 / 350))
    assert row.home_prob == pytest.approx(0.640939, abs=1e-5)


def test_bad_quote_behaves_like_no_market(engine):
    """Test that an unusable quote leaves the model probability alone."""
    plain = engine.predict_fixture("nba", _fixture(), RatingStore())
    quoted = engine.predict_fixture(
        "nba", _fixture(), RatingStore(), market_quote=MarketQuote(home_moneyline=0, away_moneyline=None)
    )
    assert quoted.home_prob == pytest.approx(plain.home_prob)
    assert quoted.market_home_prob is None


def test_tournament_mode_is_neutral_with_wider_band(engine, strong_store):
    """Test tournament mode drops home advantage and widens the band."""
    quote = MarketQuote(home_moneyline=-5000, away_moneyline=2000)
    row = engine.predict_fixture("nba", _fixture(), strong_store, market_quote=quote, tournament=True)

    raw = 1.0 / (1.0 + 10 ** (-300.0 / 400.0))
    assert row.neutral_site is True
    assert row.raw_home_prob == pytest.approx(raw)

    blended = 0.45 * (0.5 + raw) / 2.0 + 0.55 * row.market_home_prob
    assert row.home_prob == pytest.approx(blended)
    # Above the regular-season ceiling but inside [0.05, 0.95]
    assert 0.82 < row.home_prob <= 0.95


def test_unknown_league_raises(engine):
    """Test that an unconfigured league is rejected."""
    with pytest.raises(EngineInputError):
        engine.predict_fixture("mlb", _fixture(league="mlb"), RatingStore())


def test_fixture_league_mismatch_raises(engine):
    """Test that a fixture from another league is rejected."""
    with pytest.raises(EngineInputError):
        engine.predict_fixture("nba", _fixture(league="nhl"), RatingStore())


def test_predict_slate_keeps_league_and_quotes(engine, strong_store):
    """Test slate prediction filters leagues and routes quotes by game id."""
    fixtures = [
        _fixture("f1"),
        _fixture("f2", home="det", away="bos"),
        _fixture("h1", league="nhl"),
    ]
    quotes = {"f2": MarketQuote(home_moneyline=200, away_moneyline=-240)}
    rows = engine.predict_slate("nba", fixtures, strong_store, quotes)

    assert [r.game_id for r in rows] == ["f1", "f2"]
    assert rows[0].market_home_prob is None
    assert rows[1].market_home_prob is not None


def test_predictions_do_not_touch_ratings(engine, strong_store):
    """Test that predicting never writes to the rating store."""
    before = strong_store.to_dict()
    engine.predict_fixture("nba", _fixture(home="bos", away="new"), strong_store)
    assert strong_store.to_dict() == before


def test_detect_upsets_through_engine(engine, strong_store):
    """Test upset scanning through the engine."""
    rows = engine.predict_slate("nba", [_fixture("f1"), _fixture("f2", home="det", away="bos")], strong_store)
    candidates = engine.detect_upsets("nba", rows, strong_store, min_win=0.15)

    assert {c.game_id for c in candidates} == {"f1", "f2"}
    assert all(c.underdog_team_key == "det" for c in candidates)
    assert engine.detect_upsets("nba", rows, strong_store, mode="strict") == []


def test_record_outcome_updates_calibration(engine, strong_store):
    """Test that a resolved pick reaches the calibration tracker."""
    row = engine.predict_fixture("nba", _fixture(), strong_store)

    assert engine.record_outcome("nba", row, "bos") is True
    summary = engine.get_calibration_summary("nba")
    assert summary["n"] == 1
    assert summary["accuracy"] == 1.0
    assert sum(b["n"] for b in engine.get_calibration_bins("nba")) == 1


def test_record_outcome_is_idempotent(engine, strong_store):
    """Test that a game is only counted once."""
    row = engine.predict_fixture("nba", _fixture(), strong_store)

    assert engine.record_outcome("nba", row, "det") is True
    assert engine.record_outcome("nba", row, "det") is False
    summary = engine.get_calibration_summary("nba")
    assert summary["n"] == 1
    assert summary["accuracy"] == 0.0


def test_record_outcome_ignores_pass_rows_and_unknown_winners(engine, strong_store):
    """Test that passed games and unknown winners are not recorded."""
    passed = engine.predict_fixture("nba", _fixture(neutral_site=True), RatingStore())
    picked = engine.predict_fixture("nba", _fixture("f2"), strong_store)

    assert engine.record_outcome("nba", passed, "bos") is False
    assert engine.record_outcome("nba", picked, "mia") is False
    assert engine.get_calibration_summary("nba")["n"] == 0


def test_record_outcome_rejects_rows_from_another_league(engine):
    """Test that a row from another league never reaches this league's bins."""
    store = RatingStore()
    store.set_rating("nhl", "bos", 1600.0)
    nhl_row = engine.predict_fixture("nhl", _fixture(league="nhl"), store)

    assert engine.record_outcome("nba", nhl_row, "bos") is False
    assert engine.get_calibration_summary("nba")["n"] == 0
    assert engine.record_outcome("nhl", nhl_row, "bos") is True
    assert engine.get_calibration_summary("nhl")["n"] == 1


def test_build_and_refresh_ratings():
    """Test cached rating refresh with a controllable clock."""
    now = [0.0]
    engine = PredictionEngine(cache=RatingCache(ttl_seconds=600, clock=lambda: now[0]))
    games = [
        GameResult("g1", "nba", "2025-01-01", "bos", "det", 110, 100, completed=True),
        GameResult("g2", "nba", "2025-01-02", "det", "bos", 101, 99, completed=True),
    ]
    loads = []

    def load():
        loads.append(1)
        return games

    first = engine.refresh_ratings("nba", load)
    assert engine.refresh_ratings("NBA", load) is first
    assert len(loads) == 1

    now[0] = 601.0
    second = engine.refresh_ratings("nba", load)
    assert len(loads) == 2
    assert second is not first
    assert second.to_dict() == engine.build_ratings("nba", games).to_dict()
