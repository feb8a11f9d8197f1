"""Command line interface for the rating engine."""

import argparse
import json
import logging
import sys

from .config import EngineInputError
from .data.loader import DataLoader
from .pipeline.engine import PredictionEngine
from .predictors.explain import explain


def _load_store(engine, args):
    games = DataLoader.load_game_results(args.games, league=args.league)
    print(f"Loaded {len(games)} game records from {args.games}")
    return engine.build_ratings(args.league, games)


def show_ratings(args):
    """Build ratings and print the top of the table."""
    engine = PredictionEngine()
    try:
        store = _load_store(engine, args)
    except (EngineInputError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}")
        return 1

    rankings = store.rankings(args.league)
    print(f"\n{'='*60}")
    print(f"{args.league.upper()} ELO RATINGS ({len(rankings)} teams)")
    print(f"{'='*60}\n")
    for rank, row in enumerate(rankings[: args.top], start=1):
        print(f"{rank:>3}. {row.team_key:<24} {row.rating:8.1f}   (last game {row.last_updated or '-'})")

    if args.output:
        DataLoader.save_ratings(store, args.output)
        print(f"\nSaved ratings to {args.output}")
    return 0


def predict_slate(args):
    """Predict a slate of fixtures."""
    engine = PredictionEngine()
    try:
        store = _load_store(engine, args)
        fixtures = DataLoader.load_fixtures(args.fixtures, league=args.league)
        quotes = DataLoader.load_market_quotes(args.odds) if args.odds else {}
        rows = engine.predict_slate(args.league, fixtures, store, quotes, tournament=args.tournament)
    except (EngineInputError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}")
        return 1

    print(f"\n{'='*60}")
    print(f"{args.league.upper()} PREDICTIONS ({len(rows)} games{', tournament mode' if args.tournament else ''})")
    print(f"{'='*60}\n")
    for row in rows:
        panel = explain(row)
        print(f"{row.away_team_key} @ {row.home_team_key}: {panel['headline']}")
        if row.pick_side:
            print(f"   {row.pick_side.upper()} {row.win_prob:.1%}  edge {row.edge:+.3f}  tier {row.tier.value}")

    DataLoader.save_prediction_rows(rows, args.output)
    print(f"\nSaved predictions to {args.output}")
    return 0


def find_upsets(args):
    """Scan saved predictions for upset candidates."""
    engine = PredictionEngine()
    try:
        store = _load_store(engine, args)
        rows = DataLoader.load_prediction_rows(args.predictions)
        candidates = engine.detect_upsets(
            args.league,
            rows,
            store,
            mode=args.mode,
            min_win=args.min_win,
            limit=args.limit,
            sort_key=args.sort,
            tournament=args.tournament,
        )
    except (EngineInputError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}")
        return 1

    print(f"\n🎯 UPSET WATCH ({args.mode}, min win {args.min_win:.0%}): {len(candidates)} games")
    for c in candidates:
        print(
            f"   - {c.underdog_team_key} over {c.favorite_team_key}: "
            f"{c.underdog_win_prob:.1%} (gap {c.signals['rating_gap']:.0f}, score {c.score:.3f})"
        )

    if args.output:
        with open(args.output, "w") as f:
            json.dump({"candidates": [c.to_dict() for c in candidates]}, f, indent=2)
        print(f"\nSaved candidates to {args.output}")
    return 0


def calibrate(args):
    """Resolve saved predictions against outcomes and report calibration."""
    engine = PredictionEngine()
    try:
        rows = {row.game_id: row for row in DataLoader.load_prediction_rows(args.predictions)}
        outcomes = DataLoader.load_outcomes(args.outcomes)
        recorded = 0
        for game_id, winner in outcomes:
            row = rows.get(game_id)
            if row is None or row.league != args.league:
                continue
            if engine.record_outcome(args.league, row, winner):
                recorded += 1
        summary = engine.get_calibration_summary(args.league)
        bins = engine.get_calibration_bins(args.league)
    except (EngineInputError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Recorded {recorded} resolved picks")
    if summary["n"] == 0:
        print("No resolved picks yet; accuracy and ECE unavailable.")
        return 0

    print(f"Accuracy: {summary['accuracy']:.3f}   ECE: {summary['ece']:.4f}   (n={summary['n']})")
    for b in bins:
        if b["n"]:
            print(f"   [{b['lo']:.1f}, {b['hi']:.1f}) n={b['n']:<4} hit rate {b['accuracy']:.3f}")
    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="League rating engine - Elo ratings, calibrated picks and upset watch"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_common(sub):
        sub.add_argument("--league", "-l", required=True, help="League key (nba, nhl, ncaam)")
        sub.add_argument("--games", "-g", required=True, help="Historical games JSON/CSV")

    ratings_parser = subparsers.add_parser("ratings", help="Build and show team ratings")
    add_common(ratings_parser)
    ratings_parser.add_argument("--top", type=int, default=25, help="Number of teams to show (default: 25)")
    ratings_parser.add_argument("--output", "-o", default=None, help="Optional ratings JSON output")

    predict_parser = subparsers.add_parser("predict", help="Predict a slate of fixtures")
    add_common(predict_parser)
    predict_parser.add_argument("--fixtures", "-f", required=True, help="Fixtures JSON/CSV")
    predict_parser.add_argument("--odds", default=None, help="Optional moneyline odds JSON")
    predict_parser.add_argument("--tournament", action="store_true", help="Neutral-court tournament mode")
    predict_parser.add_argument(
        "--output", "-o",
        default="predictions.json",
        help="Output JSON file for predictions (default: predictions.json)"
    )

    upsets_parser = subparsers.add_parser("upsets", help="Find upset candidates in saved predictions")
    add_common(upsets_parser)
    upsets_parser.add_argument("--predictions", "-p", required=True, help="Predictions JSON from 'predict'")
    upsets_parser.add_argument("--mode", choices=["watch", "strict"], default="watch")
    upsets_parser.add_argument(
        "--min-win",
        type=float,
        default=0.30,
        help="Minimum underdog win probability (default: 0.30)"
    )
    upsets_parser.add_argument("--limit", type=int, default=20, help="Maximum candidates (default: 20)")
    upsets_parser.add_argument("--sort", choices=["score", "win_prob", "closest"], default="score")
    upsets_parser.add_argument("--tournament", action="store_true", help="Predictions used tournament mode")
    upsets_parser.add_argument("--output", "-o", default=None, help="Optional candidates JSON output")

    calibrate_parser = subparsers.add_parser("calibrate", help="Score saved predictions against outcomes")
    calibrate_parser.add_argument("--league", "-l", required=True, help="League key (nba, nhl, ncaam)")
    calibrate_parser.add_argument("--predictions", "-p", required=True, help="Predictions JSON from 'predict'")
    calibrate_parser.add_argument("--outcomes", required=True, help="Outcomes JSON ({game_id, winner_team_key})")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if getattr(args, "league", None):
        args.league = args.league.strip().lower()

    if args.command == "ratings":
        return show_ratings(args)
    elif args.command == "predict":
        return predict_slate(args)
    elif args.command == "upsets":
        return find_upsets(args)
    elif args.command == "calibrate":
        return calibrate(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
