#!/usr/bin/env python3
"""
CLI entrypoint for scorecard reports.

Usage examples:
    # Company-wide rankings over the default 90-day window
    uv run python -m scripts.scorecards_cli rankings --top 5 --low 5
    # One department's scorecards as CSV
    uv run python -m scripts.scorecards_cli scorecards --department 3 --csv
    # Self view for one employee
    uv run python -m scripts.scorecards_cli me --user 42 --from 2025-01-01 --to 2025-03-31

Flags:
    --from / --to         ISO dates bounding the window (defaults: trailing 90 days)
    --department ID       Restrict the cohort to one department
    --preset NAME         Weight preset (MANAGER, SELF); default depends on the view
    --top N / --low N     Slice sizes for rankings (1-50)
    --csv                 Print scorecards or rankings as CSV instead of JSON
    --log-level LEVEL     Logging level (INFO, DEBUG, etc.)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from scorecards.config import settings
from scorecards.db.session import SessionLocal
from scorecards.services.errors import ScorecardError
from scorecards.services.scope import parse_scope
from scorecards.services.scorecard_export import export_rankings_csv, export_scorecards_csv
from scorecards.services.scorecard_service import ScorecardService
from scorecards.services.scoring import WeightPreset, resolve_window
from scorecards.services.scoring.ranking import clamp_limit
from scorecards.services.scoring.weights import resolve_weights


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute performance scorecards.")
    parser.add_argument("view", choices=["scorecards", "rankings", "departments", "me"])
    parser.add_argument("--from", dest="from_", type=str, default=None, help="Window start (ISO date).")
    parser.add_argument("--to", type=str, default=None, help="Window end (ISO date).")
    parser.add_argument("--department", type=str, default=None, help="Department id to restrict the cohort.")
    parser.add_argument("--user", type=str, default=None, help="Employee id (required for 'me').")
    parser.add_argument("--preset", type=str, default=None, help="Weight preset (MANAGER, SELF).")
    parser.add_argument("--top", type=int, default=None, help="Top slice size (rankings).")
    parser.add_argument("--low", type=int, default=None, help="Low slice size (rankings).")
    parser.add_argument("--csv", action="store_true", help="Print scorecards or rankings as CSV.")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (e.g. INFO, DEBUG).",
    )
    return parser.parse_args()


def configure_logging(level: str) -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    )


async def run(args: argparse.Namespace) -> str:
    service = ScorecardService.from_session_factory(SessionLocal)
    window = resolve_window(args.from_, args.to, default_days=settings.SCORECARD_DEFAULT_WINDOW_DAYS)
    default_preset = WeightPreset.SELF if args.view == "me" else WeightPreset.MANAGER
    preset = WeightPreset(args.preset.upper()) if args.preset else default_preset
    weights = resolve_weights(preset)

    if args.view == "me":
        if not args.user or not args.user.isdigit():
            raise ValueError("--user is required for the 'me' view")
        card = await service.build_self_scorecard(int(args.user), window, weights)
        return card.model_dump_json(indent=2)

    scope = parse_scope(department=args.department, employee=args.user)
    if args.view == "scorecards":
        cards = await service.build_scorecards(scope, window, weights)
        if args.csv:
            return export_scorecards_csv(cards.items)
        return cards.model_dump_json(indent=2)
    if args.view == "rankings":
        ranking = await service.build_rankings(
            scope,
            window,
            weights,
            top_n=clamp_limit(args.top, default=settings.SCORECARD_RANK_DEFAULT, max_limit=settings.SCORECARD_RANK_MAX),
            low_n=clamp_limit(args.low, default=settings.SCORECARD_RANK_DEFAULT, max_limit=settings.SCORECARD_RANK_MAX),
        )
        if args.csv:
            return export_rankings_csv(ranking)
        return ranking.model_dump_json(indent=2)

    departments = await service.build_department_rankings(scope, window, weights)
    return json.dumps(departments.model_dump(), indent=2, default=str)


def main() -> int:
    args = parse_args()
    configure_logging(args.log_level)
    logger = logging.getLogger(__name__)
    logger.info("scorecards.cli.start")

    try:
        output = asyncio.run(run(args))
        print(output)
        logger.info("scorecards.cli.done", extra={"view": args.view})
        return 0
    except (ValueError, ScorecardError) as e:
        logger.error("scorecards.cli.invalid: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("scorecards.cli.interrupted")
        return 130
    except Exception:
        logger.exception("scorecards.cli.error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
