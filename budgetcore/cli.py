"""Command line entry point: build an expense report from a JSON export."""

import argparse
import json
import logging
import sys
from functools import partial
from typing import List, Optional

from budgetcore import config
from budgetcore.bucketing import bucketize, trend_range
from budgetcore.cache import SpendingCache
from budgetcore.domain import PERIOD_KINDS, InvalidArgument, to_instant
from budgetcore.services import AnalyticsService
from budgetcore.reports import export_csv
from budgetcore.transforms import MalformedSnapshot, load_snapshot

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="budgetcore", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="print the report for one period")
    report.add_argument("--data", required=True, help="JSON file with expenses, income and budgets")
    report.add_argument("--period", default="monthly", help=f"one of {', '.join(PERIOD_KINDS)}")
    report.add_argument("--as-of", dest="as_of", help="reference date (YYYY-MM-DD), defaults to today")
    report.add_argument("--json", action="store_true", help="print the structured report instead of text")
    report.add_argument("--csv", help="also write the trend buckets to this CSV file")
    report.add_argument("--months", type=int, default=config.DEFAULT_TREND_MONTHS,
                        help="how many months the CSV trend covers")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    return parser


def run_report(args: argparse.Namespace) -> int:
    cache = SpendingCache(partial(load_snapshot, args.data))
    cache.refresh()
    reference = to_instant(args.as_of) if args.as_of else None
    service = AnalyticsService(cache)

    rep = service.report(args.period, reference)
    if args.json:
        print(json.dumps({"subject": rep.subject, **rep.structured}, indent=2))
    else:
        print(rep.text, end="")

    if args.csv:
        start, end = trend_range(args.period, reference, args.months)
        export_csv(bucketize(cache.expenses, args.period, start, end), args.csv)
        logger.info("Wrote trend CSV to %s", args.csv)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config.configure_logging(args.log_level)
    try:
        return run_report(args)
    except MalformedSnapshot as e:
        print(f"error: {args.data}: {e}", file=sys.stderr)
        return 1
    except InvalidArgument as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except (OSError, json.JSONDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
