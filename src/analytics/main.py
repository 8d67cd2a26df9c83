"""CLI entry point for the price analytics engine.

Usage:
    python -m src.analytics.main --input data/raw/onion_prices.xlsx
    python -m src.analytics.main --input prices.csv --list-regions
    python -m src.analytics.main --input prices.csv --region Maharashtra \\
        --range 6M --granularity Quarter --output data/exports/report.json

    # Seasonal outlook: November plus the next two months, across all years
    python -m src.analytics.main --input prices.csv --align --lookahead 3M \\
        --focus-date 2024-11-15

    # Re-run on the records saved by a previous --save-store
    python -m src.analytics.main --from-store
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from ..common.config import settings
from ..common.logging import setup_logging
from ..common.models import Granularity, MarketReport, TimeRange
from ..market_data.reader import NoUsableDataError, load_records
from ..market_data.store import RecordStore
from .bucketing import LOOKAHEAD_PRESETS
from .market_stats import list_regions
from .normalizer import UnreadableSourceError
from .pipeline import AnalysisRequest, build_report

logger = logging.getLogger(__name__)


def _parse_lookahead(value: str) -> int:
    if value.upper() in LOOKAHEAD_PRESETS:
        return LOOKAHEAD_PRESETS[value.upper()]
    try:
        lookahead = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected a month count or one of {', '.join(LOOKAHEAD_PRESETS)}"
        ) from None
    if lookahead < 0:
        raise argparse.ArgumentTypeError("lookahead must be >= 0")
    return lookahead


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError("expected YYYY-MM-DD") from None


def _log_report(report: MarketReport) -> None:
    currency = settings.analytics.currency_symbol
    rec = report.recommendation

    logger.info("=== Market Report: region=%s, range=%s ===",
                report.region, report.time_range.value)
    if report.stats:
        logger.info(
            "Records: %d | Low %s%s (%s) | High %s%s (%s) | Avg %s%.0f",
            report.stats.count,
            currency, f"{report.stats.min_price:g}", report.stats.min_date,
            currency, f"{report.stats.max_price:g}", report.stats.max_date,
            currency, report.stats.avg_price,
        )
    if report.seasonality:
        logger.info("Best month: %s | Worst month: %s",
                    report.seasonality.best_month.month,
                    report.seasonality.worst_month.month)
    logger.info("Recommendation: %s (%s): %s",
                rec.action.value, rec.confidence.value, rec.reason)
    if rec.yoy:
        logger.info("  YoY vs %d: %+.1f%%", rec.yoy.previous_year, rec.yoy.change)
    if rec.prediction:
        logger.info(
            "  %s outlook: %s (%.0f%% of %d years, avg %+.1f%%)",
            rec.prediction.next_month,
            rec.prediction.direction.value,
            rec.prediction.probability,
            rec.prediction.sample_size,
            rec.prediction.avg_change,
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Mandi Price Analytics")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        type=str,
        help="Spreadsheet with price rows (.xlsx, .csv or .json)",
    )
    source.add_argument(
        "--from-store",
        action="store_true",
        help="Analyse the records saved in the local record store",
    )
    parser.add_argument(
        "--region",
        type=str,
        default="All",
        help="Region/state to analyse (default: All)",
    )
    parser.add_argument(
        "--range",
        dest="time_range",
        choices=[r.value for r in TimeRange],
        default=settings.analytics.default_time_range,
        help="Trailing window for the recommendation (default: %(default)s)",
    )
    parser.add_argument(
        "--granularity",
        choices=[g.value for g in Granularity],
        default=settings.analytics.default_granularity,
        help="Historical bucket size (default: %(default)s)",
    )
    parser.add_argument(
        "--align",
        action="store_true",
        help="Seasonal alignment view (Month granularity only)",
    )
    parser.add_argument(
        "--lookahead",
        type=_parse_lookahead,
        default=0,
        help="Months after the anchor month: a count or 1M/3M/6M/12M (default: 0)",
    )
    parser.add_argument(
        "--focus-date",
        type=_parse_date,
        help="Date to evaluate and anchor the history on (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--list-regions",
        action="store_true",
        help="Print the regions present in the data and exit",
    )
    parser.add_argument(
        "--save-store",
        action="store_true",
        help="Save the normalized records to the local record store",
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Output JSON file path",
    )

    args = parser.parse_args()
    setup_logging(settings.log_level)
    store = RecordStore()

    try:
        if args.from_store:
            records = store.load()
            if not records:
                logger.error("Record store %s is empty", store.path)
                sys.exit(1)
        else:
            records = load_records(args.input)
    except (UnreadableSourceError, NoUsableDataError) as e:
        logger.error("%s", e)
        sys.exit(1)

    if args.save_store and not args.from_store:
        store.save(records)

    if args.list_regions:
        for region in list_regions(records):
            print(region)
        return

    request = AnalysisRequest(
        region=args.region,
        time_range=TimeRange(args.time_range),
        granularity=Granularity(args.granularity),
        align=args.align,
        lookahead=args.lookahead,
        focus_date=args.focus_date,
    )
    report = build_report(records, request)
    _log_report(report)

    if args.output:
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        Path(args.output).write_text(
            json.dumps(report.model_dump(mode="json"), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info("Output written to %s", args.output)


if __name__ == "__main__":
    main()
