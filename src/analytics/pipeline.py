"""Dashboard analysis pipeline.

Recomputes every view from the owned record set plus explicit filter
parameters; nothing derived is cached between calls.

Data flow:
    records ─ region filter ─┬─ time-range filter ─ recommendation, stats
                             ├─ seasonality (ignores the time range) ─ timing guide
                             └─ historical buckets / seasonal alignment
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from ..common.config import RecommendationThresholds
from ..common.models import Granularity, MarketReport, PriceRecord, TimeRange
from .bucketing import build_history
from .market_stats import ALL_REGIONS, build_timing_guide, filter_by_region, summarize_prices
from .recommendation import recommend
from .seasonality import analyze_seasonality
from .time_range import filter_by_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisRequest:
    """Filter parameters for one dashboard view.

    ``focus_date`` is the hovered chart date: it selects the record the
    recommendation evaluates, the anchor month of the seasonal alignment
    and the highlighted timeline bucket.
    """

    region: str = ALL_REGIONS
    time_range: TimeRange = TimeRange.ALL
    granularity: Granularity = Granularity.MONTH
    align: bool = False
    lookahead: int = 0
    focus_date: date | None = None


def select_target(records: Sequence[PriceRecord], focus_date: date | None) -> PriceRecord | None:
    """Record dated ``focus_date``, falling back to the latest record."""
    if not records:
        return None
    if focus_date is not None:
        for record in records:
            if record.raw_date == focus_date:
                return record
    return records[-1]


def build_report(
    records: Sequence[PriceRecord],
    request: AnalysisRequest | None = None,
    thresholds: RecommendationThresholds | None = None,
) -> MarketReport:
    """Run every analysis for ``request`` over ``records``."""
    request = request or AnalysisRequest()
    try:
        time_range = TimeRange(request.time_range)
    except ValueError:
        logger.debug("Unknown time range %r, using All", request.time_range)
        time_range = TimeRange.ALL

    regional = filter_by_region(records, request.region)
    windowed = filter_by_range(regional, time_range)
    seasonality = analyze_seasonality(regional)
    target = select_target(windowed, request.focus_date)

    report = MarketReport(
        region=request.region or ALL_REGIONS,
        time_range=time_range,
        records=list(windowed),
        target=target,
        stats=summarize_prices(windowed),
        seasonality=seasonality,
        timing_guide=build_timing_guide(seasonality),
        recommendation=recommend(windowed, seasonality, target, thresholds),
        history=build_history(
            regional,
            request.granularity,
            align=request.align,
            lookahead=request.lookahead,
            reference=request.focus_date,
        ),
    )

    logger.info(
        "Report for region=%s range=%s: %d/%d records, action=%s",
        report.region, time_range.value, len(windowed), len(records),
        report.recommendation.action.value,
    )
    return report
