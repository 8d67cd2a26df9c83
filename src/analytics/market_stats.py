"""Region filtering, headline statistics and the annual timing guide."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from statistics import mean

from ..common.models import (
    MonthlyStat,
    PriceRecord,
    PriceStats,
    SeasonalitySummary,
    TimingEntry,
    TimingGuide,
    TimingTier,
)

logger = logging.getLogger(__name__)

ALL_REGIONS = "All"

# Months per tier at each end of the timing guide
TIMING_TIER_SIZE = 3


def list_regions(records: Sequence[PriceRecord]) -> list[str]:
    """Distinct non-empty regions, sorted."""
    return sorted({r.region for r in records if r.region})


def filter_by_region(
    records: Sequence[PriceRecord],
    region: str | None,
) -> Sequence[PriceRecord]:
    """Records of one region; a blank region or ``"All"`` returns ``records`` as is."""
    if not region or region == ALL_REGIONS:
        return records
    return [r for r in records if r.region == region]


def summarize_prices(records: Sequence[PriceRecord]) -> PriceStats | None:
    """Lowest minimum, highest maximum (with their dates) and mean average."""
    if not records:
        return None

    low = records[0]
    high = records[0]
    for record in records:
        if record.min_price < low.min_price:
            low = record
        if record.max_price > high.max_price:
            high = record

    return PriceStats(
        min_price=low.min_price,
        min_date=low.date,
        max_price=high.max_price,
        max_date=high.date,
        avg_price=mean(r.avg_price for r in records),
        count=len(records),
    )


def build_timing_guide(summary: SeasonalitySummary | None) -> TimingGuide | None:
    """Rank calendar months into best / neutral / avoid buying tiers.

    Needs at least three months with data. Best months are the cheapest
    three, avoid months the dearest three (dearest first), neutral months
    the rest in calendar order.
    """
    if summary is None:
        return None

    populated = [m for m in summary.monthly_averages if m.count > 0]
    if len(populated) < TIMING_TIER_SIZE:
        logger.debug("Timing guide needs %d populated months, got %d",
                     TIMING_TIER_SIZE, len(populated))
        return None

    seasonal_average = mean(m.avg_price for m in populated)
    ranked = sorted(populated, key=lambda m: m.avg_price)
    best = ranked[:TIMING_TIER_SIZE]
    avoid = list(reversed(ranked[-TIMING_TIER_SIZE:]))
    neutral = sorted(ranked[TIMING_TIER_SIZE:-TIMING_TIER_SIZE], key=lambda m: m.month_number)

    def entries(stats: list[MonthlyStat], tier: TimingTier) -> list[TimingEntry]:
        return [
            TimingEntry(
                stat=stat,
                tier=tier,
                diff_from_average=(
                    (stat.avg_price - seasonal_average) / seasonal_average * 100
                    if seasonal_average else 0.0
                ),
            )
            for stat in stats
        ]

    return TimingGuide(
        seasonal_average=seasonal_average,
        ideal_price=mean(m.avg_price for m in best),
        avoid_threshold=mean(m.avg_price for m in avoid),
        best=entries(best, TimingTier.BEST),
        neutral=entries(neutral, TimingTier.NEUTRAL),
        avoid=entries(avoid, TimingTier.AVOID),
    )
