"""Historical bucketing: chronological timelines and seasonal alignment.

Chronological mode groups records into consecutive periods (month, quarter,
half-year, year) and lays them out as one timeline across all years.

Seasonal-alignment mode answers "how did month M (and M+1, M+2, ...) behave
in each year". It re-projects the per-(year, month) statistics onto a year
axis: one series per month offset, one point per year. A target month past
December rolls into the following year, so an anchor of November with
offset 2 reads January of ``year + 1``. Years without data for a target
month get a ``None`` point and never shift the other years.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from ..common.models import (
    MONTH_ABBREVIATIONS,
    AlignedSeries,
    Bucket,
    Granularity,
    HistoryView,
    PriceRecord,
    SeasonalAlignment,
)
from .aggregation import PriceAccumulator, accumulate, year_month

logger = logging.getLogger(__name__)

# Lookahead depth per outlook option shown in the dashboard
LOOKAHEAD_PRESETS = {"1M": 0, "3M": 2, "6M": 5, "12M": 11}


def bucket_key(day: date, granularity: Granularity | str) -> str:
    """Grouping key of ``day``: ``2023-01``, ``2023-Q1``, ``2023-H1`` or ``2023``."""
    granularity = Granularity(granularity)
    if granularity is Granularity.QUARTER:
        return f"{day.year}-Q{(day.month - 1) // 3 + 1}"
    if granularity is Granularity.HALF_YEAR:
        return f"{day.year}-H{1 if day.month <= 6 else 2}"
    if granularity is Granularity.YEAR:
        return str(day.year)
    return f"{day.year}-{day.month:02d}"


def bucket_label(key: str, granularity: Granularity | str) -> str:
    """Display label for a bucket key, e.g. ``Jan '23`` or ``Q1 '23``."""
    granularity = Granularity(granularity)
    if granularity is Granularity.YEAR:
        return key
    year, part = key.split("-")
    if granularity is Granularity.MONTH:
        part = MONTH_ABBREVIATIONS[int(part) - 1]
    return f"{part} '{year[2:]}"


def _to_bucket(key: str, label: str, acc: PriceAccumulator) -> Bucket:
    return Bucket(
        key=key,
        label=label,
        sort_key=acc.first_date,
        avg_price=acc.mean,
        min_price=acc.min_price,
        max_price=acc.max_price,
        count=acc.count,
    )


def bucket_records(
    records: Sequence[PriceRecord],
    granularity: Granularity | str = Granularity.MONTH,
) -> list[Bucket]:
    """Aggregate records into chronological buckets, earliest first."""
    granularity = Granularity(granularity)
    groups = accumulate(records, lambda r: bucket_key(r.raw_date, granularity))
    buckets = [
        _to_bucket(key, bucket_label(key, granularity), acc)
        for key, acc in groups.items()
    ]
    buckets.sort(key=lambda b: b.sort_key)
    return buckets


def roll_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Add ``offset`` months to (year, month), carrying into later years."""
    carry, month_index = divmod(month - 1 + offset, 12)
    return year + carry, month_index + 1


def align_seasonal(
    records: Sequence[PriceRecord],
    lookahead: int = 0,
    reference: date | None = None,
) -> SeasonalAlignment | None:
    """Lay out month-offset series side by side on a year axis.

    Args:
        records: Normalized records (ascending by date).
        lookahead: Number of months after the anchor month to include;
            0 gives only the anchor month.
        reference: Date whose month is the anchor; defaults to the month of
            the earliest record.

    Returns:
        The alignment, or None when there are no records.
    """
    if lookahead < 0:
        raise ValueError(f"lookahead must be >= 0, got {lookahead}")
    if not records:
        return None

    anchor_month = reference.month if reference else records[0].raw_date.month
    stats = accumulate(records, year_month)
    years = sorted({r.raw_date.year for r in records})

    series: list[AlignedSeries] = []
    for offset in range(lookahead + 1):
        _, target_month = roll_month(years[0], anchor_month, offset)
        points: list[Bucket | None] = []
        for year in years:
            target_year, _ = roll_month(year, anchor_month, offset)
            acc = stats.get((target_year, target_month))
            if acc is None:
                points.append(None)
                continue
            key = f"{target_year}-{target_month:02d}"
            points.append(_to_bucket(key, bucket_label(key, Granularity.MONTH), acc))
        series.append(
            AlignedSeries(
                offset=offset,
                month_number=target_month,
                label=MONTH_ABBREVIATIONS[target_month - 1],
                points=points,
            )
        )

    logger.debug(
        "Aligned %d series from anchor month %d across %d years",
        len(series), anchor_month, len(years),
    )
    return SeasonalAlignment(
        anchor_month=anchor_month,
        lookahead=lookahead,
        years=years,
        series=series,
    )


def find_active_bucket(buckets: Sequence[Bucket], key: str | None) -> int | None:
    """Index of the bucket whose key equals ``key`` exactly, else None."""
    if key is None:
        return None
    for index, bucket in enumerate(buckets):
        if bucket.key == key:
            return index
    return None


def build_history(
    records: Sequence[PriceRecord],
    granularity: Granularity | str = Granularity.MONTH,
    *,
    align: bool = False,
    lookahead: int = 0,
    reference: date | None = None,
) -> HistoryView:
    """Build the historical view for the chosen granularity.

    Seasonal alignment applies to monthly granularity only; any other
    granularity always yields the chronological timeline. In timeline mode
    ``reference`` selects the active bucket.
    """
    granularity = Granularity(granularity)

    if align and granularity is Granularity.MONTH:
        alignment = align_seasonal(records, lookahead, reference)
        return HistoryView(granularity=granularity, alignment=alignment)

    buckets = bucket_records(records, granularity)
    active_key = bucket_key(reference, granularity) if reference else None
    return HistoryView(
        granularity=granularity,
        buckets=buckets,
        active_index=find_active_bucket(buckets, active_key),
    )
