"""Trailing time-window filter.

Windows are anchored to the latest date in the data set, never to today,
so the same records always filter the same way.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Sequence
from datetime import date, timedelta

from ..common.models import PriceRecord, TimeRange

logger = logging.getLogger(__name__)

# TimeRange → (days, months) to step back from the latest date
_WINDOWS: dict[TimeRange, tuple[int, int]] = {
    TimeRange.SEVEN_DAYS: (7, 0),
    TimeRange.ONE_MONTH: (0, 1),
    TimeRange.THREE_MONTHS: (0, 3),
    TimeRange.SIX_MONTHS: (0, 6),
    TimeRange.ONE_YEAR: (0, 12),
}


def shift_months(day: date, months: int) -> date:
    """Move ``day`` by whole calendar months, clamping to the month's end."""
    year, month_index = divmod(day.year * 12 + day.month - 1 + months, 12)
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def range_cutoff(latest: date, time_range: TimeRange) -> date | None:
    """Earliest date inside the window ending at ``latest`` (None for All)."""
    window = _WINDOWS.get(time_range)
    if window is None:
        return None
    days, months = window
    return shift_months(latest, -months) - timedelta(days=days)


def filter_by_range(
    records: Sequence[PriceRecord],
    time_range: TimeRange | str,
) -> Sequence[PriceRecord]:
    """Keep the records inside a trailing window.

    ``"All"``, an empty input and unrecognised ranges return ``records``
    unchanged.
    """
    if not records:
        return records

    try:
        time_range = TimeRange(time_range)
    except ValueError:
        logger.debug("Unknown time range %r, returning all records", time_range)
        return records

    latest = max(r.raw_date for r in records)
    cutoff = range_cutoff(latest, time_range)
    if cutoff is None:
        return records

    return [r for r in records if r.raw_date >= cutoff]
