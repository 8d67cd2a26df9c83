"""Seasonal price pattern analysis.

Records are grouped by calendar month regardless of year, so every January
in the data contributes to the same bucket. The result always has twelve
months so a 12-bar chart never has to special-case sparse data.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..common.models import MONTH_NAMES, MonthlyStat, PriceRecord, SeasonalitySummary, YearPrice
from .aggregation import accumulate, year_month

logger = logging.getLogger(__name__)


def analyze_seasonality(records: Sequence[PriceRecord]) -> SeasonalitySummary | None:
    """Compute per-month statistics and the historical best/worst month.

    Best is the lowest mean average price, worst the highest; on equal
    prices the earlier calendar month wins both.

    Returns:
        None for empty input, otherwise a summary with 12 MonthlyStats.
    """
    if not records:
        return None

    by_month = accumulate(records, lambda r: r.raw_date.month)
    by_year_month = accumulate(records, year_month)

    monthly_averages: list[MonthlyStat] = []
    for month_number, name in enumerate(MONTH_NAMES, start=1):
        acc = by_month.get(month_number)
        if acc is None:
            monthly_averages.append(MonthlyStat(month=name, month_number=month_number))
            continue

        history = [
            YearPrice(year=year, price=ym_acc.mean)
            for (year, month), ym_acc in sorted(by_year_month.items())
            if month == month_number
        ]
        monthly_averages.append(
            MonthlyStat(
                month=name,
                month_number=month_number,
                avg_price=acc.mean,
                min_price=acc.min_price,
                max_price=acc.max_price,
                count=acc.count,
                history=history,
            )
        )

    populated = [m for m in monthly_averages if m.count > 0]
    if not populated:
        return None

    # min()/max() keep the first of equal elements, i.e. the earlier month
    best = min(populated, key=lambda m: m.avg_price)
    worst = max(populated, key=lambda m: m.avg_price)

    logger.debug(
        "Seasonality over %d records: %d months populated, best=%s, worst=%s",
        len(records), len(populated), best.month, worst.month,
    )
    return SeasonalitySummary(
        monthly_averages=monthly_averages,
        best_month=best,
        worst_month=worst,
    )
