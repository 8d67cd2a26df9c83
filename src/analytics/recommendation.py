"""Buy/wait recommendation engine.

Signals are checked in strict priority order and the first match decides
the action:

1. Global low: current price within a few percent of the all-time low.
2. Seasonal deviation: current price against its calendar month's
   historical average (only when that month has data).
3. Market average: current price against the mean of all averages.

The seasonal analysis, year-over-year comparison and next-month forecast
are attached whichever branch fired.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from statistics import mean

from ..common.config import RecommendationThresholds, settings
from ..common.models import (
    MONTH_NAMES,
    Action,
    Confidence,
    Direction,
    Prediction,
    PriceRecord,
    Recommendation,
    SeasonalAnalysis,
    SeasonalitySummary,
    SignalType,
    YearOverYear,
)
from .aggregation import accumulate, year_month
from .bucketing import roll_month

logger = logging.getLogger(__name__)

NO_DATA = Recommendation(
    action=Action.UNKNOWN,
    confidence=Confidence.LOW,
    reason="No data available",
    type=SignalType.NEUTRAL,
)


def _pct_change(current: float, base: float) -> float:
    return (current - base) / base * 100


def _format_price(value: float) -> str:
    return f"{value:g}"


def seasonal_deviation(
    summary: SeasonalitySummary | None,
    target: PriceRecord,
) -> SeasonalAnalysis | None:
    """Deviation of the target's price from its month's seasonal average."""
    if summary is None:
        return None
    stat = summary.for_month(target.raw_date.month)
    if stat.count == 0 or stat.avg_price == 0:
        return None
    return SeasonalAnalysis(
        month=stat.month,
        average=stat.avg_price,
        deviation=_pct_change(target.min_price, stat.avg_price),
        is_best_month=summary.best_month.month_number == stat.month_number,
    )


def year_over_year(records: Sequence[PriceRecord], target: PriceRecord) -> YearOverYear | None:
    """Compare the target price with the same month one year earlier."""
    previous_year = target.raw_date.year - 1
    month = target.raw_date.month
    previous = [
        r.avg_price for r in records
        if r.raw_date.year == previous_year and r.raw_date.month == month
    ]
    if not previous:
        return None
    previous_price = mean(previous)
    if previous_price == 0:
        return None
    return YearOverYear(
        previous_year=previous_year,
        previous_price=previous_price,
        change=_pct_change(target.min_price, previous_price),
    )


def forecast_next_month(records: Sequence[PriceRecord], target_day: date) -> Prediction | None:
    """Estimate next month's direction from past years' same-month moves.

    For every year other than the target's, the change in mean average
    price from the target's calendar month to the month after it (rolling
    into the next year after December) is one sample.
    """
    if not records:
        return None

    monthly = accumulate(records, year_month)
    years = sorted({r.raw_date.year for r in records})
    month = target_day.month

    changes: list[float] = []
    for year in years:
        if year == target_day.year:
            continue
        current = monthly.get((year, month))
        following = monthly.get(roll_month(year, month, 1))
        if current is None or following is None or current.mean == 0:
            continue
        changes.append(_pct_change(following.mean, current.mean))

    if not changes:
        return None

    win_rate = sum(1 for c in changes if c > 0) / len(changes) * 100
    direction = Direction.UP if win_rate >= 50 else Direction.DOWN
    _, next_month = roll_month(target_day.year, month, 1)

    return Prediction(
        direction=direction,
        probability=win_rate if direction is Direction.UP else 100 - win_rate,
        avg_change=mean(changes),
        sample_size=len(changes),
        next_month=MONTH_NAMES[next_month - 1],
    )


def recommend(
    records: Sequence[PriceRecord],
    summary: SeasonalitySummary | None,
    target: PriceRecord | None = None,
    thresholds: RecommendationThresholds | None = None,
) -> Recommendation:
    """Produce a recommendation for ``target`` (default: the latest record).

    Args:
        records: Normalized records, ascending by date.
        summary: Seasonality of the (usually wider) historical context.
        target: Record to evaluate.
        thresholds: Decision cut-offs; defaults to the configured ones.

    Returns:
        A Recommendation; an "Unknown" one for empty input.
    """
    if not records:
        return NO_DATA

    thresholds = thresholds or settings.recommendation
    currency = settings.analytics.currency_symbol
    target = target or records[-1]
    price = target.min_price

    global_min = min(r.min_price for r in records)
    market_average = mean(r.avg_price for r in records)
    seasonal = seasonal_deviation(summary, target)

    decision: tuple[Action, Confidence, str, SignalType] | None = None

    if price <= global_min * (1 + thresholds.global_low_tolerance):
        decision = (
            Action.BUY_NOW,
            Confidence.VERY_HIGH,
            f"Price is at an all-time low ({currency}{_format_price(price)}). "
            "This is a rare buying opportunity.",
            SignalType.POSITIVE,
        )
    elif seasonal is not None:
        deviation = seasonal.deviation
        if deviation < thresholds.seasonal_buy_deviation:
            decision = (
                Action.BUY,
                Confidence.HIGH,
                f"Price is {abs(deviation):.1f}% lower than the typical average "
                f"for {seasonal.month}.",
                SignalType.POSITIVE,
            )
        elif seasonal.is_best_month and abs(deviation) < thresholds.best_month_band:
            decision = (
                Action.BUY,
                Confidence.MEDIUM,
                f"{seasonal.month} is historically the best time to buy. "
                "Price matches typical low trends.",
                SignalType.POSITIVE,
            )
        elif deviation > thresholds.seasonal_wait_deviation:
            decision = (
                Action.WAIT,
                Confidence.HIGH,
                f"Price is {deviation:.1f}% higher than usual for {seasonal.month}. "
                "Expect correction.",
                SignalType.NEGATIVE,
            )

    if decision is None:
        if price < market_average:
            decision = (
                Action.ACCUMULATE,
                Confidence.MEDIUM,
                f"Price is below the long-term market average "
                f"({currency}{market_average:.0f}), but not a steep bargain.",
                SignalType.NEUTRAL,
            )
        else:
            decision = (
                Action.WAIT,
                Confidence.MEDIUM,
                f"Price ({currency}{_format_price(price)}) is above average "
                f"({currency}{market_average:.0f}).",
                SignalType.NEGATIVE,
            )

    action, confidence, reason, signal = decision
    logger.debug("Recommendation for %s: %s (%s)", target.date, action.value, confidence.value)

    return Recommendation(
        action=action,
        confidence=confidence,
        reason=reason,
        type=signal,
        seasonal_analysis=seasonal,
        yoy=year_over_year(records, target),
        prediction=forecast_next_month(records, target.raw_date),
    )
