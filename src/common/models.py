"""Shared Pydantic data models for Mandi Price Analytics.

These models define the data contracts between the analytics engine and
its collaborators (spreadsheet reader, record store, presentation layer).
All models are frozen: analysis functions never mutate what they receive.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
MONTH_ABBREVIATIONS = [name[:3] for name in MONTH_NAMES]

# Cell types kept in PriceRecord.extra
ExtraValue = str | int | float | bool | None


# === Enums ===

class TimeRange(str, Enum):
    """Trailing windows anchored to the latest record of a data set."""
    SEVEN_DAYS = "7D"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    ALL = "All"


class Granularity(str, Enum):
    """Bucket sizes for the historical timeline."""
    MONTH = "Month"
    QUARTER = "Quarter"
    HALF_YEAR = "HalfYear"
    YEAR = "Year"


class Action(str, Enum):
    """Actions a recommendation can suggest."""
    BUY_NOW = "Buy Now"
    BUY = "Buy"
    ACCUMULATE = "Accumulate"
    WAIT = "Wait"
    UNKNOWN = "Unknown"


class Confidence(str, Enum):
    """Confidence attached to a recommendation."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"


class SignalType(str, Enum):
    """Tone of a recommendation, used for presentation only."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Direction(str, Enum):
    """Forecast direction for the next calendar month."""
    UP = "UP"
    DOWN = "DOWN"


class TimingTier(str, Enum):
    """Buying tier of a calendar month in the timing guide."""
    BEST = "best"
    NEUTRAL = "neutral"
    AVOID = "avoid"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# === Records ===

class PriceRecord(_Frozen):
    """Single normalized price observation.

    ``raw_date`` is the true calendar date; ``date`` is its ISO-8601 text
    form (YYYY-MM-DD) used as the display and grouping key.
    """
    raw_date: dt.date
    region: str | None = None
    commodity: str | None = None
    min_price: float = 0.0
    max_price: float = 0.0
    avg_price: float = 0.0
    extra: dict[str, ExtraValue] = Field(default_factory=dict)

    @computed_field
    @property
    def date(self) -> str:
        return self.raw_date.isoformat()

    def __hash__(self) -> int:
        return hash((
            self.raw_date, self.region, self.commodity,
            self.min_price, self.max_price, self.avg_price,
            tuple(sorted(self.extra.items())),
        ))

    def to_row(self) -> dict[str, Any]:
        """Flatten back into a raw row that normalizes to an equal record."""
        row: dict[str, Any] = {
            "date": self.date,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "avg_price": self.avg_price,
        }
        if self.region is not None:
            row["region"] = self.region
        if self.commodity is not None:
            row["commodity"] = self.commodity
        row.update(self.extra)
        return row


# === Seasonality ===

class YearPrice(_Frozen):
    """Mean average price of one calendar month in one year."""
    year: int
    price: float


class MonthlyStat(_Frozen):
    """Aggregate for one calendar month across all years present.

    Months without data have ``count == 0`` and zeroed prices; check
    ``count`` before using the prices.
    """
    month: str
    month_number: int = Field(ge=1, le=12)
    avg_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    count: int = 0
    history: list[YearPrice] = []


class SeasonalitySummary(_Frozen):
    """Twelve monthly statistics plus the historically cheapest/dearest months."""
    monthly_averages: list[MonthlyStat]
    best_month: MonthlyStat
    worst_month: MonthlyStat

    def for_month(self, month_number: int) -> MonthlyStat:
        return self.monthly_averages[month_number - 1]


# === Historical buckets ===

class Bucket(_Frozen):
    """One point of a historical aggregate series."""
    key: str
    label: str
    sort_key: dt.date
    avg_price: float
    min_price: float
    max_price: float
    count: int


class AlignedSeries(_Frozen):
    """Statistics of one month offset, one point per year of the alignment.

    ``points[i]`` belongs to ``SeasonalAlignment.years[i]``; ``None`` marks a
    year without data for the (possibly rolled-over) month.
    """
    offset: int
    month_number: int
    label: str
    points: list[Bucket | None]


class SeasonalAlignment(_Frozen):
    """Month-offset series laid out on a shared year axis."""
    anchor_month: int
    lookahead: int
    years: list[int]
    series: list[AlignedSeries]


class HistoryView(_Frozen):
    """Output of the bucketing engine in either of its two modes."""
    granularity: Granularity
    buckets: list[Bucket] = []
    alignment: SeasonalAlignment | None = None
    active_index: int | None = None

    @property
    def is_aligned(self) -> bool:
        return self.alignment is not None


# === Recommendation ===

class SeasonalAnalysis(_Frozen):
    """Deviation of the current price from its month's historical average."""
    month: str
    average: float
    deviation: float
    is_best_month: bool


class YearOverYear(_Frozen):
    """Current price against the same month of the previous year."""
    previous_year: int
    previous_price: float
    change: float


class Prediction(_Frozen):
    """Next-month direction derived from historical month-to-month moves."""
    direction: Direction
    probability: float = Field(ge=0, le=100)
    avg_change: float
    sample_size: int = Field(ge=1)
    next_month: str


class Recommendation(_Frozen):
    """Actionable buy/wait signal with its supporting analyses."""
    action: Action
    confidence: Confidence
    reason: str
    type: SignalType
    seasonal_analysis: SeasonalAnalysis | None = None
    yoy: YearOverYear | None = None
    prediction: Prediction | None = None


# === Market statistics ===

class PriceStats(_Frozen):
    """Headline statistics of a record set."""
    min_price: float
    min_date: str
    max_price: float
    max_date: str
    avg_price: float
    count: int


class TimingEntry(_Frozen):
    """One month of the annual timing guide."""
    stat: MonthlyStat
    tier: TimingTier
    diff_from_average: float


class TimingGuide(_Frozen):
    """Best/neutral/avoid months ranked by their seasonal average."""
    seasonal_average: float
    ideal_price: float
    avoid_threshold: float
    best: list[TimingEntry]
    neutral: list[TimingEntry]
    avoid: list[TimingEntry]


# === Report ===

class MarketReport(_Frozen):
    """Everything the dashboard renders for one set of filter parameters."""
    region: str
    time_range: TimeRange
    records: list[PriceRecord]
    target: PriceRecord | None = None
    stats: PriceStats | None = None
    seasonality: SeasonalitySummary | None = None
    timing_guide: TimingGuide | None = None
    recommendation: Recommendation
    history: HistoryView
