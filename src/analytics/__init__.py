"""Analytics engine - normalization, seasonality, history and recommendations."""

from .bucketing import (
    LOOKAHEAD_PRESETS,
    align_seasonal,
    bucket_key,
    bucket_records,
    build_history,
    find_active_bucket,
)
from .market_stats import build_timing_guide, filter_by_region, list_regions, summarize_prices
from .normalizer import UnreadableSourceError, normalize, parse_date
from .pipeline import AnalysisRequest, build_report
from .recommendation import forecast_next_month, recommend
from .seasonality import analyze_seasonality
from .time_range import filter_by_range

__all__ = [
    "LOOKAHEAD_PRESETS",
    "AnalysisRequest",
    "UnreadableSourceError",
    "align_seasonal",
    "analyze_seasonality",
    "bucket_key",
    "bucket_records",
    "build_history",
    "build_report",
    "build_timing_guide",
    "filter_by_range",
    "filter_by_region",
    "find_active_bucket",
    "forecast_next_month",
    "list_regions",
    "normalize",
    "parse_date",
    "recommend",
    "summarize_prices",
]
