"""Shared test fixtures for Mandi Price Analytics."""

import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.models import PriceRecord


def make_record(
    day: date,
    avg: float,
    low: float | None = None,
    high: float | None = None,
    region: str | None = None,
) -> PriceRecord:
    """Build a record with min/max defaulting to avg ∓ 10."""
    return PriceRecord(
        raw_date=day,
        region=region,
        min_price=avg - 10 if low is None else low,
        max_price=avg + 10 if high is None else high,
        avg_price=avg,
    )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_rows() -> list[dict]:
    """Two January rows a year apart, in spreadsheet form."""
    return [
        {"Date": "01/01/2023", "Min Price": "100", "Max Price": "120", "Avg Price": "110"},
        {"Date": "01/01/2024", "Min Price": "80", "Max Price": "100", "Avg Price": "90"},
    ]


@pytest.fixture
def multi_year_records() -> list[PriceRecord]:
    """Three years of monthly onion prices in two states.

    Prices dip in October-November (harvest) and peak in June-July.
    """
    seasonal = {1: 1800, 2: 1700, 3: 1600, 4: 1700, 5: 1900, 6: 2300,
                7: 2400, 8: 2200, 9: 2000, 10: 1500, 11: 1400, 12: 1600}
    records = []
    for year, drift in ((2021, 0), (2022, 100), (2023, 200)):
        for month, price in seasonal.items():
            records.append(make_record(date(year, month, 15), price + drift, region="Maharashtra"))
            records.append(make_record(date(year, month, 16), price + drift + 50, region="Karnataka"))
    return records
