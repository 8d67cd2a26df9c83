"""Running price aggregates shared by the seasonal and historical views."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from datetime import date

from ..common.models import PriceRecord


@dataclass
class PriceAccumulator:
    """Mean of averages, min of minimums, max of maximums, count."""

    total: float = 0.0
    count: int = 0
    min_price: float = float("inf")
    max_price: float = float("-inf")
    first_date: date | None = None

    def add(self, record: PriceRecord) -> None:
        self.total += record.avg_price
        self.count += 1
        self.min_price = min(self.min_price, record.min_price)
        self.max_price = max(self.max_price, record.max_price)
        if self.first_date is None or record.raw_date < self.first_date:
            self.first_date = record.raw_date

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0


def accumulate(
    records: Iterable[PriceRecord],
    key: Callable[[PriceRecord], Hashable],
) -> dict[Hashable, PriceAccumulator]:
    """Group records by ``key`` into accumulators (insertion ordered)."""
    groups: dict[Hashable, PriceAccumulator] = {}
    for record in records:
        groups.setdefault(key(record), PriceAccumulator()).add(record)
    return groups


def year_month(record: PriceRecord) -> tuple[int, int]:
    return record.raw_date.year, record.raw_date.month
