"""Raw spreadsheet rows → canonical PriceRecord sequences.

Column headers are matched case-insensitively by substring through the
ordered HEADER_RULES table; the first rule whose pattern occurs in the
header decides the target field. Headers no rule recognises are kept in
``PriceRecord.extra`` under their lowercased name.

Parsing is lenient on purpose: a bad row is dropped, a bad price becomes 0.
A zero price always wins the global-minimum check, so the number of coerced
prices is logged as a data-quality warning.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from typing import Any

from ..common.models import ExtraValue, PriceRecord

logger = logging.getLogger(__name__)

# Spreadsheet serial day 0 (the 1900 date system, leap-year bug included)
SPREADSHEET_EPOCH = datetime(1899, 12, 30)

# (field, header substrings), first match wins
HEADER_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("date", ("date",)),
    ("region", ("state", "region")),
    ("min_price", ("min",)),
    ("max_price", ("max",)),
    ("avg_price", ("avg", "average", "modal")),
    ("commodity", ("commodity",)),
]

PRICE_FIELDS = ("min_price", "max_price", "avg_price")

_GENERIC_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%Y%m%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d-%b-%Y",
)


class UnreadableSourceError(ValueError):
    """The input as a whole cannot be read as a collection of rows."""


def match_header(header: str) -> str | None:
    """Return the PriceRecord field a column header maps to, if any."""
    clean = header.strip().lower()
    for field_name, patterns in HEADER_RULES:
        if any(pattern in clean for pattern in patterns):
            return field_name
    return None


def parse_date(value: Any) -> date | None:
    """Parse a spreadsheet date cell.

    Precedence: date objects, serial day-counts, DD/MM/YYYY strings, then a
    generic parse. Returns None when nothing yields a valid date.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return (SPREADSHEET_EPOCH + timedelta(days=value)).date()
        except OverflowError:
            return None

    text = str(value).strip()
    if not text:
        return None

    parts = text.split("/")
    if len(parts) == 3:
        try:
            day, month, year = (int(p) for p in parts)
            return date(year, month, day)
        except ValueError:
            pass

    return _parse_generic_date(text)


def _parse_generic_date(text: str) -> date | None:
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _GENERIC_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def coerce_price(value: Any) -> tuple[float, bool]:
    """Convert a price cell to float.

    Returns ``(price, coerced)`` where ``coerced`` is True when the value was
    missing or non-numeric and 0.0 was substituted.
    """
    if isinstance(value, bool):
        return float(value), False
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = "" if value is None else str(value).strip()
        if not text:
            return 0.0, True
        try:
            number = float(text)
        except ValueError:
            return 0.0, True
    if not math.isfinite(number):
        return 0.0, True
    return number, False


def extra_value(value: Any) -> ExtraValue:
    """Reduce an unrecognised cell to a JSON scalar.

    Date and time cells become ISO text and non-finite floats become None,
    so stored records load back equal to the originals.
    """
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def normalize_row(row: Mapping[str, Any]) -> tuple[PriceRecord | None, int]:
    """Normalize one raw row.

    Returns the record (None when the row has no valid date) and the number
    of price fields that had to be coerced to 0.
    """
    raw_date: date | None = None
    fields: dict[str, Any] = {}
    extra: dict[str, ExtraValue] = {}
    coerced = 0

    for key, value in row.items():
        header = str(key)
        target = match_header(header)
        if target == "date":
            raw_date = parse_date(value)
        elif target in PRICE_FIELDS:
            fields[target], was_coerced = coerce_price(value)
            coerced += was_coerced
        elif target is not None:
            fields[target] = None if value is None else str(value).strip()
        else:
            extra[header.strip().lower()] = extra_value(value)

    if raw_date is None:
        return None, 0

    for name in PRICE_FIELDS:
        if name not in fields:
            fields[name] = 0.0
            coerced += 1

    return PriceRecord(raw_date=raw_date, extra=extra, **fields), coerced


def normalize(rows: Iterable[Mapping[str, Any] | PriceRecord]) -> list[PriceRecord]:
    """Convert raw rows into PriceRecords sorted ascending by date.

    Rows without a usable date, and rows that are not mappings, are dropped.

    Raises:
        UnreadableSourceError: ``rows`` is not an iterable of rows.
    """
    if rows is None or isinstance(rows, (str, bytes, Mapping)):
        raise UnreadableSourceError(
            f"Expected a collection of rows, got {type(rows).__name__}"
        )
    try:
        items = list(rows)
    except TypeError as e:
        raise UnreadableSourceError(
            f"Expected a collection of rows, got {type(rows).__name__}"
        ) from e

    records: list[PriceRecord] = []
    dropped = 0
    coerced_total = 0

    for index, row in enumerate(items):
        if isinstance(row, PriceRecord):
            row = row.to_row()
        if not isinstance(row, Mapping):
            logger.debug("Row %d is not a mapping (%s), dropped", index, type(row).__name__)
            dropped += 1
            continue

        record, coerced = normalize_row(row)
        if record is None:
            logger.debug("Row %d has no valid date, dropped", index)
            dropped += 1
            continue
        records.append(record)
        coerced_total += coerced

    records.sort(key=lambda r: r.raw_date)

    logger.info(
        "Normalized %d/%d rows (%d dropped)", len(records), len(items), dropped
    )
    if coerced_total:
        logger.warning(
            "%d price values were missing or non-numeric and were set to 0 "
            "so averages and the all-time low may be distorted",
            coerced_total,
        )
    return records
