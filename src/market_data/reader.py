"""Spreadsheet byte-source: reads raw price rows from CSV, XLSX or JSON files.

Only the first worksheet of a workbook is read and its first row is the
header. Rows come back as plain dicts for the normalizer; a file that
cannot be opened or decoded fails fast with UnreadableSourceError.
"""

from __future__ import annotations

import csv
import json
import logging
import zipfile
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..analytics.normalizer import UnreadableSourceError, normalize
from ..common.models import PriceRecord

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES | {".csv", ".json"}


class NoUsableDataError(ValueError):
    """The source was readable but no row survived normalization."""


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with open(path, newline="", encoding="utf-8-sig") as f:
        return [dict(row) for row in csv.DictReader(f)]


def _read_excel(path: Path) -> list[dict[str, Any]]:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        columns = [
            (index, str(name).strip())
            for index, name in enumerate(header)
            if name is not None and str(name).strip()
        ]
        result = []
        for values in rows:
            if values is None or all(v is None for v in values):
                continue
            result.append({
                name: values[index] if index < len(values) and values[index] is not None else ""
                for index, name in columns
            })
        return result
    finally:
        workbook.close()


def _read_json(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("records", data.get("rows"))
    if not isinstance(data, list):
        raise UnreadableSourceError(f"{path} does not contain a list of rows")
    return data


def read_rows(path: str | Path) -> list[dict[str, Any]]:
    """Read raw rows from a spreadsheet file.

    Raises:
        UnreadableSourceError: Missing file, unsupported type, corrupt or
            undecodable content.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnreadableSourceError(
            f"Unsupported file type '{suffix}' (expected one of "
            f"{', '.join(sorted(SUPPORTED_SUFFIXES))})"
        )

    try:
        if suffix in EXCEL_SUFFIXES:
            rows = _read_excel(path)
        elif suffix == ".csv":
            rows = _read_csv(path)
        else:
            rows = _read_json(path)
    except UnreadableSourceError:
        raise
    except (
        OSError,
        UnicodeDecodeError,
        csv.Error,
        json.JSONDecodeError,
        zipfile.BadZipFile,
        InvalidFileException,
        KeyError,
    ) as e:
        raise UnreadableSourceError(f"Cannot read {path}: {e}") from e

    logger.info("Read %d rows from %s", len(rows), path)
    return rows


def load_records(path: str | Path) -> list[PriceRecord]:
    """Read and normalize a spreadsheet into PriceRecords.

    Raises:
        UnreadableSourceError: The file cannot be read.
        NoUsableDataError: No row has a valid date.
    """
    records = normalize(read_rows(path))
    if not records:
        raise NoUsableDataError(f"No usable price rows in {path}")
    return records
