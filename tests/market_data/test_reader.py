"""Tests for the spreadsheet reader."""

from __future__ import annotations

import json
from datetime import date, datetime

import pytest
from openpyxl import Workbook

from src.analytics.normalizer import UnreadableSourceError
from src.market_data.reader import NoUsableDataError, load_records, read_rows


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "onion.csv"
    path.write_text(
        "\ufeffState,Commodity,Arrival_Date,Min Price,Max Price,Modal Price\n"
        "Maharashtra,Onion,15/02/2023,1200,1600,1400\n"
        "Karnataka,Onion,01/02/2023,1100,1500,1300\n"
        "Karnataka,Onion,,1000,1400,1200\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def xlsx_file(tmp_path):
    path = tmp_path / "onion.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.append(["Date", "State", "Min", "Max", "Avg", None])
    ws.append([datetime(2023, 3, 1), "Gujarat", 900, 1300, 1100, "ignored"])
    ws.append([44958, "Gujarat", 950, None, 1150, None])
    ws.append([None, None, None, None, None, None])
    wb.save(path)
    return path


class TestReadRows:
    def test_csv(self, csv_file):
        rows = read_rows(csv_file)
        assert len(rows) == 3
        assert rows[0]["State"] == "Maharashtra"
        assert rows[0]["Modal Price"] == "1400"

    def test_xlsx(self, xlsx_file):
        rows = read_rows(xlsx_file)
        assert len(rows) == 2
        assert rows[0]["Date"] == datetime(2023, 3, 1)
        assert rows[1]["Date"] == 44958
        assert rows[1]["Max"] == ""
        assert set(rows[0]) == {"Date", "State", "Min", "Max", "Avg"}

    def test_json(self, tmp_path):
        path = tmp_path / "rows.json"
        path.write_text(json.dumps({"records": [{"date": "2023-01-05", "avg": 10}]}))
        assert read_rows(path) == [{"date": "2023-01-05", "avg": 10}]

    def test_unsupported_type(self, tmp_path):
        path = tmp_path / "prices.txt"
        path.write_text("hello")
        with pytest.raises(UnreadableSourceError, match="Unsupported"):
            read_rows(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(UnreadableSourceError):
            read_rows(tmp_path / "missing.csv")

    def test_corrupt_workbook(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"definitely not a zip archive")
        with pytest.raises(UnreadableSourceError):
            read_rows(path)

    def test_json_not_a_list(self, tmp_path):
        path = tmp_path / "rows.json"
        path.write_text('{"rows": 5}')
        with pytest.raises(UnreadableSourceError):
            read_rows(path)


class TestLoadRecords:
    def test_csv_records(self, csv_file):
        records = load_records(csv_file)

        assert [r.date for r in records] == ["2023-02-01", "2023-02-15"]
        assert records[0].region == "Karnataka"
        assert records[0].commodity == "Onion"
        assert records[1].avg_price == 1400.0

    def test_xlsx_records(self, xlsx_file):
        records = load_records(xlsx_file)

        assert [r.raw_date for r in records] == [date(2023, 2, 1), date(2023, 3, 1)]
        assert records[0].max_price == 0.0
        assert records[1].region == "Gujarat"

    def test_no_usable_rows(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("Date,Avg\nnot-a-date,10\n", encoding="utf-8")
        with pytest.raises(NoUsableDataError):
            load_records(path)
