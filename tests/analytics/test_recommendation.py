"""Tests for the recommendation engine and next-month forecast."""

from __future__ import annotations

from datetime import date

import pytest

from src.analytics.recommendation import forecast_next_month, recommend
from src.analytics.seasonality import analyze_seasonality
from src.common.config import RecommendationThresholds
from src.common.models import Action, Confidence, Direction, SignalType

from conftest import make_record


def _recommend(records, **kwargs):
    return recommend(records, analyze_seasonality(records), **kwargs)


class TestDecisionTree:
    def test_empty_records(self):
        rec = recommend([], None)
        assert rec.action == Action.UNKNOWN
        assert rec.confidence == Confidence.LOW
        assert rec.reason == "No data available"
        assert rec.prediction is None

    def test_global_low_buy_now(self):
        records = [make_record(date(2023, 1, 1), 100), make_record(date(2023, 2, 1), 200)]
        rec = _recommend(records, target=records[0])
        assert rec.action == Action.BUY_NOW
        assert rec.confidence == Confidence.VERY_HIGH
        assert rec.type == SignalType.POSITIVE
        assert "all-time low" in rec.reason

    def test_within_five_percent_of_low(self):
        records = [
            make_record(date(2023, 1, 1), 100, low=100),
            make_record(date(2023, 2, 1), 104, low=104),
        ]
        assert _recommend(records).action == Action.BUY_NOW

    def test_seasonal_discount_buy(self):
        records = [
            make_record(date(2021, 3, 1), 200),
            make_record(date(2021, 6, 1), 60),
            make_record(date(2022, 3, 1), 200),
            make_record(date(2023, 3, 1), 150),
        ]
        rec = _recommend(records)
        assert rec.action == Action.BUY
        assert rec.confidence == Confidence.HIGH
        assert rec.type == SignalType.POSITIVE
        assert rec.seasonal_analysis.month == "March"
        assert rec.seasonal_analysis.deviation < -10

    def test_best_month_buy(self):
        records = [
            make_record(date(2022, 1, 10), 100),
            make_record(date(2022, 6, 10), 300, low=80),
            make_record(date(2023, 1, 10), 100, low=95),
        ]
        rec = _recommend(records)
        assert rec.action == Action.BUY
        assert rec.confidence == Confidence.MEDIUM
        assert rec.seasonal_analysis.is_best_month is True
        assert rec.seasonal_analysis.deviation == pytest.approx(-5.0)

    def test_seasonal_premium_wait(self):
        records = [
            make_record(date(2021, 5, 1), 100),
            make_record(date(2021, 8, 1), 80),
            make_record(date(2022, 5, 1), 100),
            make_record(date(2023, 5, 1), 150),
        ]
        rec = _recommend(records)
        assert rec.action == Action.WAIT
        assert rec.confidence == Confidence.HIGH
        assert rec.type == SignalType.NEGATIVE
        assert "Expect correction" in rec.reason

    def test_seasonal_neutral_falls_through_to_average(self):
        records = [
            make_record(date(2022, 5, 1), 200),
            make_record(date(2022, 8, 1), 150, low=100),
            make_record(date(2022, 9, 1), 400),
            make_record(date(2023, 5, 1), 200),
        ]
        rec = _recommend(records)
        assert rec.action == Action.ACCUMULATE
        assert rec.confidence == Confidence.MEDIUM
        assert rec.type == SignalType.NEUTRAL
        assert rec.seasonal_analysis is not None
        assert rec.seasonal_analysis.deviation == pytest.approx(-5.0)

    def test_above_average_without_seasonality(self):
        records = [
            make_record(date(2023, 1, 1), 100, low=50),
            make_record(date(2023, 2, 1), 100, low=120),
        ]
        rec = recommend(records, None)
        assert rec.action == Action.WAIT
        assert rec.confidence == Confidence.MEDIUM
        assert rec.type == SignalType.NEGATIVE
        assert rec.seasonal_analysis is None

    def test_custom_thresholds(self):
        records = [
            make_record(date(2023, 1, 1), 100, low=50),
            make_record(date(2023, 2, 1), 100, low=70),
        ]
        loose = RecommendationThresholds(global_low_tolerance=0.5)
        assert recommend(records, None, thresholds=loose).action == Action.BUY_NOW
        assert recommend(records, None).action == Action.ACCUMULATE

    def test_zero_prices_do_not_crash(self):
        records = [make_record(date(2022, 1, 1), 0, low=0, high=0),
                   make_record(date(2023, 1, 1), 0, low=0, high=0)]
        rec = _recommend(records)
        assert rec.action == Action.BUY_NOW
        assert rec.seasonal_analysis is None
        assert rec.yoy is None


class TestYearOverYear:
    def test_omitted_without_prior_year(self):
        records = [make_record(date(2023, 1, 1), 100), make_record(date(2023, 2, 1), 200)]
        assert _recommend(records).yoy is None

    def test_compares_same_month_last_year(self, multi_year_records):
        rec = _recommend(multi_year_records)
        # Target: Karnataka, Dec 2023, min = 1600 + 200 + 50 - 10
        assert rec.yoy.previous_year == 2022
        assert rec.yoy.previous_price == pytest.approx(1725)
        assert rec.yoy.change == pytest.approx((1840 - 1725) / 1725 * 100)

    def test_explicit_target(self, multi_year_records):
        target = multi_year_records[0]
        rec = _recommend(multi_year_records, target=target)
        assert rec.yoy is None
        assert rec.seasonal_analysis.month == "January"
        # -7% against January's average is neither a discount nor a premium
        assert rec.action == Action.ACCUMULATE


class TestForecast:
    def test_single_negative_transition(self):
        records = [
            make_record(date(2022, 3, 1), 200),
            make_record(date(2022, 4, 1), 150),
            make_record(date(2023, 3, 1), 180),
        ]
        prediction = forecast_next_month(records, date(2023, 3, 1))
        assert prediction.direction == Direction.DOWN
        assert prediction.sample_size == 1
        assert prediction.probability == 100
        assert prediction.avg_change == pytest.approx(-25.0)
        assert prediction.next_month == "April"

    def test_december_rolls_into_january(self, multi_year_records):
        prediction = forecast_next_month(multi_year_records, date(2023, 12, 16))
        assert prediction.direction == Direction.UP
        assert prediction.sample_size == 2
        assert prediction.probability == 100
        assert prediction.next_month == "January"

    def test_even_split_is_up(self):
        records = [
            make_record(date(2021, 5, 1), 100),
            make_record(date(2021, 6, 1), 110),
            make_record(date(2022, 5, 1), 100),
            make_record(date(2022, 6, 1), 90),
            make_record(date(2023, 5, 1), 100),
        ]
        prediction = forecast_next_month(records, date(2023, 5, 1))
        assert prediction.direction == Direction.UP
        assert prediction.probability == 50
        assert prediction.avg_change == pytest.approx(0.0)

    def test_mostly_down_reports_down_confidence(self):
        records = [
            make_record(date(2020, 5, 1), 100), make_record(date(2020, 6, 1), 90),
            make_record(date(2021, 5, 1), 100), make_record(date(2021, 6, 1), 80),
            make_record(date(2022, 5, 1), 100), make_record(date(2022, 6, 1), 120),
            make_record(date(2023, 5, 1), 100),
        ]
        prediction = forecast_next_month(records, date(2023, 5, 1))
        assert prediction.direction == Direction.DOWN
        assert prediction.probability == pytest.approx(100 - 100 / 3)

    def test_no_history_returns_none(self):
        records = [make_record(date(2023, 5, 1), 100), make_record(date(2023, 6, 1), 120)]
        assert forecast_next_month(records, date(2023, 5, 1)) is None
        assert _recommend(records).prediction is None

    def test_attached_to_recommendation(self, multi_year_records):
        rec = _recommend(multi_year_records)
        assert rec.prediction is not None
        assert rec.prediction.next_month == "January"
