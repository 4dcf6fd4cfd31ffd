"""
Unit tests for money and period helpers: pure functions, no DB.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from utils.money import money_sum, percent_of, to_money
from utils.periods import (
    add_months,
    format_period,
    iter_periods,
    months_between,
    next_period,
    parse_period,
    period_key,
)


# ── to_money ─────────────────────────────────────────────────────────────────

class TestToMoney:
    def test_rounds_half_up_to_cents(self):
        assert to_money("10.005") == Decimal("10.01")
        assert to_money("10.004") == Decimal("10.00")

    def test_float_goes_through_str(self):
        assert to_money(0.1 + 0.2) == Decimal("0.30")

    def test_int(self):
        assert to_money(50000) == Decimal("50000.00")

    @pytest.mark.parametrize("value", ["abc", None, True, "NaN", "Infinity"])
    def test_rejects_non_amounts(self, value):
        with pytest.raises(ValueError):
            to_money(value)

    def test_percent_of(self):
        assert percent_of(Decimal("1200000"), 10) == Decimal("120000.00")
        assert percent_of("33.33", "7.5") == Decimal("2.50")

    def test_money_sum(self):
        assert money_sum(["0.10", 0.2, Decimal("0.30")]) == Decimal("0.60")
        assert money_sum([]) == Decimal("0.00")


# ── periods ──────────────────────────────────────────────────────────────────

class TestPeriods:
    def test_period_key_is_first_of_month(self):
        assert period_key(date(2025, 2, 17)) == date(2025, 2, 1)

    @pytest.mark.parametrize("value", ["2025-02", "2025-02-01", "2025-02-28", date(2025, 2, 9), datetime(2025, 2, 9, 13)])
    def test_parse_period_equivalent_forms(self, value):
        assert parse_period(value) == date(2025, 2, 1)

    @pytest.mark.parametrize("value", ["2025", "2025-13", "2025-02-30", "feb-2025", ""])
    def test_parse_period_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_period(value)

    def test_format_period(self):
        assert format_period(date(2025, 3, 15)) == "2025-03-01"

    def test_add_months_across_year(self):
        assert add_months(date(2025, 11, 1), 3) == date(2026, 2, 1)
        assert add_months(date(2025, 1, 1), -1) == date(2024, 12, 1)

    def test_next_period(self):
        assert next_period(date(2025, 12, 20)) == date(2026, 1, 1)

    def test_iter_periods_half_open(self):
        periods = list(iter_periods(date(2025, 1, 15), date(2025, 4, 1)))
        assert periods == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]


class TestMonthsBetween:
    def test_whole_months(self):
        assert months_between(date(2025, 7, 1), date(2025, 10, 1)) == 3

    def test_partial_month_rounds_up(self):
        assert months_between(date(2025, 7, 1), date(2025, 8, 15)) == 2

    def test_short_stay_counts_one_month(self):
        assert months_between(date(2025, 7, 1), date(2025, 7, 10)) == 1

    def test_end_day_before_start_day(self):
        assert months_between(date(2025, 7, 15), date(2025, 9, 10)) == 2

