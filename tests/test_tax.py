"""Tests for the personal income tax calculator."""

import pytest

from fire_planner.models.assumptions_registry import AUS_2025_26
from fire_planner.models.tax import (
    bracket_tax,
    income_tax,
    medicare_levy,
    run_tax,
    tax_offset,
    taxable_super_withdrawal,
)

BRACKETS = AUS_2025_26.tax_brackets


class TestBracketTax:
    """Test cases for progressive bracket tax."""

    @pytest.mark.parametrize(
        "income,expected",
        [
            (0, 0),
            (18200, 0),
            (45000, 4288),
            (100000, 20788),
            (200000, 56138),
        ],
    )
    def test_bracket_tax(self, income, expected):
        assert bracket_tax(income, BRACKETS) == pytest.approx(expected)

    def test_negative_income_has_no_tax(self):
        assert bracket_tax(-5000, BRACKETS) == 0


class TestLevyAndOffset:
    """Test cases for the Medicare levy and low income offset."""

    def test_levy_zero_below_threshold(self):
        assert medicare_levy(29207, AUS_2025_26.medicare_levy) == 0

    def test_levy_shaded_in_over_band(self):
        levy = medicare_levy(30000, AUS_2025_26.medicare_levy)

        assert levy == pytest.approx(30000 * 0.02 * (30000 - 29207) / 3040)
        assert 0 < levy < 600

    def test_levy_flat_above_band(self):
        assert medicare_levy(50000, AUS_2025_26.medicare_levy) == pytest.approx(1000)

    def test_offset_tapers_to_zero(self):
        offset = AUS_2025_26.tax_offset

        assert tax_offset(30000, offset) == 700
        assert tax_offset(40000, offset) == pytest.approx(575)
        assert tax_offset(60000, offset) == 0


class TestIncomeTax:
    """Test cases for total tax payable."""

    def test_offset_cannot_make_tax_negative(self):
        assert income_tax(20000, AUS_2025_26) == 0

    def test_tax_on_100k(self):
        assert income_tax(100000, AUS_2025_26) == pytest.approx(22788)

    def test_super_withdrawals_tax_free_from_access_age(self):
        assert taxable_super_withdrawal(10000, 59, AUS_2025_26) == 10000
        assert taxable_super_withdrawal(10000, 60, AUS_2025_26) == 0

    def test_run_tax_per_person(self):
        result = run_tax(
            AUS_2025_26,
            {"a": 55, "b": 62},
            {"a": 50000.0},
            {"a": 0.0, "b": 40000.0},
        )

        assert result.taxable_income == {"a": 50000.0, "b": 0.0}
        assert result.tax_payable["a"] == pytest.approx(income_tax(50000, AUS_2025_26))
        assert result.tax_payable["b"] == 0
