"""Tests for the assumptions registry and bundle checks."""

import pytest
from pydantic import ValidationError

from fire_planner.models.assumptions import DrawdownBand, SuperannuationRules, TaxBracket
from fire_planner.models.assumptions_registry import (
    AUS_2025_26,
    get_assumptions,
    get_assumptions_metadata,
    list_assumptions,
    validate_assumptions,
)


class TestRegistry:
    """Test cases for looking up registered bundles."""

    def test_lookup_by_id(self):
        assert get_assumptions("AUS_2025_26") is AUS_2025_26

    def test_unknown_id(self):
        assert get_assumptions("NZ_2030") is None
        assert get_assumptions_metadata("NZ_2030") is None

    def test_listing_summary_omits_data(self):
        summaries = [entry.summary() for entry in list_assumptions()]

        assert summaries[0]["id"] == "AUS_2025_26"
        assert summaries[0]["is_current"] is True
        assert "data" not in summaries[0]

    def test_bundles_are_immutable(self):
        with pytest.raises(ValidationError):
            AUS_2025_26.id = "changed"

    def test_preservation_age(self):
        assert AUS_2025_26.preservation_age == 60


class TestValidateAssumptions:
    """Test cases for cross-field consistency checks."""

    def test_registered_bundle_is_valid(self):
        assert validate_assumptions(AUS_2025_26) == []

    def test_overlapping_brackets(self):
        bundle = AUS_2025_26.model_copy(
            update={
                "tax_brackets": [
                    TaxBracket(min_income=0, max_income=20000, rate=0.0),
                    TaxBracket(min_income=15000, max_income=None, rate=0.3),
                ]
            }
        )

        assert validate_assumptions(bundle) == ["Tax bracket 2: brackets must not overlap"]

    def test_open_bracket_must_be_last(self):
        bundle = AUS_2025_26.model_copy(
            update={
                "tax_brackets": [
                    TaxBracket(min_income=0, max_income=None, rate=0.0),
                    TaxBracket(min_income=20000, max_income=None, rate=0.3),
                ]
            }
        )

        assert "Tax bracket 1: only the top bracket may be open-ended" in validate_assumptions(
            bundle
        )

    def test_decreasing_drawdown_rates(self):
        rules = SuperannuationRules(
            minimum_drawdown_rates=[
                DrawdownBand(min_age=60, rate=0.05),
                DrawdownBand(min_age=65, rate=0.04),
            ]
        )
        bundle = AUS_2025_26.model_copy(update={"superannuation": rules})

        assert validate_assumptions(bundle) == [
            "Minimum drawdown rates must not decrease with age"
        ]

    def test_drawdown_bands_sorted_by_age(self):
        rules = SuperannuationRules(
            minimum_drawdown_rates=[
                DrawdownBand(min_age=65, rate=0.05),
                DrawdownBand(min_age=60, rate=0.04),
            ]
        )

        assert [band.min_age for band in rules.minimum_drawdown_rates] == [60, 65]
        assert rules.minimum_drawdown_rate(62) == 0.04
