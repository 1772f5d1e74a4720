"""Tests for chart series."""

import pytest

from fire_planner.models.charts import build_chart_data, bridge_requirement, super_sustainability
from fire_planner.models.projection import run_projection
from fire_planner.models.timeline import BridgeIncomeBreakdown, YearRow


class TestChartHelpers:
    """Test cases for per-row chart values."""

    def test_bridge_requirement_with_partial_income(self):
        row = YearRow(
            year=2030,
            ages={"p1": 40},
            bridge_income=BridgeIncomeBreakdown(part_time_income=10000),
            bridge_expenses=50000,
        )

        assert bridge_requirement(row) == pytest.approx(40000)

    def test_bridge_requirement_without_income(self):
        row = YearRow(year=2030, ages={"p1": 40}, bridge_expenses=50000)

        assert bridge_requirement(row) == 0.0

    def test_super_sustainability(self):
        row = YearRow(
            year=2050,
            ages={"p1": 60},
            total_super=400000,
            super_withdrawals={"p1": 20000},
        )

        assert super_sustainability(row) == pytest.approx(20)

    def test_super_sustainability_without_withdrawals(self):
        row = YearRow(year=2050, ages={"p1": 60}, total_super=400000)

        assert super_sustainability(row) == 0.0


class TestBuildChartData:
    """Test cases for chart assembly."""

    def test_series_aligned_with_timeline(self, single_request):
        timeline = run_projection(single_request)

        charts = build_chart_data(timeline)

        years = [row.year for row in timeline]
        assert charts.assets_over_time.years == years
        assert len(charts.assets_over_time.super_balances) == len(timeline)
        assert charts.income_vs_expenses.surplus == [row.surplus_deficit for row in timeline]
        assert len(charts.fire_timeline.super_sustainability) == len(timeline)
        assert charts.monte_carlo_results is None

    def test_feasibility_score_is_binary(self, single_request):
        charts = build_chart_data(run_projection(single_request))

        assert set(charts.fire_timeline.feasibility_score) <= {0.0, 100.0}
