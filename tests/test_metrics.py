"""Tests for derived metric functions and their Polars twins."""

import math

import polars as pl
import pytest

from adrollup.analytics import metrics
from adrollup.analytics.expressions import derived_metrics_expr


class TestZeroDenominators:
    """Every ratio is 0.0 when its denominator is zero."""

    @pytest.mark.parametrize(
        "value",
        [
            metrics.cpl(100.0, 0),
            metrics.ctr(10, 0),
            metrics.cpm(100.0, 0),
            metrics.cpc(100.0, 0),
            metrics.frequency(1000, 0),
            metrics.roas(500.0, 0),
            metrics.cost_per_purchase(100.0, 0),
            metrics.conversion_rate(5, 0),
            metrics.cost_per_result(100.0, 0, 0),
        ],
    )
    def test_returns_zero(self, value: float) -> None:
        assert value == 0.0
        assert math.isfinite(value)

    def test_zero_spend_and_volume(self) -> None:
        """0 / 0 is 0, not NaN."""
        assert metrics.cpl(0.0, 0.0) == 0.0


class TestRatios:
    """Known values for each metric."""

    def test_cpl(self) -> None:
        assert metrics.cpl(150.0, 10) == 15.0

    def test_ctr_is_percent(self) -> None:
        assert metrics.ctr(25, 1000) == pytest.approx(2.5)

    def test_cpm(self) -> None:
        assert metrics.cpm(50.0, 10_000) == pytest.approx(5.0)

    def test_cpc(self) -> None:
        assert metrics.cpc(30.0, 60) == pytest.approx(0.5)

    def test_frequency(self) -> None:
        assert metrics.frequency(3000, 1000) == pytest.approx(3.0)

    def test_roas(self) -> None:
        assert metrics.roas(400.0, 100.0) == pytest.approx(4.0)

    def test_conversion_rate(self) -> None:
        assert metrics.conversion_rate(5, 200) == pytest.approx(2.5)


class TestDeltaPct:
    """Period-over-period change."""

    def test_growth(self) -> None:
        assert metrics.delta_pct(150.0, 100.0) == 50.0

    def test_decline(self) -> None:
        assert metrics.delta_pct(75.0, 100.0) == pytest.approx(-25.0)

    def test_previous_zero_is_zero(self) -> None:
        assert metrics.delta_pct(150.0, 0.0) == 0.0


class TestCostPerResult:
    """Objective-aware cost per result."""

    def test_without_objective_prefers_purchases(self) -> None:
        assert metrics.cost_per_result(100.0, purchases=4, leads=10) == 25.0

    def test_without_objective_falls_back_to_leads(self) -> None:
        assert metrics.cost_per_result(100.0, purchases=0, leads=10) == 10.0

    def test_sales_objective_uses_purchases(self) -> None:
        value = metrics.cost_per_result(
            100.0, purchases=2, leads=10, clicks=50, objective="Vendas"
        )
        assert value == 50.0

    def test_traffic_objective_uses_clicks(self) -> None:
        value = metrics.cost_per_result(
            100.0, purchases=2, leads=10, clicks=50, objective="OUTCOME_TRAFFIC"
        )
        assert value == 2.0

    def test_message_objective_falls_back_to_clicks(self) -> None:
        value = metrics.cost_per_result(
            100.0, purchases=0, leads=0, clicks=20, messages=0, objective="Mensagens"
        )
        assert value == 5.0

    def test_unknown_objective_uses_leads(self) -> None:
        value = metrics.cost_per_result(
            100.0, purchases=1, leads=4, clicks=20, objective="Alcance"
        )
        assert value == 25.0


class TestDerivedExpressions:
    """Polars twins apply the same zero-denominator rule."""

    def test_matches_scalar_functions(self) -> None:
        df = pl.DataFrame(
            {
                "spend": [150.0, 0.0],
                "impressions": [10_000.0, 0.0],
                "clicks": [200.0, 0.0],
                "leads": [10.0, 0.0],
                "purchases": [0.0, 0.0],
                "purchase_value": [300.0, 0.0],
                "reach": [5_000.0, 0.0],
            }
        )
        result = df.with_columns(derived_metrics_expr()).to_dicts()

        first = result[0]
        assert first["cpl"] == pytest.approx(metrics.cpl(150.0, 10))
        assert first["ctr"] == pytest.approx(metrics.ctr(200, 10_000))
        assert first["cpm"] == pytest.approx(metrics.cpm(150.0, 10_000))
        assert first["frequency"] == pytest.approx(2.0)
        assert first["roas"] == pytest.approx(2.0)
        assert first["cost_per_purchase"] == 0.0

        empty = result[1]
        for name in ("cpl", "ctr", "cpm", "cpc", "frequency", "roas", "conversion_rate"):
            assert empty[name] == 0.0
