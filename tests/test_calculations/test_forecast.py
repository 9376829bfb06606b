"""Tests for the multi-year forecast, disposition, and levered returns."""

import numpy_financial as npf
import pytest

from zone_envelope.calculations.forecast import run_forecast
from zone_envelope.calculations.land import calculate_residual_land_value


def _forecast(**overrides):
    params = dict(
        stabilized_egi=1_000_000,
        stabilized_opex=350_000,
        stabilized_reserves=5_000,
        annual_debt_service=400_000,
        equity_required=4_000_000,
        total_debt=6_000_000,
        exit_cap_rate=0.055,
        rent_growth=0.03,
        expense_growth=0.025,
    )
    params.update(overrides)
    return run_forecast(**params)


class TestRunForecast:
    """Tests for forecast rows and the cash-flow vector."""

    def test_horizon(self):
        result = _forecast()

        assert len(result.years) == 15
        assert [row.year for row in result.years] == list(range(1, 16))
        assert len(result.cash_flows) == 16
        assert result.cash_flows[0] == -4_000_000

    def test_year_one_is_stabilized(self):
        row = _forecast().years[0]

        assert row.effective_gross_income == 1_000_000
        assert row.operating_expenses == 350_000
        assert row.noi == 650_000
        assert row.net_cash_flow == 650_000 - 5_000 - 400_000

    def test_growth_compounds(self):
        rows = _forecast().years

        assert rows[1].effective_gross_income == pytest.approx(1_030_000)
        assert rows[2].effective_gross_income == pytest.approx(1_000_000 * 1.03 ** 2)
        assert rows[2].operating_expenses == pytest.approx(350_000 * 1.025 ** 2)
        assert rows[2].reserves == pytest.approx(5_000 * 1.025 ** 2)
        assert rows[14].debt_service == 400_000

    def test_disposition_added_in_sale_year_only(self):
        result = _forecast()
        sale_row = result.years[9]

        sale_price = sale_row.noi / 0.055
        expected = sale_price - sale_price * 0.02 - 6_000_000

        assert sale_row.disposition_proceeds == pytest.approx(expected)
        assert sale_row.net_cash_flow == pytest.approx(
            sale_row.noi - sale_row.reserves - 400_000 + expected
        )
        assert result.sale_price == pytest.approx(sale_price)
        assert result.net_sale_proceeds == pytest.approx(expected)
        others = [row for row in result.years if row.year != 10]
        assert all(row.disposition_proceeds == 0 for row in others)

    def test_configurable_disposition_year(self):
        result = _forecast(disposition_year=7)

        assert result.years[6].disposition_proceeds > 0
        assert result.years[9].disposition_proceeds == 0

    def test_irr_matches_numpy_financial(self):
        result = _forecast()

        assert result.irr.converged
        assert result.irr.rate == pytest.approx(npf.irr(result.cash_flows), abs=1e-6)

    def test_equity_multiple(self):
        result = _forecast()

        positive = sum(cf for cf in result.cash_flows if cf > 0)
        assert result.equity_multiple == pytest.approx(positive / 4_000_000)
        assert result.total_distributions == pytest.approx(positive)

    def test_zero_equity_gives_zero_multiple(self):
        result = _forecast(equity_required=0)

        assert result.equity_multiple == 0.0
        assert result.cash_flows[0] == 0


class TestResidualLandValue:
    """Tests for the residual land value solve."""

    def test_supportable_land_price(self):
        rlv = calculate_residual_land_value(650_000, 6_000_000, 1_800_000)

        assert rlv.max_project_cost == pytest.approx(10_000_000)
        assert rlv.residual_land_value == pytest.approx(2_200_000)

    def test_predevelopment_reduces_land_value(self):
        rlv = calculate_residual_land_value(650_000, 6_000_000, 1_800_000, predevelopment=200_000)

        assert rlv.residual_land_value == pytest.approx(2_000_000)

    def test_never_negative(self):
        rlv = calculate_residual_land_value(100_000, 6_000_000, 1_800_000)

        assert rlv.residual_land_value == 0.0

    def test_target_yield_is_a_parameter(self):
        low = calculate_residual_land_value(650_000, 6_000_000, 1_800_000, target_yield=0.06)
        high = calculate_residual_land_value(650_000, 6_000_000, 1_800_000, target_yield=0.07)

        assert low.residual_land_value > high.residual_land_value
