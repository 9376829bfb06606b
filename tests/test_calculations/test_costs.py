"""Tests for development cost and operating expense calculations."""

import pytest

from zone_envelope.calculations.costs import (
    calculate_development_costs,
    calculate_operating_expenses,
    escalate,
)
from zone_envelope.calculations.massing import Floor
from zone_envelope.models.inputs import CostAssumptions, ExpenseAssumptions
from zone_envelope.models.lookups import FloorKind


FLOORS = (
    Floor(FloorKind.RETAIL, 18, 3_000, 1),
    Floor(FloorKind.RESIDENTIAL, 11, 8_000, 2, unit_count=10),
    Floor(FloorKind.RESIDENTIAL, 11, 8_000, 3, unit_count=10),
)
PODIUM = (Floor(FloorKind.PARKING, 10, 5_000, 1),)
UNDERGROUND = (Floor(FloorKind.PARKING, 10, 5_000, -1, is_underground=True),)


class TestDevelopmentCosts:
    """Tests for hard, soft, and acquisition costs."""

    def test_hard_costs_by_floor_kind(self):
        costs = calculate_development_costs(FLOORS, PODIUM, CostAssumptions())

        assert costs.residential_hard == 16_000 * 250
        assert costs.retail_hard == 3_000 * 200
        assert costs.parking_hard == 5_000 * 90
        assert costs.hard_costs == 4_000_000 + 600_000 + 450_000

    def test_underground_parking_costs_more(self):
        podium = calculate_development_costs(FLOORS, PODIUM, CostAssumptions())
        underground = calculate_development_costs(FLOORS, UNDERGROUND, CostAssumptions())

        assert underground.parking_hard == 5_000 * 160
        assert underground.hard_costs > podium.hard_costs

    def test_total_project_cost(self):
        assumptions = CostAssumptions(
            land_cost=2_000_000,
            closing_cost_pct=0.02,
            soft_cost_pct=0.25,
            predevelopment_cost=100_000,
        )

        costs = calculate_development_costs(FLOORS, (), assumptions)

        assert costs.acquisition == pytest.approx(2_040_000)
        assert costs.soft_costs == pytest.approx(costs.hard_costs * 0.25)
        assert costs.total_project_cost == pytest.approx(
            2_040_000 + costs.hard_costs * 1.25 + 100_000
        )

    def test_empty_building_costs_land_only(self):
        costs = calculate_development_costs((), (), CostAssumptions(predevelopment_cost=0))

        assert costs.hard_costs == 0
        assert costs.total_project_cost == pytest.approx(costs.acquisition)


class TestOperatingExpenses:
    """Tests for stabilized operating expenses."""

    def test_line_items(self):
        opex = calculate_operating_expenses(
            egi=1_000_000,
            total_project_cost=20_000_000,
            total_units=20,
            expenses=ExpenseAssumptions(),
        )

        assert opex.management_fee == pytest.approx(40_000)
        assert opex.property_tax == pytest.approx(240_000)
        assert opex.insurance == 12_000
        assert opex.utilities == 24_000
        assert opex.repairs == 18_000
        assert opex.total == pytest.approx(334_000)

    def test_reserves_are_below_the_line(self):
        opex = calculate_operating_expenses(1_000_000, 20_000_000, 20, ExpenseAssumptions())

        assert opex.reserves == 5_000
        assert opex.total == pytest.approx(
            opex.management_fee + opex.property_tax + opex.insurance
            + opex.utilities + opex.repairs
        )


class TestEscalate:
    """Tests for compound growth."""

    def test_year_zero_is_base(self):
        assert escalate(100_000, 0, 0.03) == 100_000

    def test_compounds(self):
        assert escalate(100_000, 2, 0.03) == pytest.approx(106_090)
