"""Development cost and operating expense calculations."""

from dataclasses import dataclass
from typing import Iterable

from ..models.inputs import CostAssumptions, ExpenseAssumptions
from ..models.lookups import FloorKind
from .massing import Floor
from .trace import trace


@dataclass(frozen=True)
class DevelopmentCosts:
    """Uses of funds for the project."""

    residential_hard: float
    retail_hard: float
    parking_hard: float
    hard_costs: float
    soft_costs: float
    land_cost: float
    closing_costs: float
    acquisition: float  # Land + closing
    predevelopment: float
    total_project_cost: float


@dataclass(frozen=True)
class OperatingExpenses:
    """Stabilized annual operating expenses."""

    management_fee: float
    property_tax: float
    insurance: float
    utilities: float
    repairs: float
    total: float
    reserves: float  # Replacement reserve, held below the NOI line


def calculate_development_costs(
    floors: Iterable[Floor],
    parking_floors: Iterable[Floor],
    costs: CostAssumptions,
) -> DevelopmentCosts:
    """Calculate hard, soft, and acquisition costs from the floor stack.

    Hard costs price each floor's area at the rate for its kind; parking
    floors use the underground rate when flagged, podium otherwise.

        soft = hard x soft_cost_pct
        acquisition = land x (1 + closing_cost_pct)
        total = acquisition + hard + soft + predevelopment

    Args:
        floors: Retail and residential floors from the massing.
        parking_floors: Parking levels from the parking resolver.
        costs: Cost assumptions.

    Returns:
        DevelopmentCosts with all components and the total project cost.
    """
    residential_hard = 0.0
    retail_hard = 0.0
    for floor in floors:
        if floor.kind == FloorKind.RESIDENTIAL:
            residential_hard += floor.area_sqft * costs.hard_cost_residential_psf
        elif floor.kind == FloorKind.RETAIL:
            retail_hard += floor.area_sqft * costs.hard_cost_retail_psf

    parking_hard = 0.0
    for floor in parking_floors:
        if floor.is_underground:
            parking_hard += floor.area_sqft * costs.hard_cost_underground_parking_psf
        else:
            parking_hard += floor.area_sqft * costs.hard_cost_podium_parking_psf

    hard_costs = trace("costs.hard_costs", residential_hard + retail_hard + parking_hard, {
        "costs.residential_hard": residential_hard,
        "costs.retail_hard": retail_hard,
        "costs.parking_hard": parking_hard,
    })
    soft_costs = trace("costs.soft_costs", hard_costs * costs.soft_cost_pct, {
        "costs.hard_costs": hard_costs,
        "inputs.soft_cost_pct": costs.soft_cost_pct,
    })

    closing_costs = costs.land_cost * costs.closing_cost_pct
    acquisition = trace("costs.acquisition", costs.land_cost + closing_costs, {
        "inputs.land_cost": costs.land_cost,
        "costs.closing_costs": closing_costs,
    })

    total = trace(
        "costs.total_project_cost",
        acquisition + hard_costs + soft_costs + costs.predevelopment_cost,
        {
            "costs.acquisition": acquisition,
            "costs.hard_costs": hard_costs,
            "costs.soft_costs": soft_costs,
            "costs.predevelopment": costs.predevelopment_cost,
        },
    )

    return DevelopmentCosts(
        residential_hard=residential_hard,
        retail_hard=retail_hard,
        parking_hard=parking_hard,
        hard_costs=hard_costs,
        soft_costs=soft_costs,
        land_cost=costs.land_cost,
        closing_costs=closing_costs,
        acquisition=acquisition,
        predevelopment=costs.predevelopment_cost,
        total_project_cost=total,
    )


def calculate_operating_expenses(
    egi: float,
    total_project_cost: float,
    total_units: int,
    expenses: ExpenseAssumptions,
) -> OperatingExpenses:
    """Calculate stabilized annual operating expenses.

    OpEx has three kinds of components:
    1. Management fee (% of EGI)
    2. Property tax (% of total project cost)
    3. Fixed per-unit costs (insurance, utilities, repairs)

    Replacement reserves are per-unit too but are reported separately;
    they come out below NOI.

    Args:
        egi: Annual Effective Gross Income.
        total_project_cost: Total project cost (tax basis).
        total_units: Residential unit count.
        expenses: Expense assumptions.

    Returns:
        OperatingExpenses with each line item, the total, and reserves.
    """
    management_fee = egi * expenses.management_fee_pct
    property_tax = total_project_cost * expenses.property_tax_pct
    insurance = total_units * expenses.insurance_per_unit
    utilities = total_units * expenses.utilities_per_unit
    repairs = total_units * expenses.repairs_per_unit

    total = trace(
        "operations.opex",
        management_fee + property_tax + insurance + utilities + repairs,
        {
            "revenue.egi": egi,
            "costs.total_project_cost": total_project_cost,
        },
    )

    return OperatingExpenses(
        management_fee=management_fee,
        property_tax=property_tax,
        insurance=insurance,
        utilities=utilities,
        repairs=repairs,
        total=total,
        reserves=total_units * expenses.reserves_per_unit,
    )


def escalate(base: float, years_elapsed: int, growth_rate: float) -> float:
    """Apply compound annual growth.

    Args:
        base: Starting amount.
        years_elapsed: Number of years since base period.
        growth_rate: Annual growth rate (e.g., 0.03 for 3%).

    Returns:
        Escalated amount.
    """
    return base * (1 + growth_rate) ** years_elapsed
