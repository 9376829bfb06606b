"""Revenue and stabilized operating statement calculations."""

from dataclasses import dataclass
from typing import Mapping

from ..models.inputs import RentAssumptions
from .trace import trace


@dataclass(frozen=True)
class RevenueResult:
    """Annual gross and effective income."""

    residential_gross: float
    retail_gross: float
    parking_gross: float
    gross_income: float  # Gross potential income, all sources
    vacancy_loss: float
    egi: float  # Effective Gross Income


@dataclass(frozen=True)
class OperatingStatement:
    """Stabilized year operating statement."""

    egi: float
    opex: float
    noi: float
    reserves: float
    adjusted_noi: float  # NOI after reserves, used for coverage
    yield_on_cost: float


def calculate_revenue(
    total_units: int,
    shares: Mapping[str, float],
    retail_area: float,
    efficiency: float,
    parking_stalls: int,
    rents: RentAssumptions,
) -> RevenueResult:
    """Calculate annual gross and effective income.

    - Residential: sum(units x share x monthly rent) x 12
    - Retail: retail floor area x efficiency x annual rent/SF
    - Parking: stalls x monthly income x 12
    - Vacancy: residential and retail each at their own rate; parking has none

    Unit types without a rent in ``rents.unit_rents`` earn nothing.

    Args:
        total_units: Residential units.
        shares: Normalized unit-mix shares.
        retail_area: Built retail floor area (0 if none).
        efficiency: Net-to-gross factor.
        parking_stalls: Stalls provided.
        rents: Rent and vacancy assumptions.

    Returns:
        RevenueResult with income by source.
    """
    residential_monthly = sum(
        total_units * share * rents.unit_rents.get(unit_type, 0.0)
        for unit_type, share in shares.items()
    )
    residential_gross = residential_monthly * 12
    retail_gross = retail_area * efficiency * rents.retail_rent_psf
    parking_gross = parking_stalls * rents.parking_income_monthly * 12

    gross_income = trace(
        "revenue.gross_income",
        residential_gross + retail_gross + parking_gross,
        {
            "revenue.residential_gross": residential_gross,
            "revenue.retail_gross": retail_gross,
            "revenue.parking_gross": parking_gross,
        },
    )
    vacancy = (
        residential_gross * rents.vacancy_residential
        + retail_gross * rents.vacancy_retail
    )
    egi = trace("revenue.egi", gross_income - vacancy, {
        "revenue.gross_income": gross_income,
        "revenue.vacancy": vacancy,
    })

    return RevenueResult(
        residential_gross=residential_gross,
        retail_gross=retail_gross,
        parking_gross=parking_gross,
        gross_income=gross_income,
        vacancy_loss=vacancy,
        egi=egi,
    )


def calculate_operating_statement(
    egi: float,
    opex: float,
    reserves: float,
    total_project_cost: float,
) -> OperatingStatement:
    """Derive NOI, reserves-adjusted NOI, and yield on cost.

    Yield on cost is 0 when the project cost is 0.
    """
    noi = trace("operations.noi", egi - opex, {
        "revenue.egi": egi,
        "operations.opex": opex,
    })
    adjusted_noi = trace("operations.adjusted_noi", noi - reserves, {
        "operations.noi": noi,
        "operations.reserves": reserves,
    })
    yield_on_cost = noi / total_project_cost if total_project_cost > 0 else 0.0
    trace("returns.yield_on_cost", yield_on_cost, {
        "operations.noi": noi,
        "costs.total_project_cost": total_project_cost,
    })

    return OperatingStatement(
        egi=egi,
        opex=opex,
        noi=noi,
        reserves=reserves,
        adjusted_noi=adjusted_noi,
        yield_on_cost=yield_on_cost,
    )
