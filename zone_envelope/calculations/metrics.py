"""Summary metrics for report and print output."""

from dataclasses import dataclass

from .capital_stack import CapitalStackResult
from .costs import DevelopmentCosts
from .forecast import ForecastResult
from .land import ResidualLandValue
from .massing import MassingResult, SiteEnvelope
from .parking import ParkingResult
from .revenue import OperatingStatement, RevenueResult


@dataclass(frozen=True)
class SummaryMetrics:
    """Headline scalars for a single analysis."""

    # Program
    total_units: int
    used_gsf: float
    far_used: float  # Used GSF / lot area
    building_height: float

    # Costs
    total_project_cost: float
    cost_per_unit: float
    equity_required: float

    # Operations
    noi: float
    yield_on_cost: float  # NOI / total project cost
    dscr: float  # Adjusted NOI / hard debt service

    # Returns
    irr: float
    irr_converged: bool
    equity_multiple: float
    profit: float  # Value at exit cap less total project cost
    residual_land_value: float

    # Parking
    parking_required: int
    parking_provided: int
    parking_yield: float  # Parking income / parking hard cost


def calculate_summary_metrics(
    site: SiteEnvelope,
    massing: MassingResult,
    parking: ParkingResult,
    costs: DevelopmentCosts,
    revenue: RevenueResult,
    operations: OperatingStatement,
    capital: CapitalStackResult,
    forecast: ForecastResult,
    land: ResidualLandValue,
    exit_cap_rate: float,
) -> SummaryMetrics:
    """Collect summary metrics from the calculation steps.

    Every ratio is 0 when its denominator is 0.

    Args:
        site: Lot-derived envelope.
        massing: Packed floor stack.
        parking: Parking stalls and structure.
        costs: Development costs.
        revenue: Gross and effective income.
        operations: Stabilized operating statement.
        capital: Resolved capital stack.
        forecast: Multi-year forecast and returns.
        land: Residual land value.
        exit_cap_rate: Cap rate for stabilized value.

    Returns:
        SummaryMetrics with all headline values.
    """
    total_units = massing.total_units
    stabilized_value = operations.noi / exit_cap_rate if exit_cap_rate > 0 else 0.0

    if capital.annual_debt_service > 0:
        dscr = operations.adjusted_noi / capital.annual_debt_service
    else:
        dscr = 0.0

    if costs.parking_hard > 0:
        parking_yield = revenue.parking_gross / costs.parking_hard
    else:
        parking_yield = 0.0

    return SummaryMetrics(
        total_units=total_units,
        used_gsf=massing.used_gsf,
        far_used=massing.used_gsf / site.lot_area if site.lot_area > 0 else 0.0,
        building_height=massing.building_height,
        total_project_cost=costs.total_project_cost,
        cost_per_unit=costs.total_project_cost / total_units if total_units > 0 else 0.0,
        equity_required=capital.equity_required,
        noi=operations.noi,
        yield_on_cost=operations.yield_on_cost,
        dscr=dscr,
        irr=forecast.irr.rate,
        irr_converged=forecast.irr.converged,
        equity_multiple=forecast.equity_multiple,
        profit=stabilized_value - costs.total_project_cost,
        residual_land_value=land.residual_land_value,
        parking_required=parking.required,
        parking_provided=parking.provided,
        parking_yield=parking_yield,
    )


def format_summary_table(metrics: SummaryMetrics) -> str:
    """Format summary metrics as a text table.

    Args:
        metrics: Summary metrics for one analysis.

    Returns:
        Formatted string table.
    """
    irr_note = "" if metrics.irr_converged else " (did not converge)"

    lines = [
        "=" * 50,
        "ANALYSIS SUMMARY",
        "=" * 50,
        "",
        f"{'Units':<25} {metrics.total_units:>15,d}",
        f"{'Used GSF':<25} {metrics.used_gsf:>15,.0f}",
        f"{'FAR Used':<25} {metrics.far_used:>15.2f}",
        f"{'Building Height (ft)':<25} {metrics.building_height:>15,.0f}",
        f"{'Parking Req / Prov':<25} {metrics.parking_required:>7d} / {metrics.parking_provided:<5d}",
        "",
        f"{'Total Project Cost':<25} ${metrics.total_project_cost:>14,.0f}",
        f"{'Cost/Unit':<25} ${metrics.cost_per_unit:>14,.0f}",
        f"{'Equity Required':<25} ${metrics.equity_required:>14,.0f}",
        "",
        f"{'NOI (Annual)':<25} ${metrics.noi:>14,.0f}",
        f"{'Yield on Cost':<25} {metrics.yield_on_cost:>15.2%}",
        f"{'DSCR':<25} {metrics.dscr:>14.2f}x",
        f"{'Parking Yield':<25} {metrics.parking_yield:>15.2%}",
        "",
        f"{'Levered IRR':<25} {metrics.irr:>15.2%}{irr_note}",
        f"{'Equity Multiple':<25} {metrics.equity_multiple:>14.2f}x",
        f"{'Profit':<25} ${metrics.profit:>14,.0f}",
        f"{'Residual Land Value':<25} ${metrics.residual_land_value:>14,.0f}",
        "=" * 50,
    ]

    return "\n".join(lines)
