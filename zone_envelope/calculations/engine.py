"""Massing and pro forma engine.

``compute()`` is the single entry point: it maps one immutable
``EngineInput`` to one immutable ``AnalysisResult``, recomputing every
step from scratch. Steps run in a fixed order, each feeding the next:

    site envelope -> unit mix -> floor packing -> parking
    -> development costs -> revenue -> operating expenses -> NOI
    -> capital stack -> sources & uses -> forecast -> residual land value
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..models.inputs import EngineInput
from ..models.lookups import StopReason
from .capital_stack import CapitalStackResult, resolve_capital_stack
from .costs import (
    DevelopmentCosts,
    OperatingExpenses,
    calculate_development_costs,
    calculate_operating_expenses,
)
from .forecast import ForecastResult, ForecastYear, run_forecast
from .land import calculate_residual_land_value
from .massing import (
    ConstraintFlags,
    Floor,
    MassingResult,
    SiteEnvelope,
    calculate_site_envelope,
    pack_floors,
)
from .metrics import SummaryMetrics, calculate_summary_metrics
from .parking import ParkingResult, resolve_parking
from .revenue import (
    OperatingStatement,
    RevenueResult,
    calculate_operating_statement,
    calculate_revenue,
)
from .sources_uses import SourcesUses, calculate_sources_uses
from .trace import TraceContext
from .units import UnitMixResult, normalize_unit_mix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParkingStats:
    """Parking figures reported alongside the massing."""

    required: int
    provided: int
    parking_yield: float  # Annual parking income / parking hard cost


@dataclass(frozen=True)
class Financials:
    """Stabilized pro forma and multi-year returns."""

    egi: float
    opex: float
    noi: float
    reserves: float
    annual_debt_service: float
    cash_flow: float  # Year-1 NOI - reserves - debt service
    yield_on_cost: float
    irr: float
    irr_converged: bool
    equity_multiple: float
    residual_land_value: float
    profit: float
    forecast: Tuple[ForecastYear, ...]  # Years 1..N
    cash_flows: Tuple[float, ...]  # Years 0..N, fed to IRR


@dataclass(frozen=True)
class AnalysisResult:
    """Complete output of one engine run."""

    # Lot and zoning
    lot_area: float
    far_ceiling: float
    effective_far: float
    effective_max_height: float
    max_footprint: float

    # Massing
    floors: Tuple[Floor, ...]
    parking_floors: Tuple[Floor, ...]
    total_units: int
    used_gsf: float
    building_height: float
    stop_reason: StopReason
    constraints: ConstraintFlags

    parking: ParkingStats
    sources_uses: SourcesUses
    financials: Financials
    metrics: SummaryMetrics

    # Intermediate step results, for drill-down and audit export
    site: SiteEnvelope
    unit_mix: UnitMixResult
    massing: MassingResult
    parking_detail: ParkingResult
    development_costs: DevelopmentCosts
    revenue: RevenueResult
    operating_expenses: OperatingExpenses
    operations: OperatingStatement
    capital: CapitalStackResult
    forecast_detail: ForecastResult

    trace_context: Optional[TraceContext] = None


def compute(engine_input: EngineInput) -> AnalysisResult:
    """Run the full massing and pro forma calculation.

    Args:
        engine_input: Complete input bundle.

    Returns:
        AnalysisResult with floors, parking, sources & uses, financials,
        and constraint flags.

    Raises:
        ValueError: If the input fails validation.
    """
    errors = engine_input.validate()
    if errors:
        raise ValueError("Invalid engine input: " + "; ".join(errors))

    zoning = engine_input.zoning

    # === Massing ===
    site = calculate_site_envelope(
        lot=engine_input.lot,
        setbacks=zoning.setbacks,
        far=engine_input.effective_far,
        max_height=engine_input.effective_max_height,
        min_lot_area_per_unit=zoning.min_lot_area_per_unit,
    )
    unit_mix = normalize_unit_mix(
        engine_input.unit_mix,
        engine_input.unit_sizes,
        engine_input.efficiency,
    )
    massing = pack_floors(
        site,
        target_retail_sf=engine_input.target_retail_sf,
        avg_unit_sf=unit_mix.avg_unit_sf,
        efficiency=unit_mix.efficiency,
        min_floor_plate_sf=engine_input.min_floor_plate_sf,
    )
    parking = resolve_parking(
        total_units=massing.total_units,
        target_retail_sf=engine_input.target_retail_sf,
        parking_ratio_residential=zoning.parking_ratio_residential,
        parking_ratio_retail=zoning.parking_ratio_retail,
        strategy=engine_input.parking.strategy,
        buildable_footprint=site.max_footprint,
        lot_area=site.lot_area,
        tod_waiver=engine_input.parking.tod_waiver,
        manual_override=engine_input.parking.manual_override,
    )

    # === Stabilized pro forma ===
    costs = calculate_development_costs(massing.floors, parking.floors, engine_input.costs)
    revenue = calculate_revenue(
        total_units=massing.total_units,
        shares=unit_mix.shares,
        retail_area=massing.retail_area,
        efficiency=engine_input.efficiency,
        parking_stalls=parking.provided,
        rents=engine_input.rents,
    )
    opex = calculate_operating_expenses(
        egi=revenue.egi,
        total_project_cost=costs.total_project_cost,
        total_units=massing.total_units,
        expenses=engine_input.expenses,
    )
    operations = calculate_operating_statement(
        egi=revenue.egi,
        opex=opex.total,
        reserves=opex.reserves,
        total_project_cost=costs.total_project_cost,
    )

    # === Capital ===
    capital = resolve_capital_stack(engine_input.capital_sources, costs.total_project_cost)
    sources_uses = calculate_sources_uses(costs, capital)

    # === Returns ===
    forecast = run_forecast(
        stabilized_egi=revenue.egi,
        stabilized_opex=opex.total,
        stabilized_reserves=opex.reserves,
        annual_debt_service=capital.annual_debt_service,
        equity_required=capital.equity_required,
        total_debt=capital.total_debt,
        exit_cap_rate=engine_input.exit_cap_rate,
        rent_growth=engine_input.growth.rent_growth,
        expense_growth=engine_input.growth.expense_growth,
        disposition_year=engine_input.disposition_year,
    )
    land = calculate_residual_land_value(
        noi=operations.noi,
        hard_costs=costs.hard_costs,
        soft_costs=costs.soft_costs,
        predevelopment=costs.predevelopment,
        target_yield=engine_input.target_yield,
    )
    metrics = calculate_summary_metrics(
        site=site,
        massing=massing,
        parking=parking,
        costs=costs,
        revenue=revenue,
        operations=operations,
        capital=capital,
        forecast=forecast,
        land=land,
        exit_cap_rate=engine_input.exit_cap_rate,
    )

    logger.debug(
        "Computed %s: %d units, NOI %.0f, IRR %.4f (%s)",
        zoning.code or "custom zoning", massing.total_units,
        operations.noi, forecast.irr.rate, forecast.irr.status.value,
    )

    financials = Financials(
        egi=revenue.egi,
        opex=opex.total,
        noi=operations.noi,
        reserves=opex.reserves,
        annual_debt_service=capital.annual_debt_service,
        cash_flow=operations.adjusted_noi - capital.annual_debt_service,
        yield_on_cost=operations.yield_on_cost,
        irr=forecast.irr.rate,
        irr_converged=forecast.irr.converged,
        equity_multiple=forecast.equity_multiple,
        residual_land_value=land.residual_land_value,
        profit=metrics.profit,
        forecast=forecast.years,
        cash_flows=forecast.cash_flows,
    )

    return AnalysisResult(
        lot_area=site.lot_area,
        far_ceiling=site.far_ceiling_sf,
        effective_far=engine_input.effective_far,
        effective_max_height=engine_input.effective_max_height,
        max_footprint=site.max_footprint,
        floors=massing.floors,
        parking_floors=parking.floors,
        total_units=massing.total_units,
        used_gsf=massing.used_gsf,
        building_height=massing.building_height,
        stop_reason=massing.stop_reason,
        constraints=massing.constraints,
        parking=ParkingStats(
            required=parking.required,
            provided=parking.provided,
            parking_yield=metrics.parking_yield,
        ),
        sources_uses=sources_uses,
        financials=financials,
        metrics=metrics,
        site=site,
        unit_mix=unit_mix,
        massing=massing,
        parking_detail=parking,
        development_costs=costs,
        revenue=revenue,
        operating_expenses=opex,
        operations=operations,
        capital=capital,
        forecast_detail=forecast,
        trace_context=TraceContext.current(),
    )
