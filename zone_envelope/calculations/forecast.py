"""Multi-year operating forecast with a disposition event and levered returns."""

from dataclasses import dataclass
from typing import Tuple

from ..models.lookups import DISPOSITION_YEAR, FORECAST_YEARS, SELLING_COST_PCT
from .costs import escalate
from .finance import IRRResult, irr
from .trace import trace


@dataclass(frozen=True)
class ForecastYear:
    """Cash flow for a single forecast year.

    Field order is the export column order.
    """

    year: int
    effective_gross_income: float
    operating_expenses: float
    noi: float
    reserves: float
    debt_service: float
    net_cash_flow: float  # NOI - reserves - debt service (+ sale proceeds)
    disposition_proceeds: float = 0.0  # Non-zero in the sale year only


@dataclass(frozen=True)
class ForecastResult:
    """Forecast rows, the equity cash-flow vector, and return metrics."""

    years: Tuple[ForecastYear, ...]  # Years 1..N
    cash_flows: Tuple[float, ...]  # Years 0..N, year 0 = -equity
    irr: IRRResult
    equity_multiple: float
    disposition_year: int
    sale_price: float
    selling_costs: float
    net_sale_proceeds: float

    @property
    def total_distributions(self) -> float:
        return sum(cf for cf in self.cash_flows if cf > 0)


def run_forecast(
    stabilized_egi: float,
    stabilized_opex: float,
    stabilized_reserves: float,
    annual_debt_service: float,
    equity_required: float,
    total_debt: float,
    exit_cap_rate: float,
    rent_growth: float,
    expense_growth: float,
    disposition_year: int = DISPOSITION_YEAR,
    forecast_years: int = FORECAST_YEARS,
    selling_cost_pct: float = SELLING_COST_PCT,
) -> ForecastResult:
    """Project levered cash flows and compute IRR and equity multiple.

    Year 1 uses the stabilized figures. Each later year grows EGI by the
    rent growth rate and OpEx and reserves by the expense growth rate,
    compounding on the prior year. Debt service is level.

    In the disposition year the sale is added on top of that year's
    operating cash flow:
        sale_price = NOI / exit_cap_rate
        proceeds = sale_price - selling costs - total debt

    The forecast keeps running after the sale year; the cash-flow vector
    always has ``forecast_years + 1`` entries.

    Args:
        stabilized_egi: Year-1 Effective Gross Income.
        stabilized_opex: Year-1 operating expenses.
        stabilized_reserves: Year-1 replacement reserves.
        annual_debt_service: Hard debt service per year.
        equity_required: Initial equity (year-0 outflow).
        total_debt: Debt repaid from sale proceeds.
        exit_cap_rate: Cap rate applied to sale-year NOI.
        rent_growth: Annual EGI growth.
        expense_growth: Annual OpEx and reserves growth.
        disposition_year: Year of sale.
        forecast_years: Forecast horizon.
        selling_cost_pct: Selling costs as % of sale price.

    Returns:
        ForecastResult with yearly rows and return metrics.
    """
    rows = []
    cash_flows = [-equity_required]
    sale_price = 0.0
    selling_costs = 0.0
    net_sale_proceeds = 0.0

    for year in range(1, forecast_years + 1):
        egi = escalate(stabilized_egi, year - 1, rent_growth)
        opex = escalate(stabilized_opex, year - 1, expense_growth)
        reserves = escalate(stabilized_reserves, year - 1, expense_growth)
        noi = egi - opex
        net_cash_flow = noi - reserves - annual_debt_service
        proceeds = 0.0

        if year == disposition_year:
            sale_price = noi / exit_cap_rate if exit_cap_rate > 0 else 0.0
            selling_costs = sale_price * selling_cost_pct
            proceeds = trace("returns.sale_proceeds", sale_price - selling_costs - total_debt, {
                "operations.noi": noi,
                "returns.sale_price": sale_price,
                "returns.selling_costs": selling_costs,
                "capital.total_debt": total_debt,
            }, notes=f"Sale in year {year}")
            net_sale_proceeds = proceeds
            net_cash_flow += proceeds

        rows.append(ForecastYear(
            year=year,
            effective_gross_income=egi,
            operating_expenses=opex,
            noi=noi,
            reserves=reserves,
            debt_service=annual_debt_service,
            net_cash_flow=net_cash_flow,
            disposition_proceeds=proceeds,
        ))
        cash_flows.append(net_cash_flow)

    irr_result = irr(cash_flows)
    trace("returns.irr", irr_result.rate, {
        "capital.equity_required": equity_required,
        "returns.sale_proceeds": net_sale_proceeds,
    })

    total_distributions = sum(cf for cf in cash_flows if cf > 0)
    equity_multiple = total_distributions / equity_required if equity_required > 0 else 0.0
    trace("returns.equity_multiple", equity_multiple, {
        "capital.equity_required": equity_required,
        "returns.total_distributions": total_distributions,
    })

    return ForecastResult(
        years=tuple(rows),
        cash_flows=tuple(cash_flows),
        irr=irr_result,
        equity_multiple=equity_multiple,
        disposition_year=disposition_year,
        sale_price=sale_price,
        selling_costs=selling_costs,
        net_sale_proceeds=net_sale_proceeds,
    )
