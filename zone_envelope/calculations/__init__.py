"""Calculation modules for the massing and pro forma engine."""

from .finance import annual_debt_service, npv, irr, IRRResult, IRRStatus
from .units import normalize_unit_mix, UnitMixResult
from .massing import (
    calculate_site_envelope,
    pack_floors,
    Floor,
    SiteEnvelope,
    MassingResult,
    ConstraintFlags,
)
from .parking import calculate_required_stalls, resolve_parking, ParkingResult
from .costs import (
    calculate_development_costs,
    calculate_operating_expenses,
    escalate,
    DevelopmentCosts,
    OperatingExpenses,
)
from .revenue import calculate_revenue, calculate_operating_statement, RevenueResult, OperatingStatement
from .capital_stack import resolve_capital_stack, CapitalStackResult, SourceDebtService
from .sources_uses import calculate_sources_uses, SourcesUses
from .forecast import run_forecast, ForecastResult, ForecastYear
from .land import calculate_residual_land_value, ResidualLandValue
from .metrics import calculate_summary_metrics, format_summary_table, SummaryMetrics

# Single entry point for a full analysis
from .engine import compute, AnalysisResult, Financials, ParkingStats

# Audit trail
from .trace import TraceContext, TracedValue, trace
from .formula_registry import FormulaRegistry, FormulaDefinition, FormulaCategory

__all__ = [
    "annual_debt_service",
    "npv",
    "irr",
    "IRRResult",
    "IRRStatus",
    "normalize_unit_mix",
    "UnitMixResult",
    "calculate_site_envelope",
    "pack_floors",
    "Floor",
    "SiteEnvelope",
    "MassingResult",
    "ConstraintFlags",
    "calculate_required_stalls",
    "resolve_parking",
    "ParkingResult",
    "calculate_development_costs",
    "calculate_operating_expenses",
    "escalate",
    "DevelopmentCosts",
    "OperatingExpenses",
    "calculate_revenue",
    "calculate_operating_statement",
    "RevenueResult",
    "OperatingStatement",
    "resolve_capital_stack",
    "CapitalStackResult",
    "SourceDebtService",
    "calculate_sources_uses",
    "SourcesUses",
    "run_forecast",
    "ForecastResult",
    "ForecastYear",
    "calculate_residual_land_value",
    "ResidualLandValue",
    "calculate_summary_metrics",
    "format_summary_table",
    "SummaryMetrics",
    # Engine
    "compute",
    "AnalysisResult",
    "Financials",
    "ParkingStats",
    # Audit trail
    "TraceContext",
    "TracedValue",
    "trace",
    "FormulaRegistry",
    "FormulaDefinition",
    "FormulaCategory",
]
