"""Audit Report Generator - Export the analysis with its formulas and traces.

This module turns an ``AnalysisResult`` into a forecast table and an
audit-ready Excel workbook showing massing, sources and uses, the
multi-year forecast, and (when tracing was active) every traced value.
"""

import io
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from ..calculations.engine import AnalysisResult
from ..calculations.formula_registry import FormulaCategory, FormulaRegistry
from ..calculations.trace import TraceContext

# Column order downstream tables rely on
FORECAST_COLUMNS = (
    "year",
    "effective_gross_income",
    "operating_expenses",
    "noi",
    "reserves",
    "debt_service",
    "net_cash_flow",
    "disposition_proceeds",
)


@dataclass
class AuditReportConfig:
    """Configuration for audit report generation."""
    include_summary: bool = True
    include_massing: bool = True
    include_sources_uses: bool = True
    include_forecast: bool = True
    include_formula_registry: bool = True
    include_traced_values: bool = True
    project_name: str = "Development Site"
    scenario_name: str = "Analysis"


def forecast_to_dataframe(result: AnalysisResult) -> pd.DataFrame:
    """Build the forecast table, one row per forecast year.

    Args:
        result: Engine output.

    Returns:
        DataFrame with exactly ``FORECAST_COLUMNS``, in that order.
    """
    rows = [asdict(year) for year in result.financials.forecast]
    return pd.DataFrame(rows, columns=list(FORECAST_COLUMNS))


def _format_value(value: float, unit: str = "$") -> str:
    """Format a value for display in reports."""
    if unit == "%":
        return f"{value:.2%}"
    elif unit != "$":
        return f"{value:,.2f} {unit}"
    elif abs(value) >= 1_000_000:
        return f"${value/1_000_000:,.2f}M"
    elif abs(value) >= 1_000:
        return f"${value/1_000:,.1f}K"
    elif value == 0:
        return "$0"
    else:
        return f"${value:,.0f}"


def _add_header_style(ws, row: int, cols: int) -> None:
    """Apply header styling to a row."""
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)

    for col in range(1, cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")


def _add_section_header(ws, title: str, row: int) -> int:
    """Add a section header and return next row."""
    ws.cell(row=row, column=1, value=title)
    ws.cell(row=row, column=1).font = Font(bold=True, size=14)
    return row + 1


def generate_audit_excel(
    result: AnalysisResult,
    config: Optional[AuditReportConfig] = None,
) -> bytes:
    """Generate an Excel audit report.

    Args:
        result: The AnalysisResult from compute()
        config: Optional configuration for the report

    Returns:
        Excel file as bytes
    """
    if config is None:
        config = AuditReportConfig()

    wb = Workbook()
    wb.remove(wb.active)

    if config.include_summary:
        _create_summary_sheet(wb.create_sheet("Summary"), result, config)

    if config.include_massing:
        _create_massing_sheet(wb.create_sheet("Massing"), result)

    if config.include_sources_uses:
        _create_sources_uses_sheet(wb.create_sheet("Sources & Uses"), result)

    if config.include_forecast:
        _create_forecast_sheet(wb.create_sheet("Forecast"), result)

    if config.include_formula_registry:
        _create_formula_registry_sheet(wb.create_sheet("Formula Registry"))

    if config.include_traced_values and result.trace_context:
        _create_traced_calculations_sheet(wb.create_sheet("Traces"), result.trace_context)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def _create_summary_sheet(ws, result: AnalysisResult, config: AuditReportConfig) -> None:
    """Create the summary sheet."""
    m = result.metrics
    row = 1

    ws.cell(row=row, column=1, value=f"Audit Report: {config.project_name}")
    ws.cell(row=row, column=1).font = Font(bold=True, size=16)
    row += 1

    ws.cell(row=row, column=1, value=f"Scenario: {config.scenario_name}")
    row += 1

    ws.cell(row=row, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    row += 2

    row = _add_section_header(ws, "Envelope", row)
    row += 1

    envelope = [
        ("Lot Area", f"{result.lot_area:,.0f} SF"),
        ("Effective FAR", f"{result.effective_far:.2f}"),
        ("FAR Ceiling", f"{result.far_ceiling:,.0f} SF"),
        ("Effective Max Height", f"{result.effective_max_height:,.0f} ft"),
        ("Buildable Footprint", f"{result.max_footprint:,.0f} SF"),
        ("", ""),
        ("Units", f"{result.total_units:,d}"),
        ("Used GSF", f"{result.used_gsf:,.0f} SF"),
        ("Building Height", f"{result.building_height:,.0f} ft"),
        ("Stopped On", result.stop_reason.value),
        ("Height Capped", "YES" if result.constraints.height_capped else "NO"),
        ("FAR Capped", "YES" if result.constraints.far_capped else "NO"),
        ("Density Capped", "YES" if result.constraints.density_capped else "NO"),
    ]

    for label, value in envelope:
        if label:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
        row += 1

    row += 1
    row = _add_section_header(ws, "Key Metrics", row)
    row += 1

    metrics = [
        ("Total Project Cost", f"${m.total_project_cost:,.0f}"),
        ("Equity Required", f"${m.equity_required:,.0f}"),
        ("Stabilized NOI", f"${m.noi:,.0f}"),
        ("Yield on Cost", f"{m.yield_on_cost:.2%}"),
        ("DSCR", f"{m.dscr:.2f}x"),
        ("", ""),
        ("Levered IRR", f"{m.irr:.2%}" if m.irr_converged else f"{m.irr:.2%} (not converged)"),
        ("Equity Multiple", f"{m.equity_multiple:.2f}x"),
        ("Profit", f"${m.profit:,.0f}"),
        ("Residual Land Value", f"${m.residual_land_value:,.0f}"),
        ("", ""),
        ("Parking Required", f"{result.parking.required:,d}"),
        ("Parking Provided", f"{result.parking.provided:,d}"),
        ("Parking Yield", f"{result.parking.parking_yield:.2%}"),
    ]

    for label, value in metrics:
        if label:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
        row += 1

    ws.column_dimensions['A'].width = 25
    ws.column_dimensions['B'].width = 20


def _write_table(ws, df: pd.DataFrame, start_row: int) -> int:
    """Write a DataFrame with a styled header row; return the next free row."""
    row = start_row
    for values in dataframe_to_rows(df, index=False, header=True):
        for col, value in enumerate(values, 1):
            ws.cell(row=row, column=col, value=value)
        row += 1
    _add_header_style(ws, start_row, len(df.columns))
    return row


def _set_widths(ws, widths) -> None:
    for col, width in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(col)].width = width


def _create_massing_sheet(ws, result: AnalysisResult) -> None:
    """Create the Massing sheet, parking levels first."""
    _add_section_header(ws, "Floor Stack", 1)

    df = pd.DataFrame(
        [
            {
                "Kind": floor.kind.value,
                "Level": floor.level,
                "Height (ft)": floor.height_feet,
                "Area (SF)": round(floor.area_sqft),
                "Units": floor.unit_count,
                "Underground": "YES" if floor.is_underground else "NO",
            }
            for floor in result.parking_floors + result.floors
        ],
        columns=["Kind", "Level", "Height (ft)", "Area (SF)", "Units", "Underground"],
    )
    _write_table(ws, df, 3)
    _set_widths(ws, (14, 8, 12, 12, 8, 13))


def _create_sources_uses_sheet(ws, result: AnalysisResult) -> None:
    """Create the Sources & Uses sheet."""
    su = result.sources_uses

    def share(amount: float, total: float) -> str:
        return f"{amount / total:.1%}" if total > 0 else "-"

    uses = [
        ("Acquisition", su.acquisition, "land x (1 + closing_cost_pct)"),
        ("Hard Costs", su.hard_costs, "floor area x cost/SF by floor kind"),
        ("Soft Costs", su.soft_costs, "hard_costs x soft_cost_pct"),
        ("Predevelopment", su.predevelopment, "Input"),
        ("Total Project Cost", su.total_uses, "acquisition + hard + soft + predevelopment"),
    ]
    uses_df = pd.DataFrame(
        [(label, f"${amount:,.0f}", share(amount, su.total_uses), formula)
         for label, amount, formula in uses],
        columns=["Item", "Amount", "% of Total", "Formula"],
    )

    sources = list(su.debt) + [("Equity", su.equity), ("Total Sources", su.total_sources)]
    sources_df = pd.DataFrame(
        [(label, f"${amount:,.0f}", share(amount, su.total_sources)) for label, amount in sources],
        columns=["Item", "Amount", "% of Total"],
    )

    row = _add_section_header(ws, "Uses of Funds", 1) + 1
    row = _write_table(ws, uses_df, row)
    _bold_row(ws, row - 1, 2)

    row = _add_section_header(ws, "Sources of Funds", row + 1) + 1
    row = _write_table(ws, sources_df, row)
    _bold_row(ws, row - 1, 2)

    _set_widths(ws, (30, 18, 12, 45))


def _bold_row(ws, row: int, cols: int) -> None:
    for col in range(1, cols + 1):
        ws.cell(row=row, column=col).font = Font(bold=True)


def _create_forecast_sheet(ws, result: AnalysisResult) -> None:
    """Create the Forecast sheet from the forecast DataFrame."""
    _write_table(ws, forecast_to_dataframe(result).round(2), 1)
    _set_widths(ws, [20] * len(FORECAST_COLUMNS))


def _create_formula_registry_sheet(ws) -> None:
    """One row per registered formula, grouped by category."""
    order = {category: i for i, category in enumerate(FormulaCategory)}
    formulas = sorted(
        FormulaRegistry.get_all().values(),
        key=lambda f: (order[f.category], f.field_path),
    )

    df = pd.DataFrame(
        [
            (f.category.value, f.name, f.field_path, f.formula,
             ", ".join(f.inputs) or "-", f.unit, f.notes or "-")
            for f in formulas
        ],
        columns=["Category", "Name", "Field Path", "Formula", "Inputs", "Unit", "Notes"],
    )

    _add_section_header(ws, "Formula Registry", 1)
    _write_table(ws, df, 3)
    _set_widths(ws, (15, 30, 30, 50, 40, 8, 40))


def _create_traced_calculations_sheet(ws, trace_context: TraceContext) -> None:
    """One row per traced value, in key order."""
    rows = []
    for key in sorted(trace_context.traces):
        traced = trace_context.traces[key]
        unit = traced.formula_def.unit if traced.formula_def else "$"
        rows.append((
            traced.field_path,
            traced.year if traced.year is not None else "-",
            _format_value(traced.value, unit),
            traced.computed_formula[:100],
            traced.notes or "-",
        ))

    df = pd.DataFrame(rows, columns=["Field Path", "Year", "Result", "Computed Formula", "Notes"])

    _add_section_header(ws, "Traced Values", 1)
    _write_table(ws, df, 3)
    _set_widths(ws, (30, 6, 18, 80, 30))
