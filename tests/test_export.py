"""Tests for the forecast table and the audit workbook."""

import io

import pytest
from openpyxl import load_workbook

from zone_envelope.calculations.engine import compute
from zone_envelope.calculations.trace import TraceContext
from zone_envelope.export.audit_report import (
    FORECAST_COLUMNS,
    AuditReportConfig,
    forecast_to_dataframe,
    generate_audit_excel,
)


@pytest.fixture
def mixed_use_result(mixed_use_input):
    return compute(mixed_use_input)


class TestForecastDataFrame:
    """Tests for the forecast table layout."""

    def test_columns_in_order(self, mixed_use_result):
        df = forecast_to_dataframe(mixed_use_result)

        assert list(df.columns) == list(FORECAST_COLUMNS)

    def test_one_row_per_year(self, mixed_use_result):
        df = forecast_to_dataframe(mixed_use_result)

        assert len(df) == 15
        assert df["year"].tolist() == list(range(1, 16))

    def test_values_match_forecast(self, mixed_use_result):
        df = forecast_to_dataframe(mixed_use_result)
        forecast = mixed_use_result.financials.forecast

        assert df["noi"].iloc[0] == pytest.approx(forecast[0].noi)
        assert df["disposition_proceeds"].iloc[9] == pytest.approx(
            mixed_use_result.forecast_detail.net_sale_proceeds
        )
        assert df["disposition_proceeds"].drop(index=9).eq(0).all()


class TestAuditExcel:
    """Tests for the Excel audit workbook."""

    def test_workbook_sheets(self, mixed_use_result):
        wb = load_workbook(io.BytesIO(generate_audit_excel(mixed_use_result)))

        assert wb.sheetnames == [
            "Summary",
            "Massing",
            "Sources & Uses",
            "Forecast",
            "Formula Registry",
        ]

    def test_traces_sheet_when_tracing(self, mixed_use_input):
        with TraceContext():
            result = compute(mixed_use_input)

        wb = load_workbook(io.BytesIO(generate_audit_excel(result)))

        assert "Traces" in wb.sheetnames
        assert wb["Traces"].max_row > 10

    def test_forecast_sheet_header(self, mixed_use_result):
        wb = load_workbook(io.BytesIO(generate_audit_excel(mixed_use_result)))
        ws = wb["Forecast"]

        header = [cell.value for cell in ws[1]]
        assert header == list(FORECAST_COLUMNS)
        assert ws.max_row == 16

    def test_massing_sheet_lists_every_floor(self, mixed_use_result):
        wb = load_workbook(io.BytesIO(generate_audit_excel(mixed_use_result)))
        ws = wb["Massing"]

        floor_count = len(mixed_use_result.floors) + len(mixed_use_result.parking_floors)
        # Title, blank, header, then one row per floor
        assert ws.max_row == 3 + floor_count

    def test_config_skips_sheets(self, mixed_use_result):
        config = AuditReportConfig(include_formula_registry=False, include_massing=False)

        wb = load_workbook(io.BytesIO(generate_audit_excel(mixed_use_result, config)))

        assert "Formula Registry" not in wb.sheetnames
        assert "Massing" not in wb.sheetnames
        assert "Summary" in wb.sheetnames

    def test_project_name_in_summary(self, mixed_use_result):
        config = AuditReportConfig(project_name="Halsted Corner")

        wb = load_workbook(io.BytesIO(generate_audit_excel(mixed_use_result, config)))

        assert wb["Summary"]["A1"].value == "Audit Report: Halsted Corner"
