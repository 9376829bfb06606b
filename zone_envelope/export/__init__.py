"""Export module for forecast tables and audit reports."""

from .audit_report import (
    FORECAST_COLUMNS,
    AuditReportConfig,
    forecast_to_dataframe,
    generate_audit_excel,
)

__all__ = [
    "FORECAST_COLUMNS",
    "AuditReportConfig",
    "forecast_to_dataframe",
    "generate_audit_excel",
]
