"""Data models for the massing and pro forma engine."""

from .lookups import (
    FloorKind,
    ParkingStrategy,
    StopReason,
    ZoningDistrict,
    UNIT_TYPE_SIZES,
    ZONING_DISTRICTS,
    get_unit_size,
    get_zoning_district,
)
from .inputs import (
    Lot,
    Setbacks,
    ZoningEnvelope,
    ParkingConfig,
    CostAssumptions,
    RentAssumptions,
    ExpenseAssumptions,
    OperatingGrowthAssumptions,
    CapitalSource,
    EngineInput,
)

__all__ = [
    "FloorKind",
    "ParkingStrategy",
    "StopReason",
    "ZoningDistrict",
    "UNIT_TYPE_SIZES",
    "ZONING_DISTRICTS",
    "get_unit_size",
    "get_zoning_district",
    "Lot",
    "Setbacks",
    "ZoningEnvelope",
    "ParkingConfig",
    "CostAssumptions",
    "RentAssumptions",
    "ExpenseAssumptions",
    "OperatingGrowthAssumptions",
    "CapitalSource",
    "EngineInput",
]
