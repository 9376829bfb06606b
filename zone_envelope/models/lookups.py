"""Lookup tables and engine constants for floor heights, unit sizes, and zoning districts."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class FloorKind(Enum):
    """Program carried by a floor in the massing stack."""

    RETAIL = "retail"
    RESIDENTIAL = "residential"
    PARKING = "parking"


class ParkingStrategy(Enum):
    """Where structured parking is placed."""

    PODIUM = "podium"  # Above grade, inside the buildable footprint
    UNDERGROUND = "underground"  # Below grade, under most of the lot


class StopReason(Enum):
    """Why the massing packer stopped adding residential floors."""

    HEIGHT = "height"  # Floor-count budget from max height exhausted
    FAR = "far"  # FAR ceiling fully used
    MIN_PLATE = "min_plate"  # Remaining area below minimum floor plate
    DENSITY = "density"  # Unit cap from minimum lot area reached


# === Floor stacking ===
RETAIL_FLOOR_HEIGHT_FT = 18
RESIDENTIAL_FLOOR_HEIGHT_FT = 11
PARKING_FLOOR_HEIGHT_FT = 10

# Smallest residential floor the packer will add; overridable per run
MIN_FLOOR_PLATE_SF = 2000.0

# Retail floor is sized to demand plus back-of-house / loading
RETAIL_SIZING_FACTOR = 1.15

# Share of the FAR ceiling at which the envelope counts as FAR-capped
FAR_CAP_THRESHOLD = 0.98

# Zoning relief scales FAR and height by this factor
VARIANCE_BONUS_FACTOR = 1.2

# === Parking ===
PARKING_STALL_SF = 350.0  # Gross SF per stall including drive aisles
UNDERGROUND_FOOTPRINT_PCT = 0.90  # Share of lot area usable per below-grade level

# === Forecast & exit ===
FORECAST_YEARS = 15
DISPOSITION_YEAR = 10
SELLING_COST_PCT = 0.02
TARGET_YIELD = 0.065

# === IRR solver ===
IRR_INITIAL_GUESS = 0.10
IRR_MAX_ITERATIONS = 1000
IRR_TOLERANCE = 1e-7


# Average unit size in square feet by unit type
UNIT_TYPE_SIZES: Dict[str, float] = {
    "studio": 450.0,
    "one_bed": 700.0,
    "two_bed": 1000.0,
    "three_bed": 1250.0,
    "four_bed": 1500.0,
}


@dataclass(frozen=True)
class ZoningDistrict:
    """Bulk and density standards for a named zoning district."""

    code: str
    far: float
    max_height: float  # Feet
    min_lot_area_per_unit: float  # SF of lot per dwelling unit
    setbacks: Tuple[float, float, float]  # (front, rear, side) in feet
    district_type: str


# Chicago bulk standards for the districts the tool ships with
ZONING_DISTRICTS: Dict[str, ZoningDistrict] = {
    # Business & Commercial
    "B1-1": ZoningDistrict("B1-1", 1.2, 38, 2500, (0, 30, 0), "commercial"),
    "B1-2": ZoningDistrict("B1-2", 2.2, 50, 1000, (0, 30, 0), "commercial"),
    "B1-3": ZoningDistrict("B1-3", 3.0, 65, 400, (0, 30, 0), "commercial"),
    "B3-1": ZoningDistrict("B3-1", 1.2, 38, 2500, (0, 30, 0), "commercial"),
    "B3-2": ZoningDistrict("B3-2", 2.2, 50, 1000, (0, 30, 0), "commercial"),
    "B3-3": ZoningDistrict("B3-3", 3.0, 65, 400, (0, 30, 0), "commercial"),
    "B3-5": ZoningDistrict("B3-5", 5.0, 80, 200, (0, 30, 0), "commercial"),
    "C1-2": ZoningDistrict("C1-2", 2.2, 50, 1000, (0, 30, 0), "commercial"),
    # Downtown
    "DX-3": ZoningDistrict("DX-3", 3.0, 900, 400, (0, 0, 0), "downtown"),
    "DX-5": ZoningDistrict("DX-5", 5.0, 900, 200, (0, 0, 0), "downtown"),
    "DX-7": ZoningDistrict("DX-7", 7.0, 900, 145, (0, 0, 0), "downtown"),
    "DX-12": ZoningDistrict("DX-12", 12.0, 900, 115, (0, 0, 0), "downtown"),
    "DX-16": ZoningDistrict("DX-16", 16.0, 900, 100, (0, 0, 0), "downtown"),
}


def get_unit_size(unit_type: str) -> float:
    """Get the default average size for a unit type.

    Args:
        unit_type: Unit type key (e.g., "studio", "one_bed").

    Returns:
        Average unit size in square feet.

    Raises:
        KeyError: If the unit type is not in the table.
    """
    return UNIT_TYPE_SIZES[unit_type]


def get_zoning_district(code: str) -> ZoningDistrict:
    """Get zoning district standards by code.

    Codes are matched ignoring case and hyphens, so "dx5" finds "DX-5".

    Raises:
        KeyError: If no district matches the code.
    """
    wanted = code.upper().replace("-", "")
    for key, district in ZONING_DISTRICTS.items():
        if key.replace("-", "") == wanted:
            return district
    raise KeyError(f"Unknown zoning district: {code}")
