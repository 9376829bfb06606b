"""Input data model for a single massing and pro forma run."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .lookups import (
    DISPOSITION_YEAR,
    FORECAST_YEARS,
    MIN_FLOOR_PLATE_SF,
    TARGET_YIELD,
    UNIT_TYPE_SIZES,
    VARIANCE_BONUS_FACTOR,
    ParkingStrategy,
    get_zoning_district,
)


@dataclass(frozen=True)
class Lot:
    """Rectangular lot dimensions in feet."""

    width: float
    depth: float

    @property
    def area(self) -> float:
        """Lot area in square feet."""
        return self.width * self.depth


@dataclass(frozen=True)
class Setbacks:
    """Required yards in feet. Side setback applies to both sides."""

    front: float = 0.0
    rear: float = 0.0
    side: float = 0.0


@dataclass(frozen=True)
class ZoningEnvelope:
    """Bulk, density, and parking standards that bound the building."""

    far: float
    max_height: float  # Feet
    setbacks: Setbacks = field(default_factory=Setbacks)
    min_lot_area_per_unit: float = 1000.0  # MLA, SF of lot per unit
    parking_ratio_residential: float = 1.0  # Stalls per unit
    parking_ratio_retail: float = 2.5  # Stalls per 1,000 SF
    code: str = ""

    @classmethod
    def from_district(
        cls,
        code: str,
        parking_ratio_residential: float = 1.0,
        parking_ratio_retail: float = 2.5,
    ) -> "ZoningEnvelope":
        """Build an envelope from the zoning district reference table.

        Args:
            code: District code (e.g., "B3-2", "DX-5").
            parking_ratio_residential: Stalls per dwelling unit.
            parking_ratio_retail: Stalls per 1,000 SF of retail.

        Returns:
            ZoningEnvelope with the district's FAR, height, MLA, and setbacks.

        Raises:
            KeyError: If the district code is unknown.
        """
        district = get_zoning_district(code)
        front, rear, side = district.setbacks
        return cls(
            far=district.far,
            max_height=district.max_height,
            setbacks=Setbacks(front=front, rear=rear, side=side),
            min_lot_area_per_unit=district.min_lot_area_per_unit,
            parking_ratio_residential=parking_ratio_residential,
            parking_ratio_retail=parking_ratio_retail,
            code=district.code,
        )


@dataclass(frozen=True)
class ParkingConfig:
    """Parking strategy and requirement overrides."""

    strategy: ParkingStrategy = ParkingStrategy.PODIUM
    tod_waiver: bool = False  # Waives residential parking near transit
    manual_override: Optional[int] = None  # Stalls to provide regardless of requirement


@dataclass(frozen=True)
class CostAssumptions:
    """Acquisition and construction cost assumptions."""

    land_cost: float = 3_500_000.0
    closing_cost_pct: float = 0.02  # As % of land price
    hard_cost_residential_psf: float = 250.0
    hard_cost_retail_psf: float = 200.0
    hard_cost_podium_parking_psf: float = 90.0
    hard_cost_underground_parking_psf: float = 160.0
    soft_cost_pct: float = 0.30  # As % of hard costs
    predevelopment_cost: float = 250_000.0  # Fixed lump sum


@dataclass(frozen=True)
class RentAssumptions:
    """Rent and vacancy assumptions."""

    # Monthly rent per unit by unit type
    unit_rents: Dict[str, float] = field(default_factory=lambda: {
        "studio": 2100.0,
        "one_bed": 2800.0,
        "two_bed": 3800.0,
        "three_bed": 4600.0,
        "four_bed": 5400.0,
    })
    retail_rent_psf: float = 45.0  # Annual, per net SF
    parking_income_monthly: float = 150.0  # Per stall
    vacancy_residential: float = 0.05
    vacancy_retail: float = 0.10


@dataclass(frozen=True)
class ExpenseAssumptions:
    """Stabilized operating expense assumptions."""

    management_fee_pct: float = 0.04  # As % of EGI
    property_tax_pct: float = 0.012  # As % of total project cost
    insurance_per_unit: float = 600.0  # Annual
    utilities_per_unit: float = 1200.0  # Annual
    repairs_per_unit: float = 900.0  # Annual
    reserves_per_unit: float = 250.0  # Annual replacement reserve


@dataclass(frozen=True)
class OperatingGrowthAssumptions:
    """Annual growth rates applied in the multi-year forecast."""

    rent_growth: float = 0.03  # Applied to EGI
    expense_growth: float = 0.025  # Applied to OpEx and reserves


@dataclass(frozen=True)
class CapitalSource:
    """A single debt or subsidy source in the capital stack."""

    name: str
    amount: float
    rate: float = 0.0  # Annual, decimal
    amortization_years: int = 30
    is_soft: bool = False  # Soft sources carry no current-pay debt service
    source_id: str = ""


@dataclass(frozen=True)
class EngineInput:
    """Complete, immutable input bundle for one engine run.

    The caller assembles this once per input change and passes it to
    ``compute()``; nothing in the engine mutates it.
    """

    lot: Lot
    zoning: ZoningEnvelope
    unit_mix: Dict[str, float]  # Raw shares by unit type, any scale
    circulation_loss: float = 0.15  # Share of GSF lost to corridors/cores
    target_retail_sf: float = 0.0
    parking: ParkingConfig = field(default_factory=ParkingConfig)
    costs: CostAssumptions = field(default_factory=CostAssumptions)
    rents: RentAssumptions = field(default_factory=RentAssumptions)
    expenses: ExpenseAssumptions = field(default_factory=ExpenseAssumptions)
    capital_sources: Tuple[CapitalSource, ...] = ()
    exit_cap_rate: float = 0.055
    growth: OperatingGrowthAssumptions = field(default_factory=OperatingGrowthAssumptions)
    variance_mode: bool = False

    # Tunables with documented defaults
    unit_sizes: Dict[str, float] = field(default_factory=lambda: dict(UNIT_TYPE_SIZES))
    min_floor_plate_sf: float = MIN_FLOOR_PLATE_SF
    disposition_year: int = DISPOSITION_YEAR
    target_yield: float = TARGET_YIELD

    @property
    def efficiency(self) -> float:
        """Net-to-gross factor (1 - circulation loss)."""
        return 1 - self.circulation_loss

    @property
    def effective_far(self) -> float:
        """FAR after the variance bonus, if variance mode is on."""
        if self.variance_mode:
            return self.zoning.far * VARIANCE_BONUS_FACTOR
        return self.zoning.far

    @property
    def effective_max_height(self) -> float:
        """Max height after the variance bonus, if variance mode is on."""
        if self.variance_mode:
            return self.zoning.max_height * VARIANCE_BONUS_FACTOR
        return self.zoning.max_height

    def validate(self) -> list[str]:
        """Validate inputs and return list of errors.

        Returns:
            List of validation error messages. Empty if valid.
        """
        errors = []

        # Lot and zoning
        if self.lot.width <= 0 or self.lot.depth <= 0:
            errors.append(
                f"lot dimensions must be positive, got {self.lot.width} x {self.lot.depth}"
            )
        if self.zoning.far <= 0:
            errors.append(f"far must be positive, got {self.zoning.far}")
        if self.zoning.max_height <= 0:
            errors.append(f"max_height must be positive, got {self.zoning.max_height}")
        if self.zoning.min_lot_area_per_unit <= 0:
            errors.append(
                f"min_lot_area_per_unit must be positive, got {self.zoning.min_lot_area_per_unit}"
            )
        setbacks = self.zoning.setbacks
        if min(setbacks.front, setbacks.rear, setbacks.side) < 0:
            errors.append("setbacks must be non-negative")

        # Unit mix
        if any(share < 0 for share in self.unit_mix.values()):
            errors.append("unit_mix shares must be non-negative")
        if sum(self.unit_mix.values()) <= 0:
            errors.append("unit_mix shares must sum to more than 0")
        missing = sorted(k for k in self.unit_mix if k not in self.unit_sizes)
        if missing:
            errors.append(f"no unit size for unit types: {', '.join(missing)}")

        # Program
        if not 0 <= self.circulation_loss < 1:
            errors.append(f"circulation_loss must be 0-1, got {self.circulation_loss}")
        if self.target_retail_sf < 0:
            errors.append(f"target_retail_sf must be non-negative, got {self.target_retail_sf}")
        if self.parking.manual_override is not None and self.parking.manual_override < 0:
            errors.append(
                f"parking manual_override must be non-negative, got {self.parking.manual_override}"
            )
        if self.min_floor_plate_sf < 0:
            errors.append(f"min_floor_plate_sf must be non-negative, got {self.min_floor_plate_sf}")

        # Exit and forecast
        if self.exit_cap_rate <= 0:
            errors.append(f"exit_cap_rate must be positive, got {self.exit_cap_rate}")
        if not 1 <= self.disposition_year <= FORECAST_YEARS:
            errors.append(
                f"disposition_year must be 1-{FORECAST_YEARS}, got {self.disposition_year}"
            )
        if self.target_yield <= 0:
            errors.append(f"target_yield must be positive, got {self.target_yield}")

        # Capital stack
        for source in self.capital_sources:
            if source.amount < 0:
                errors.append(f"capital source '{source.name}' amount must be non-negative")
            if source.rate < 0:
                errors.append(f"capital source '{source.name}' rate must be non-negative")
            if source.amortization_years <= 0:
                errors.append(
                    f"capital source '{source.name}' amortization_years must be positive"
                )

        return errors
