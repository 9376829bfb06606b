"""Massing: site envelope and floor-by-floor packing under zoning ceilings."""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from ..models.inputs import Lot, Setbacks
from ..models.lookups import (
    FAR_CAP_THRESHOLD,
    MIN_FLOOR_PLATE_SF,
    RESIDENTIAL_FLOOR_HEIGHT_FT,
    RETAIL_FLOOR_HEIGHT_FT,
    RETAIL_SIZING_FACTOR,
    FloorKind,
    StopReason,
)
from .trace import trace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Floor:
    """One floor of the massing stack."""

    kind: FloorKind
    height_feet: float
    area_sqft: float
    level: int  # 1-based above grade; negative below grade
    unit_count: int = 0
    is_underground: bool = False


@dataclass(frozen=True)
class SiteEnvelope:
    """Lot-derived limits that bound the massing."""

    lot_area: float
    buildable_width: float
    buildable_depth: float
    max_footprint: float  # Buildable width x depth
    far_ceiling_sf: float  # Lot area x effective FAR
    max_height: float  # Effective max height in feet
    max_units_by_density: int  # floor(lot area / MLA)


@dataclass(frozen=True)
class ConstraintFlags:
    """Which zoning ceilings the massing runs into."""

    height_capped: bool
    far_capped: bool
    density_capped: bool


@dataclass(frozen=True)
class MassingResult:
    """Packed floor stack and derived totals."""

    floors: Tuple[Floor, ...]  # Bottom to top
    total_units: int
    used_gsf: float
    building_height: float
    max_residential_floors: int  # Floor-count budget left after retail
    stop_reason: StopReason
    constraints: ConstraintFlags

    @property
    def retail_area(self) -> float:
        return sum(f.area_sqft for f in self.floors if f.kind == FloorKind.RETAIL)

    @property
    def residential_area(self) -> float:
        return sum(f.area_sqft for f in self.floors if f.kind == FloorKind.RESIDENTIAL)

    @property
    def residential_floor_count(self) -> int:
        return sum(1 for f in self.floors if f.kind == FloorKind.RESIDENTIAL)


def calculate_site_envelope(
    lot: Lot,
    setbacks: Setbacks,
    far: float,
    max_height: float,
    min_lot_area_per_unit: float,
) -> SiteEnvelope:
    """Derive buildable footprint, FAR ceiling, and density cap for a lot.

    Side setback is taken on both sides; front and rear come off the depth.
    Buildable dimensions are floored at zero, so setbacks that consume the
    lot yield a zero footprint rather than an error.

    Args:
        lot: Lot dimensions.
        setbacks: Required yards.
        far: Effective floor area ratio (after any variance bonus).
        max_height: Effective height limit in feet.
        min_lot_area_per_unit: Minimum lot area per dwelling unit.

    Returns:
        SiteEnvelope with all lot-derived limits.

    Example:
        >>> site = calculate_site_envelope(Lot(125, 100), Setbacks(rear=30), 2.2, 50, 1000)
        >>> site.max_footprint, site.max_units_by_density
        (8750.0, 12)
    """
    lot_area = trace("site.lot_area", lot.area, {
        "inputs.lot_width": lot.width,
        "inputs.lot_depth": lot.depth,
    })
    buildable_width = max(0.0, lot.width - setbacks.side * 2)
    buildable_depth = max(0.0, lot.depth - setbacks.front - setbacks.rear)
    max_footprint = trace("site.max_footprint", buildable_width * buildable_depth, {
        "site.buildable_width": buildable_width,
        "site.buildable_depth": buildable_depth,
    })
    far_ceiling = trace("site.far_ceiling", lot_area * far, {
        "site.lot_area": lot_area,
        "inputs.far": far,
    })

    if min_lot_area_per_unit > 0:
        max_units = math.floor(lot_area / min_lot_area_per_unit)
    else:
        max_units = 0

    return SiteEnvelope(
        lot_area=lot_area,
        buildable_width=buildable_width,
        buildable_depth=buildable_depth,
        max_footprint=max_footprint,
        far_ceiling_sf=far_ceiling,
        max_height=max_height,
        max_units_by_density=max_units,
    )


def pack_floors(
    site: SiteEnvelope,
    target_retail_sf: float,
    avg_unit_sf: float,
    efficiency: float,
    min_floor_plate_sf: float = MIN_FLOOR_PLATE_SF,
) -> MassingResult:
    """Stack an optional retail base and residential floors within the envelope.

    1. If retail is targeted, one retail floor of
       min(max footprint, FAR ceiling, 1.15 x target) goes on the ground.
    2. Remaining height / residential floor height gives the floor budget.
    3. Each residential floor checks, in order:
       - FAR: stop once used GSF reaches the ceiling.
       - Plate: area = min(footprint, FAR left); stop if below the minimum plate.
       - Units: floor(area x efficiency / net unit size).
       - Density: clamp units to what the density cap still allows; stop if none.
       Density clamps the last emitted floor rather than suppressing it.

    Args:
        site: Lot-derived envelope.
        target_retail_sf: Retail demand in SF (0 skips the retail floor).
        avg_unit_sf: Blended net unit size.
        efficiency: Net-to-gross factor (1 - circulation loss).
        min_floor_plate_sf: Smallest residential floor worth building.

    Returns:
        MassingResult with the floor stack, totals, and stop reason.
    """
    floors: list[Floor] = []
    current_height = 0.0
    used_gsf = 0.0
    total_units = 0

    if target_retail_sf > 0:
        retail_area = min(
            site.max_footprint,
            site.far_ceiling_sf,
            target_retail_sf * RETAIL_SIZING_FACTOR,
        )
        if retail_area > 0:
            floors.append(Floor(
                kind=FloorKind.RETAIL,
                height_feet=RETAIL_FLOOR_HEIGHT_FT,
                area_sqft=retail_area,
                level=1,
            ))
            current_height += RETAIL_FLOOR_HEIGHT_FT
            used_gsf += retail_area

    remaining_height = max(0.0, site.max_height - current_height)
    max_res_floors = math.floor(remaining_height / RESIDENTIAL_FLOOR_HEIGHT_FT)

    stop_reason = StopReason.HEIGHT
    for _ in range(max_res_floors):
        if used_gsf >= site.far_ceiling_sf:
            stop_reason = StopReason.FAR
            break

        floor_area = min(site.max_footprint, site.far_ceiling_sf - used_gsf)
        if floor_area < min_floor_plate_sf or floor_area <= 0:
            stop_reason = StopReason.MIN_PLATE
            break

        if avg_unit_sf > 0:
            units_on_floor = math.floor(floor_area * efficiency / avg_unit_sf)
        else:
            units_on_floor = 0
        if total_units + units_on_floor > site.max_units_by_density:
            units_on_floor = max(0, site.max_units_by_density - total_units)
            if units_on_floor == 0:
                stop_reason = StopReason.DENSITY
                break

        floors.append(Floor(
            kind=FloorKind.RESIDENTIAL,
            height_feet=RESIDENTIAL_FLOOR_HEIGHT_FT,
            area_sqft=floor_area,
            level=len(floors) + 1,
            unit_count=units_on_floor,
        ))
        used_gsf += floor_area
        current_height += RESIDENTIAL_FLOOR_HEIGHT_FT
        total_units += units_on_floor

    constraints = ConstraintFlags(
        height_capped=current_height + RESIDENTIAL_FLOOR_HEIGHT_FT > site.max_height,
        far_capped=used_gsf >= site.far_ceiling_sf * FAR_CAP_THRESHOLD,
        density_capped=total_units >= site.max_units_by_density,
    )

    logger.debug(
        "Packed %d floors, %d units, %.0f GSF; stopped on %s",
        len(floors), total_units, used_gsf, stop_reason.value,
    )
    trace("massing.used_gsf", used_gsf, {"site.far_ceiling": site.far_ceiling_sf})
    trace("massing.total_units", float(total_units), {
        "unit_mix.avg_unit_sf": avg_unit_sf,
        "inputs.efficiency": efficiency,
        "site.max_units_by_density": float(site.max_units_by_density),
    })

    return MassingResult(
        floors=tuple(floors),
        total_units=total_units,
        used_gsf=used_gsf,
        building_height=current_height,
        max_residential_floors=max_res_floors,
        stop_reason=stop_reason,
        constraints=constraints,
    )
