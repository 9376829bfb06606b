"""Parking requirement and parking structure sizing."""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from ..models.lookups import (
    PARKING_FLOOR_HEIGHT_FT,
    PARKING_STALL_SF,
    UNDERGROUND_FOOTPRINT_PCT,
    FloorKind,
    ParkingStrategy,
)
from .massing import Floor
from .trace import trace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParkingResult:
    """Parking requirement, provision, and structure."""

    required_residential: int
    required_retail: int
    required: int  # Zoning requirement, reported even when overridden
    provided: int  # Stalls actually built and sized
    parking_area: float  # provided x stall area
    level_footprint: float  # Area available per parking level
    floors: Tuple[Floor, ...]
    strategy: ParkingStrategy

    @property
    def level_count(self) -> int:
        return len(self.floors)

    @property
    def is_underground(self) -> bool:
        return self.strategy == ParkingStrategy.UNDERGROUND


def calculate_required_stalls(
    total_units: int,
    target_retail_sf: float,
    parking_ratio_residential: float,
    parking_ratio_retail: float,
    tod_waiver: bool = False,
) -> Tuple[int, int]:
    """Calculate zoning-required stalls.

        residential = ceil(units x ratio), or 0 with a TOD waiver
        retail = ceil(retail_sf / 1000 x ratio per 1,000 SF)

    Retail stalls follow the retail demand figure, not the built retail area.

    Returns:
        Tuple of (residential stalls, retail stalls).
    """
    if tod_waiver:
        residential = 0
    else:
        residential = math.ceil(total_units * parking_ratio_residential)

    retail = math.ceil((target_retail_sf / 1000) * parking_ratio_retail)
    return residential, retail


def resolve_parking(
    total_units: int,
    target_retail_sf: float,
    parking_ratio_residential: float,
    parking_ratio_retail: float,
    strategy: ParkingStrategy,
    buildable_footprint: float,
    lot_area: float,
    tod_waiver: bool = False,
    manual_override: Optional[int] = None,
) -> ParkingResult:
    """Size parking stalls and parking levels.

    A manual override replaces the requirement for sizing; the requirement
    is still reported for comparison. Levels are
    ceil(provided x 350 / level footprint), where the level footprint is the
    buildable footprint for podium parking or 90% of the lot for underground.
    Each level's area is the smaller of the level footprint and what is left
    to place. With no level footprint nothing can be built, so no stalls
    are provided, override or not.

    Args:
        total_units: Residential units from the massing.
        target_retail_sf: Retail demand in SF.
        parking_ratio_residential: Stalls per unit.
        parking_ratio_retail: Stalls per 1,000 SF retail.
        strategy: Podium or underground.
        buildable_footprint: Footprint inside setbacks.
        lot_area: Gross lot area.
        tod_waiver: Waive residential parking near transit.
        manual_override: Stalls to provide regardless of requirement.

    Returns:
        ParkingResult with stall counts and parking floors.

    Example:
        >>> result = resolve_parking(30, 0, 1.0, 2.5, ParkingStrategy.PODIUM, 8750, 12500)
        >>> result.provided, result.level_count
        (30, 2)
    """
    required_res, required_retail = calculate_required_stalls(
        total_units,
        target_retail_sf,
        parking_ratio_residential,
        parking_ratio_retail,
        tod_waiver,
    )
    required = required_res + required_retail

    if strategy == ParkingStrategy.UNDERGROUND:
        level_footprint = lot_area * UNDERGROUND_FOOTPRINT_PCT
    else:
        level_footprint = buildable_footprint

    # No footprint means no structure, so nothing is provided
    if level_footprint > 0:
        provided = manual_override if manual_override is not None else required
    else:
        provided = 0
    trace("parking.provided", float(provided), {"parking.required": float(required)})

    parking_area = trace("parking.area", provided * PARKING_STALL_SF, {
        "parking.provided": float(provided),
    })

    if level_footprint > 0:
        level_count = math.ceil(parking_area / level_footprint)
    else:
        level_count = 0

    is_underground = strategy == ParkingStrategy.UNDERGROUND
    floors = []
    for p in range(level_count):
        floors.append(Floor(
            kind=FloorKind.PARKING,
            height_feet=PARKING_FLOOR_HEIGHT_FT,
            area_sqft=min(parking_area - p * level_footprint, level_footprint),
            level=-(p + 1) if is_underground else p + 1,
            is_underground=is_underground,
        ))

    logger.debug(
        "Parking: %d required, %d provided, %d %s levels",
        required, provided, level_count, strategy.value,
    )

    return ParkingResult(
        required_residential=required_res,
        required_retail=required_retail,
        required=required,
        provided=provided,
        parking_area=parking_area,
        level_footprint=level_footprint,
        floors=tuple(floors),
        strategy=strategy,
    )
