"""Tests for the site envelope and floor packing."""

import math

import pytest

from zone_envelope.calculations.massing import calculate_site_envelope, pack_floors
from zone_envelope.models.inputs import Lot, Setbacks
from zone_envelope.models.lookups import (
    MIN_FLOOR_PLATE_SF,
    RESIDENTIAL_FLOOR_HEIGHT_FT,
    RETAIL_FLOOR_HEIGHT_FT,
    FloorKind,
    StopReason,
)

UNIT_SF = 700.0  # All one-bedrooms
EFFICIENCY = 0.85  # 15% circulation loss


def _concrete_site(min_lot_area_per_unit=1000, far=2.2, max_height=50):
    return calculate_site_envelope(
        Lot(125, 100), Setbacks(rear=30), far, max_height, min_lot_area_per_unit
    )


class TestSiteEnvelope:
    """Tests for lot-derived limits."""

    def test_concrete_lot(self):
        site = _concrete_site()

        assert site.lot_area == 12_500
        assert site.buildable_width == 125
        assert site.buildable_depth == 70
        assert site.max_footprint == 8_750
        assert site.far_ceiling_sf == pytest.approx(27_500)
        assert site.max_units_by_density == 12

    def test_side_setback_applies_to_both_sides(self):
        site = calculate_site_envelope(Lot(50, 100), Setbacks(side=5), 1.0, 40, 1000)

        assert site.buildable_width == 40
        assert site.max_footprint == 4_000

    def test_setbacks_larger_than_lot_give_zero_footprint(self):
        site = calculate_site_envelope(Lot(50, 100), Setbacks(front=60, rear=60), 1.0, 40, 1000)

        assert site.buildable_depth == 0
        assert site.max_footprint == 0


class TestPackFloors:
    """Tests for the floor packer on the 125 x 100 reference lot."""

    def test_density_cap_stops_packing(self):
        """MLA 1000 allows 12 units: floor 2 is clamped, floor 3 never placed."""
        result = pack_floors(_concrete_site(), 0, UNIT_SF, EFFICIENCY)

        assert [f.unit_count for f in result.floors] == [10, 2]
        assert [f.area_sqft for f in result.floors] == [8_750, 8_750]
        assert result.total_units == 12
        assert result.used_gsf == 17_500
        assert result.building_height == 22
        assert result.stop_reason == StopReason.DENSITY
        assert result.constraints.density_capped
        assert not result.constraints.far_capped
        assert not result.constraints.height_capped

    def test_minimum_plate_stops_packing(self):
        """With MLA 400 the fourth floor would be 1,250 SF, under the 2,000 SF minimum."""
        result = pack_floors(_concrete_site(min_lot_area_per_unit=400), 0, UNIT_SF, EFFICIENCY)

        assert len(result.floors) == 3
        assert result.max_residential_floors == 4
        assert result.total_units == 30
        assert result.used_gsf == 26_250
        assert result.building_height == 33
        assert result.stop_reason == StopReason.MIN_PLATE
        # 26,250 < 0.98 x 27,500 = 26,950
        assert not result.constraints.far_capped
        assert not result.constraints.density_capped
        assert not result.constraints.height_capped

    def test_smaller_minimum_plate_adds_sliver_floor(self):
        """A 1,000 SF minimum lets the 1,250 SF remainder through."""
        result = pack_floors(
            _concrete_site(min_lot_area_per_unit=400), 0, UNIT_SF, EFFICIENCY,
            min_floor_plate_sf=1_000,
        )

        assert len(result.floors) == 4
        assert result.floors[-1].area_sqft == pytest.approx(1_250)
        assert result.floors[-1].unit_count == 1
        assert result.total_units == 31
        assert result.constraints.far_capped

    def test_height_stops_packing(self):
        """Floor budget floor(50 / 11) = 4 binds before FAR or density."""
        site = calculate_site_envelope(Lot(125, 100), Setbacks(), 5.0, 50, 200)

        result = pack_floors(site, 0, UNIT_SF, EFFICIENCY)

        assert len(result.floors) == 4
        assert result.total_units == 4 * 15
        assert result.stop_reason == StopReason.HEIGHT
        assert result.constraints.height_capped

    def test_far_ceiling_stops_packing(self):
        """Two full floors use exactly FAR 2.0."""
        site = calculate_site_envelope(Lot(100, 100), Setbacks(), 2.0, 200, 100)

        result = pack_floors(site, 0, UNIT_SF, EFFICIENCY)

        assert len(result.floors) == 2
        assert result.used_gsf == 20_000
        assert result.stop_reason == StopReason.FAR
        assert result.constraints.far_capped

    @pytest.mark.parametrize("plate,expected_units", [
        (2_000, 2),
        (6_000, 6),
        (7_000, 10),
    ])
    def test_whole_unit_boundary_is_not_lost(self, plate, expected_units):
        """At 30% loss a 700 SF unit needs exactly 1,000 gross SF."""
        site = calculate_site_envelope(Lot(plate / 100, 100), Setbacks(), 1.0, 50, 100)

        result = pack_floors(site, 0, 700.0, 0.7)

        assert len(result.floors) == 1
        assert result.floors[0].area_sqft == plate
        assert result.total_units == expected_units

    def test_zero_footprint_yields_empty_stack(self):
        site = calculate_site_envelope(Lot(50, 100), Setbacks(front=60, rear=60), 3.0, 80, 400)

        result = pack_floors(site, 5_000, UNIT_SF, EFFICIENCY)

        assert result.floors == ()
        assert result.total_units == 0
        assert result.used_gsf == 0

    def test_zero_height_yields_empty_stack(self):
        site = _concrete_site(max_height=5)

        result = pack_floors(site, 0, UNIT_SF, EFFICIENCY)

        assert result.floors == ()
        assert result.max_residential_floors == 0

    def test_retail_floor_on_ground(self):
        """Retail is sized at 1.15 x demand and takes the first 18 ft."""
        result = pack_floors(_concrete_site(min_lot_area_per_unit=400), 3_000, UNIT_SF, EFFICIENCY)

        retail = result.floors[0]
        assert retail.kind == FloorKind.RETAIL
        assert retail.level == 1
        assert retail.height_feet == RETAIL_FLOOR_HEIGHT_FT
        assert retail.area_sqft == pytest.approx(3_450)
        assert retail.unit_count == 0
        # (50 - 18) / 11 -> 2 residential floors
        assert result.max_residential_floors == 2
        assert result.residential_floor_count == 2
        assert [f.level for f in result.floors] == [1, 2, 3]

    def test_retail_capped_by_footprint(self):
        result = pack_floors(_concrete_site(), 50_000, UNIT_SF, EFFICIENCY)

        assert result.retail_area == 8_750


class TestPackingProperties:
    """Invariants that hold across lots, zoning, and retail demand."""

    CASES = [
        # (lot, setbacks, far, height, mla, retail)
        (Lot(125, 100), Setbacks(rear=30), 2.2, 50, 1000, 0),
        (Lot(125, 100), Setbacks(rear=30), 2.2, 50, 400, 3_000),
        (Lot(125, 100), Setbacks(rear=30), 2.2 * 1.2, 60, 400, 0),
        (Lot(100, 150), Setbacks(), 5.0, 80, 200, 10_000),
        (Lot(100, 150), Setbacks(), 5.0 * 1.2, 96, 200, 0),
        (Lot(50, 125), Setbacks(front=5, rear=30, side=3), 1.2, 38, 2500, 1_500),
        (Lot(200, 200), Setbacks(), 16.0, 900, 100, 20_000),
        (Lot(25, 125), Setbacks(rear=30), 3.0, 65, 400, 800),
    ]

    @pytest.mark.parametrize("lot,setbacks,far,height,mla,retail", CASES)
    def test_far_conservation(self, lot, setbacks, far, height, mla, retail):
        site = calculate_site_envelope(lot, setbacks, far, height, mla)
        result = pack_floors(site, retail, UNIT_SF, EFFICIENCY)

        assert sum(f.area_sqft for f in result.floors) <= lot.area * far + 1e-6

    @pytest.mark.parametrize("lot,setbacks,far,height,mla,retail", CASES)
    def test_height_conservation(self, lot, setbacks, far, height, mla, retail):
        site = calculate_site_envelope(lot, setbacks, far, height, mla)
        result = pack_floors(site, retail, UNIT_SF, EFFICIENCY)

        assert sum(f.height_feet for f in result.floors) <= height

    @pytest.mark.parametrize("lot,setbacks,far,height,mla,retail", CASES)
    def test_density_ceiling(self, lot, setbacks, far, height, mla, retail):
        site = calculate_site_envelope(lot, setbacks, far, height, mla)
        result = pack_floors(site, retail, UNIT_SF, EFFICIENCY)

        assert result.total_units <= math.floor(lot.area / mla)
        assert result.total_units == sum(f.unit_count for f in result.floors)

    @pytest.mark.parametrize("lot,setbacks,far,height,mla,retail", CASES)
    def test_residential_floors_meet_minimum_plate(self, lot, setbacks, far, height, mla, retail):
        site = calculate_site_envelope(lot, setbacks, far, height, mla)
        result = pack_floors(site, retail, UNIT_SF, EFFICIENCY)

        for floor in result.floors:
            if floor.kind == FloorKind.RESIDENTIAL:
                assert floor.area_sqft >= MIN_FLOOR_PLATE_SF
                assert floor.height_feet == RESIDENTIAL_FLOOR_HEIGHT_FT

    def test_retail_demand_monotonicity(self):
        """More retail demand never shrinks retail or adds residential units."""
        site = _concrete_site(min_lot_area_per_unit=400)
        demands = [500, 1_000, 3_000, 6_000, 10_000, 40_000]

        results = [pack_floors(site, demand, UNIT_SF, EFFICIENCY) for demand in demands]

        for smaller, larger in zip(results, results[1:]):
            assert larger.retail_area >= smaller.retail_area
            assert larger.total_units <= smaller.total_units

    def test_variance_bonus_never_reduces_units(self):
        base = pack_floors(_concrete_site(min_lot_area_per_unit=400), 0, UNIT_SF, EFFICIENCY)
        bonus = pack_floors(
            _concrete_site(min_lot_area_per_unit=400, far=2.2 * 1.2, max_height=60),
            0, UNIT_SF, EFFICIENCY,
        )

        assert bonus.total_units >= base.total_units
        assert bonus.used_gsf >= base.used_gsf
