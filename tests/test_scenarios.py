"""Tests for the zoning scenario matrix."""

from dataclasses import replace

import pytest

from zone_envelope.calculations.engine import compute
from zone_envelope.models.lookups import ZONING_DISTRICTS
from zone_envelope.models.inputs import ZoningEnvelope
from zone_envelope.scenarios import (
    ZoningCombination,
    apply_combination,
    find_best_yield,
    format_matrix_results,
    generate_combinations,
    run_scenario_matrix,
)

CODES = ["B1-2", "B3-3", "B3-5"]


class TestGenerateCombinations:
    """Tests for district / variance combinations."""

    def test_with_variance(self):
        combos = list(generate_combinations(CODES))

        assert len(combos) == 6
        assert [c.name for c in combos[:2]] == ["B1-2", "B1-2+V"]
        assert combos[1].variance_mode

    def test_without_variance(self):
        combos = list(generate_combinations(CODES, test_variance=False))

        assert [c.name for c in combos] == CODES
        assert not any(c.variance_mode for c in combos)

    def test_defaults_to_every_district(self):
        combos = list(generate_combinations())

        assert len(combos) == 2 * len(ZONING_DISTRICTS)


class TestApplyCombination:
    """Tests for swapping a district into the base input."""

    def test_district_standards_applied(self, mixed_use_input):
        combo = ZoningCombination("DX-5+V", "DX-5", variance_mode=True)

        engine_input = apply_combination(mixed_use_input, combo)

        assert engine_input.zoning == ZoningEnvelope.from_district("DX-5")
        assert engine_input.variance_mode
        assert engine_input.lot == mixed_use_input.lot

    def test_parking_ratios_carry_over(self, mixed_use_input):
        custom = replace(mixed_use_input, zoning=ZoningEnvelope(
            far=3.0, max_height=65, parking_ratio_residential=0.5, parking_ratio_retail=1.0,
        ))

        engine_input = apply_combination(custom, ZoningCombination("B1-2", "B1-2", False))

        assert engine_input.zoning.far == 2.2
        assert engine_input.zoning.parking_ratio_residential == 0.5
        assert engine_input.zoning.parking_ratio_retail == 1.0

    def test_unknown_district_raises(self, mixed_use_input):
        with pytest.raises(KeyError):
            apply_combination(mixed_use_input, ZoningCombination("Z-9", "Z-9", False))


class TestScenarioMatrix:
    """Tests for running and ranking scenarios."""

    def test_sorted_by_yield_on_cost(self, mixed_use_input):
        results = run_scenario_matrix(mixed_use_input, generate_combinations(CODES))

        yields = [r.metrics.yield_on_cost for r in results]
        assert len(results) == 6
        assert yields == sorted(yields, reverse=True)

    def test_matches_direct_compute(self, mixed_use_input):
        combo = ZoningCombination("B3-3", "B3-3", False)

        [entry] = run_scenario_matrix(mixed_use_input, [combo])
        direct = compute(apply_combination(mixed_use_input, combo))

        assert entry.metrics == direct.metrics

    def test_format_results(self, mixed_use_input):
        results = run_scenario_matrix(mixed_use_input, generate_combinations(CODES))

        table = format_matrix_results(results, show_top_n=3)

        assert "Total scenarios tested: 6" in table
        assert f"Best scenario: {results[0].combination.name}" in table

    def test_find_best_yield(self, mixed_use_input):
        best = find_best_yield(mixed_use_input, CODES)
        results = run_scenario_matrix(
            mixed_use_input, generate_combinations(CODES, test_variance=False)
        )

        assert best is not None
        assert not best.combination.variance_mode
        assert best.metrics.yield_on_cost == pytest.approx(results[0].metrics.yield_on_cost)

    def test_find_best_yield_with_no_districts(self, mixed_use_input):
        assert find_best_yield(mixed_use_input, []) is None
