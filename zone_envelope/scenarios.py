"""Scenario matrix runner for comparing zoning districts and variance relief.

Every scenario goes through the same ``compute()`` entry point; only the
zoning envelope and the variance flag change between runs.
"""

import logging
from dataclasses import dataclass, replace
from itertools import product
from typing import Iterable, Iterator, List, Optional

from .calculations.engine import AnalysisResult, compute
from .calculations.metrics import SummaryMetrics
from .models.inputs import EngineInput, ZoningEnvelope
from .models.lookups import ZONING_DISTRICTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoningCombination:
    """A zoning district with or without variance relief."""

    name: str
    district_code: str
    variance_mode: bool


@dataclass(frozen=True)
class ScenarioMatrixResult:
    """Result of one scenario in the matrix."""

    combination: ZoningCombination
    result: AnalysisResult

    @property
    def metrics(self) -> SummaryMetrics:
        return self.result.metrics


def generate_combinations(
    district_codes: Optional[Iterable[str]] = None,
    test_variance: bool = True,
) -> Iterator[ZoningCombination]:
    """Generate district / variance combinations.

    Args:
        district_codes: Districts to test. Defaults to every district in the
            reference table.
        test_variance: Also run each district with the variance bonus.

    Yields:
        ZoningCombination for each district and variance setting.
    """
    codes = list(district_codes) if district_codes is not None else list(ZONING_DISTRICTS)
    variance_options = [False, True] if test_variance else [False]

    for code, variance in product(codes, variance_options):
        name = f"{code}+V" if variance else code
        yield ZoningCombination(name=name, district_code=code, variance_mode=variance)


def apply_combination(base_input: EngineInput, combo: ZoningCombination) -> EngineInput:
    """Swap a district's envelope into the base input.

    Parking ratios carry over from the base zoning; the district supplies
    FAR, height, setbacks, and minimum lot area per unit.

    Raises:
        KeyError: If the district code is unknown.
    """
    zoning = ZoningEnvelope.from_district(
        combo.district_code,
        parking_ratio_residential=base_input.zoning.parking_ratio_residential,
        parking_ratio_retail=base_input.zoning.parking_ratio_retail,
    )
    return replace(base_input, zoning=zoning, variance_mode=combo.variance_mode)


def run_scenario_matrix(
    base_input: EngineInput,
    combinations: Optional[Iterable[ZoningCombination]] = None,
) -> List[ScenarioMatrixResult]:
    """Run every combination and return results sorted by yield on cost.

    Args:
        base_input: Base engine input (lot, program, and assumptions).
        combinations: Combinations to run. Defaults to all districts with
            and without variance.

    Returns:
        List of ScenarioMatrixResult, best yield on cost first.
    """
    if combinations is None:
        combinations = generate_combinations()

    results: List[ScenarioMatrixResult] = []
    for combo in combinations:
        result = compute(apply_combination(base_input, combo))
        results.append(ScenarioMatrixResult(combination=combo, result=result))

    logger.debug("Ran %d zoning scenarios", len(results))

    results.sort(key=lambda r: r.metrics.yield_on_cost, reverse=True)
    return results


def format_matrix_results(
    results: List[ScenarioMatrixResult],
    show_top_n: int = 10,
) -> str:
    """Format matrix results as a text table.

    Args:
        results: Scenario matrix results (assumed sorted).
        show_top_n: Number of top results to show.

    Returns:
        Formatted string table.
    """
    lines = [
        "=" * 90,
        "ZONING SCENARIO MATRIX (sorted by yield on cost)",
        "=" * 90,
        "",
        f"{'Rank':<6} {'Scenario':<12} {'Units':>7} {'GSF':>10} {'Height':>8} "
        f"{'YoC':>8} {'IRR':>9} {'EM':>7} {'Stop':>10}",
        "-" * 90,
    ]

    for i, entry in enumerate(results[:show_top_n], 1):
        m = entry.metrics
        lines.append(
            f"{i:<6} {entry.combination.name:<12} {m.total_units:>7d} {m.used_gsf:>10,.0f} "
            f"{m.building_height:>8.0f} {m.yield_on_cost:>8.2%} {m.irr:>9.2%} "
            f"{m.equity_multiple:>6.2f}x {entry.result.stop_reason.value:>10}"
        )

    lines.append("-" * 90)
    lines.append(f"\nTotal scenarios tested: {len(results)}")

    if results:
        best = results[0]
        lines.append(f"\nBest scenario: {best.combination.name}")
        lines.append(f"  Yield on cost: {best.metrics.yield_on_cost:.2%}")

    lines.append("=" * 90)

    return "\n".join(lines)


def find_best_yield(
    base_input: EngineInput,
    district_codes: Optional[Iterable[str]] = None,
    allow_variance: bool = False,
) -> Optional[ScenarioMatrixResult]:
    """Find the district with the highest yield on cost.

    Args:
        base_input: Base engine input.
        district_codes: Districts to consider. Defaults to all.
        allow_variance: Include variance-relief scenarios.

    Returns:
        The best scenario, or None if there were no districts to test.
    """
    results = run_scenario_matrix(
        base_input,
        generate_combinations(district_codes, test_variance=allow_variance),
    )
    return results[0] if results else None
