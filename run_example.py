#!/usr/bin/env python3
"""Example script to run the massing and pro forma engine on a sample lot."""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from zone_envelope.models.inputs import (
    CapitalSource,
    EngineInput,
    Lot,
    ParkingConfig,
    ZoningEnvelope,
)
from zone_envelope.models.lookups import ParkingStrategy
from zone_envelope.calculations.engine import compute
from zone_envelope.calculations.metrics import format_summary_table
from zone_envelope.calculations.trace import TraceContext
from zone_envelope.export.audit_report import forecast_to_dataframe, generate_audit_excel
from zone_envelope.scenarios import (
    find_best_yield,
    format_matrix_results,
    generate_combinations,
    run_scenario_matrix,
)


def get_example_input() -> EngineInput:
    """A 125 x 100 corner lot zoned B3-5 with ground-floor retail."""
    return EngineInput(
        lot=Lot(width=125, depth=100),
        zoning=ZoningEnvelope.from_district("B3-5"),
        unit_mix={"studio": 20, "one_bed": 50, "two_bed": 30},
        circulation_loss=0.15,
        target_retail_sf=3_000,
        parking=ParkingConfig(strategy=ParkingStrategy.PODIUM),
        capital_sources=(
            CapitalSource("Senior Construction Loan", 13_000_000, rate=0.065, amortization_years=30),
            CapitalSource("City Gap Loan", 2_000_000, is_soft=True),
        ),
        exit_cap_rate=0.055,
    )


def run_single_analysis(trace_enabled: bool = False, excel_path: str = "") -> None:
    """Run one analysis and print the massing, summary, and forecast."""
    print("\n" + "=" * 60)
    print("ZONE ENVELOPE - MASSING & PRO FORMA")
    print("=" * 60 + "\n")

    engine_input = get_example_input()

    if trace_enabled:
        with TraceContext():
            result = compute(engine_input)
    else:
        result = compute(engine_input)

    print(f"Lot area:      {result.lot_area:>12,.0f} SF")
    print(f"FAR ceiling:   {result.far_ceiling:>12,.0f} SF")
    print(f"Stopped on:    {result.stop_reason.value:>12}")
    print("\nFloor stack (top down):")
    for floor in reversed(result.parking_floors + result.floors):
        units = f"{floor.unit_count:>3d} units" if floor.unit_count else ""
        print(f"  L{floor.level:>3d}  {floor.kind.value:<12} {floor.area_sqft:>9,.0f} SF  {units}")

    print("\n" + format_summary_table(result.metrics))

    print("\nForecast:")
    print(forecast_to_dataframe(result).round(0).to_string(index=False))

    if result.trace_context:
        print("\n" + result.trace_context.summary())

    if excel_path:
        Path(excel_path).write_bytes(generate_audit_excel(result))
        print(f"\nAudit workbook written to {excel_path}")


def run_matrix() -> None:
    """Run the zoning district matrix for the example lot."""
    print("\n" + "=" * 60)
    print("ZONING SCENARIO MATRIX")
    print("=" * 60 + "\n")

    engine_input = get_example_input()
    codes = ["B1-2", "B3-3", "B3-5", "C1-2", "DX-5"]

    combinations = list(generate_combinations(codes))
    print(f"Testing {len(combinations)} scenarios...\n")

    results = run_scenario_matrix(engine_input, combinations)
    print(format_matrix_results(results, show_top_n=15))

    best = find_best_yield(engine_input, codes)
    if best:
        print(f"\nBest by-right district: {best.combination.name} "
              f"({best.metrics.yield_on_cost:.2%} yield on cost)")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Zone Envelope Model")
    parser.add_argument(
        "--matrix",
        action="store_true",
        help="Run the zoning district scenario matrix",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Record and print calculation traces",
    )
    parser.add_argument(
        "--excel",
        default="",
        help="Write an audit workbook to this path",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    run_single_analysis(trace_enabled=args.trace, excel_path=args.excel)

    if args.matrix:
        run_matrix()

    print("\nDone.")


if __name__ == "__main__":
    main()
