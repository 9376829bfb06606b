"""Unit-mix normalization and blended unit size."""

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass(frozen=True)
class UnitMixResult:
    """Normalized unit mix with blended sizes."""

    shares: Dict[str, float]  # Fractions summing to 1.0
    avg_unit_sf: float  # Blended net unit size
    gross_sf_per_unit: float  # Blended size grossed up for circulation
    efficiency: float


def normalize_unit_mix(
    raw_shares: Mapping[str, float],
    unit_sizes: Mapping[str, float],
    efficiency: float,
) -> UnitMixResult:
    """Normalize raw unit-mix shares and blend the average unit size.

    Shares need not sum to 100; each is divided by the sum of all shares.
    Whether the sliders total 100% is a display check, not an engine rule.

        share_i = raw_i / sum(raw)
        avg_unit_sf = sum(share_i * size_i)
        gross_sf_per_unit = avg_unit_sf / efficiency

    Args:
        raw_shares: Unit type -> raw share (any non-negative scale).
        unit_sizes: Unit type -> average unit size in SF.
        efficiency: Net-to-gross factor (1 - circulation loss).

    Returns:
        UnitMixResult with normalized shares and blended sizes.

    Raises:
        ValueError: If the shares sum to zero.
        KeyError: If a unit type has no size.

    Example:
        >>> mix = normalize_unit_mix({"studio": 20, "one_bed": 50, "two_bed": 30},
        ...                          UNIT_TYPE_SIZES, 0.85)
        >>> mix.avg_unit_sf
        740.0
    """
    total = sum(raw_shares.values())
    if total <= 0:
        raise ValueError(f"unit mix shares must sum to more than 0, got {total}")

    shares = {unit_type: share / total for unit_type, share in raw_shares.items()}
    avg_unit_sf = sum(share * unit_sizes[unit_type] for unit_type, share in shares.items())
    gross_sf_per_unit = avg_unit_sf / efficiency if efficiency > 0 else 0.0

    return UnitMixResult(
        shares=shares,
        avg_unit_sf=avg_unit_sf,
        gross_sf_per_unit=gross_sf_per_unit,
        efficiency=efficiency,
    )

