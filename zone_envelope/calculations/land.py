"""Residual land value: the most a buyer can pay for the land at a target yield."""

from dataclasses import dataclass

from ..models.lookups import TARGET_YIELD
from .trace import trace


@dataclass(frozen=True)
class ResidualLandValue:
    """Results of the residual land value solve."""

    target_yield: float
    max_project_cost: float  # NOI / target yield
    residual_land_value: float  # Floored at zero


def calculate_residual_land_value(
    noi: float,
    hard_costs: float,
    soft_costs: float,
    predevelopment: float = 0.0,
    target_yield: float = TARGET_YIELD,
) -> ResidualLandValue:
    """Back out the land price that still hits the target yield on cost.

        max_project_cost = NOI / target_yield
        RLV = max(0, max_project_cost - hard - soft - predevelopment)

    Args:
        noi: Stabilized net operating income.
        hard_costs: Total hard costs.
        soft_costs: Total soft costs.
        predevelopment: Fixed predevelopment costs.
        target_yield: Required yield on cost (e.g., 0.065).

    Returns:
        ResidualLandValue with the supportable cost and land value.

    Example:
        >>> rlv = calculate_residual_land_value(650_000, 6_000_000, 1_800_000)
        >>> round(rlv.residual_land_value)
        2200000
    """
    max_project_cost = noi / target_yield if target_yield > 0 else 0.0
    residual = max(0.0, max_project_cost - hard_costs - soft_costs - predevelopment)

    trace("returns.residual_land_value", residual, {
        "operations.noi": noi,
        "costs.hard_costs": hard_costs,
        "costs.soft_costs": soft_costs,
        "costs.predevelopment": predevelopment,
    })

    return ResidualLandValue(
        target_yield=target_yield,
        max_project_cost=max_project_cost,
        residual_land_value=residual,
    )
