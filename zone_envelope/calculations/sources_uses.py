"""Sources and Uses of funds."""

from dataclasses import dataclass
from typing import Tuple

from .capital_stack import CapitalStackResult
from .costs import DevelopmentCosts


@dataclass(frozen=True)
class SourcesUses:
    """Capital stack showing sources and uses of funds.

    Uses:
        acquisition: Land plus closing costs
        hard_costs: Residential, retail, and parking construction
        soft_costs: Soft cost load on hard costs
        predevelopment: Fixed predevelopment budget
        total_uses: Total project cost

    Sources:
        debt: (name, amount) per capital source, in input order
        total_debt: Sum of all sources
        equity: Funding gap filled by equity
        total_sources: Debt plus equity

    When debt exceeds cost, equity is zero and sources exceed uses; the
    excess is reported, not netted.
    """
    acquisition: float
    hard_costs: float
    soft_costs: float
    predevelopment: float
    total_uses: float

    debt: Tuple[Tuple[str, float], ...]
    total_debt: float
    equity: float
    total_sources: float

    def __post_init__(self):
        """Validate sources cover uses."""
        if self.total_sources + 1.0 < self.total_uses:  # Allow $1 rounding
            raise ValueError(
                f"Sources ({self.total_sources:,.0f}) must cover "
                f"Uses ({self.total_uses:,.0f})"
            )

    @property
    def excess_sources(self) -> float:
        return max(0.0, self.total_sources - self.total_uses)

    @property
    def equity_pct(self) -> float:
        return self.equity / self.total_sources if self.total_sources > 0 else 0.0


def calculate_sources_uses(
    costs: DevelopmentCosts,
    capital: CapitalStackResult,
) -> SourcesUses:
    """Assemble sources and uses from development costs and the capital stack."""
    return SourcesUses(
        acquisition=costs.acquisition,
        hard_costs=costs.hard_costs,
        soft_costs=costs.soft_costs,
        predevelopment=costs.predevelopment,
        total_uses=costs.total_project_cost,
        debt=tuple((s.source.name, s.source.amount) for s in capital.sources),
        total_debt=capital.total_debt,
        equity=capital.equity_required,
        total_sources=capital.total_debt + capital.equity_required,
    )
