"""Capital stack: debt sources, funding gap, and hard debt service."""

from dataclasses import dataclass
from typing import Iterable, Tuple

from ..models.inputs import CapitalSource
from .finance import annual_debt_service
from .trace import trace


@dataclass(frozen=True)
class SourceDebtService:
    """A capital source with its annual debt service."""

    source: CapitalSource
    annual_debt_service: float  # 0 for soft sources


@dataclass(frozen=True)
class CapitalStackResult:
    """Resolved capital stack."""

    sources: Tuple[SourceDebtService, ...]  # Input order preserved
    total_debt: float  # All sources, hard and soft
    hard_debt: float
    soft_debt: float
    equity_required: float  # Funding gap, never negative
    annual_debt_service: float  # Hard (current-pay) sources only

    @property
    def loan_to_cost(self) -> float:
        uses = self.total_debt + self.equity_required
        return self.total_debt / uses if uses > 0 else 0.0


def resolve_capital_stack(
    sources: Iterable[CapitalSource],
    total_project_cost: float,
) -> CapitalStackResult:
    """Resolve the funding gap and annual debt service.

        total_debt = sum(amount) over every source
        equity_required = max(0, total_project_cost - total_debt)
        debt_service = sum(annual PMT) over non-soft sources

    Soft sources count toward total debt but carry no current-pay
    debt service.

    Args:
        sources: Capital sources in display order.
        total_project_cost: Total uses of funds.

    Returns:
        CapitalStackResult with totals and per-source debt service.

    Example:
        >>> stack = resolve_capital_stack(
        ...     [CapitalSource("Senior", 10_000_000, 0.065, 30)], 15_000_000
        ... )
        >>> stack.equity_required
        5000000.0
    """
    serviced = []
    hard_debt = 0.0
    soft_debt = 0.0
    debt_service = 0.0

    for source in sources:
        if source.is_soft:
            soft_debt += source.amount
            payment = 0.0
        else:
            hard_debt += source.amount
            payment = annual_debt_service(source.amount, source.rate, source.amortization_years)
            debt_service += payment
        serviced.append(SourceDebtService(source=source, annual_debt_service=payment))

    total_debt = trace("capital.total_debt", hard_debt + soft_debt, {
        "capital.hard_debt": hard_debt,
        "capital.soft_debt": soft_debt,
    })
    equity = trace("capital.equity_required", max(0.0, total_project_cost - total_debt), {
        "costs.total_project_cost": total_project_cost,
        "capital.total_debt": total_debt,
    })
    trace("capital.debt_service", debt_service, {"capital.hard_debt": hard_debt})

    return CapitalStackResult(
        sources=tuple(serviced),
        total_debt=total_debt,
        hard_debt=hard_debt,
        soft_debt=soft_debt,
        equity_required=equity,
        annual_debt_service=debt_service,
    )
