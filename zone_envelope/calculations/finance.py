"""Financial primitives: amortizing payment, NPV, and IRR."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np
import numpy_financial as npf

from ..models.lookups import IRR_INITIAL_GUESS, IRR_MAX_ITERATIONS, IRR_TOLERANCE

logger = logging.getLogger(__name__)


class IRRStatus(Enum):
    """Outcome of the Newton-Raphson IRR solve."""

    CONVERGED = "converged"
    DID_NOT_CONVERGE = "did_not_converge"
    ZERO_DERIVATIVE = "zero_derivative"


@dataclass(frozen=True)
class IRRResult:
    """IRR estimate with solver status.

    ``rate`` is always the last estimate, converged or not, so callers that
    only want a number keep working; check ``converged`` to tell a real
    negative or zero IRR from solver failure.
    """

    rate: float
    status: IRRStatus
    iterations: int

    @property
    def converged(self) -> bool:
        return self.status == IRRStatus.CONVERGED


def annual_debt_service(
    principal: float,
    annual_rate: float,
    amortization_years: int,
) -> float:
    """Calculate annual payment on a fully amortizing loan.

    Payments are monthly and annualized:
        monthly_rate = annual_rate / 12
        n = amortization_years * 12
        PMT = P * r / (1 - (1 + r)^-n)
        annual = PMT * 12

    A zero rate falls back to straight-line principal / amortization_years.

    Args:
        principal: Loan amount.
        annual_rate: Annual interest rate (e.g., 0.065).
        amortization_years: Amortization period in years.

    Returns:
        Annual debt service (0 for a zero principal or term).

    Example:
        >>> annual_debt_service(1_000_000, 0.0, 25)
        40000.0
    """
    if principal == 0 or amortization_years <= 0:
        return 0.0
    if annual_rate == 0:
        return principal / amortization_years

    monthly_rate = annual_rate / 12
    total_payments = amortization_years * 12
    monthly_payment = -npf.pmt(
        rate=monthly_rate,
        nper=total_payments,
        pv=principal,
        fv=0,
    )
    return monthly_payment * 12


def npv(rate: float, cash_flows: Sequence[float]) -> float:
    """Net present value with the first flow at t=0 (undiscounted)."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(flows / (1 + rate) ** periods))


def npv_derivative(rate: float, cash_flows: Sequence[float]) -> float:
    """Analytic derivative of NPV with respect to rate: sum(-t * CF_t / (1+r)^(t+1))."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(-periods * flows / (1 + rate) ** (periods + 1)))


def irr(
    cash_flows: Sequence[float],
    guess: float = IRR_INITIAL_GUESS,
    max_iterations: int = IRR_MAX_ITERATIONS,
    tolerance: float = IRR_TOLERANCE,
) -> IRRResult:
    """Solve for internal rate of return with Newton-Raphson.

    Iterates r_{k+1} = r_k - NPV(r_k) / NPV'(r_k) until successive estimates
    differ by less than ``tolerance`` or ``max_iterations`` is reached.

    The solver neither raises nor emits numpy warnings. A zero derivative
    stops immediately with ZERO_DERIVATIVE; running out of iterations or
    diverging to a non-finite value returns DID_NOT_CONVERGE. In every case
    ``rate`` is the last finite estimate reached.

    Args:
        cash_flows: Periodic cash flows, t=0 first.
        guess: Starting rate.
        max_iterations: Iteration cap.
        tolerance: Convergence threshold on successive estimates.

    Returns:
        IRRResult with the rate, solver status, and iterations used.

    Example:
        >>> irr([-100_000, 110_000]).rate
        0.1  # Approximately
    """
    rate = guess

    # Far-off estimates overflow the discount factors; the finite check below handles it
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        for iteration in range(1, max_iterations + 1):
            derivative = npv_derivative(rate, cash_flows)
            if derivative == 0:
                logger.warning(
                    "IRR derivative is zero at rate %.6f; returning last estimate", rate
                )
                return IRRResult(rate=rate, status=IRRStatus.ZERO_DERIVATIVE, iterations=iteration)

            new_rate = rate - npv(rate, cash_flows) / derivative

            if not np.isfinite(new_rate):
                logger.warning("IRR diverged after %d iterations", iteration)
                return IRRResult(rate=rate, status=IRRStatus.DID_NOT_CONVERGE, iterations=iteration)

            if abs(new_rate - rate) < tolerance:
                return IRRResult(rate=new_rate, status=IRRStatus.CONVERGED, iterations=iteration)

            rate = new_rate

    logger.warning(
        "IRR did not converge in %d iterations; last estimate %.6f", max_iterations, rate
    )
    return IRRResult(rate=rate, status=IRRStatus.DID_NOT_CONVERGE, iterations=max_iterations)
