"""Core calculation engine for loan amortization schedules.

This module implements the financial logic required to build the schedule of
an equal-installment (EMI) loan: the fixed monthly payment and, for every
period, how that payment splits into interest and principal and what balance
remains. Results are returned as a list of ``ScheduleEntry`` objects; a
separate helper aggregates them into a summary dictionary.

All arithmetic is done with ``Decimal`` and no intermediate rounding.
Callers format amounts for display themselves.
"""

from __future__ import annotations

import logging
from decimal import Decimal, getcontext, localcontext
from typing import Dict, List, Sequence

from .data_models import LoanTerms, ScheduleEntry
from .exceptions import InvalidInput
from .utils import add_months

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Convert an annual percentage rate into a monthly fractional rate."""
    return Decimal(annual_rate_percent) / Decimal(100) / Decimal(12)


def calculate_emi(principal: Decimal, rate_per_month: Decimal, tenure_months: int) -> Decimal:
    """Return the equated monthly installment for a loan.

    The formula is:

        emi = P * i * (1 + i)^n / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero the
    denominator vanishes and the payment is simply ``P / n``.

    ``(1 + i)^n - 1`` cancels about ``-log10(i)`` leading digits, so the
    factor is computed with that many extra digits of precision. The result
    is rounded back to the caller's precision. Rates too small to register
    against ``n`` at that precision pay ``P / n``.
    """
    if tenure_months < 1:
        raise InvalidInput("Tenure must be at least one month", {"tenure_months": tenure_months})
    rate_per_month = Decimal(rate_per_month)
    if rate_per_month == 0:
        return principal / Decimal(tenure_months)
    precision = getcontext().prec
    digits = len(str(tenure_months))
    if rate_per_month.adjusted() + digits < -precision:
        # n * i is below the working precision, so the payment rounds to P / n
        return principal / Decimal(tenure_months)
    with localcontext() as ctx:
        ctx.prec = precision + max(0, -rate_per_month.adjusted()) + digits
        factor = (1 + rate_per_month) ** tenure_months
        growth = factor - 1
        if growth == 0:
            emi = principal / Decimal(tenure_months)
        else:
            emi = principal * rate_per_month * factor / growth
    return +emi


def validate_terms(terms: LoanTerms) -> None:
    """Raise ``InvalidInput`` unless ``terms`` can produce a schedule."""
    if terms.principal <= 0:
        raise InvalidInput("Principal must be positive", {"principal": str(terms.principal)})
    if terms.tenure_months < 1:
        raise InvalidInput("Tenure must be at least one month", {"tenure_months": terms.tenure_months})
    if terms.annual_rate_percent < 0:
        raise InvalidInput(
            "Annual interest rate must not be negative",
            {"annual_rate_percent": str(terms.annual_rate_percent)},
        )


def check_tenure_limit(terms: LoanTerms, max_tenure_months: int) -> None:
    """Reject terms longer than a caller-imposed ceiling.

    The engine itself accepts any tenure; request handlers use this to bound
    the work a single request can ask for.
    """
    if max_tenure_months > 0 and terms.tenure_months > max_tenure_months:
        raise InvalidInput(
            f"Tenure must not exceed {max_tenure_months} months",
            {"tenure_months": terms.tenure_months},
        )


def compute_schedule(terms: LoanTerms) -> List[ScheduleEntry]:
    """Compute the amortization schedule for a loan.

    Parameters
    ----------
    terms: LoanTerms
        Principal, annual rate in percent, tenure in months and disbursal
        date.

    Returns
    -------
    List[ScheduleEntry]
        Exactly ``terms.tenure_months`` entries in period order. Entry ``i``
        (0-based) is dated ``start_date`` plus ``i + 1`` months, with the day
        clamped to the end of shorter months.

    Raises
    ------
    InvalidInput
        If the principal is not positive, the tenure is below one month or
        the rate is negative. Nothing is computed in that case.
    """
    validate_terms(terms)

    principal = Decimal(terms.principal)
    rate_per_month = monthly_rate(terms.annual_rate_percent)
    emi = calculate_emi(principal, rate_per_month, terms.tenure_months)
    logger.debug(
        "Computing %d-period schedule: principal=%s rate=%s%% emi=%s",
        terms.tenure_months, principal, terms.annual_rate_percent, emi,
    )

    schedule: List[ScheduleEntry] = []
    balance = principal
    for index in range(terms.tenure_months):
        interest_charged = balance * rate_per_month
        principal_paid = emi - interest_charged
        balance = max(ZERO, balance - principal_paid)
        schedule.append(
            ScheduleEntry(
                period=index + 1,
                date=add_months(terms.start_date, index + 1),
                principal_paid=principal_paid,
                interest_charged=interest_charged,
                payment=emi,
                balance=balance,
            )
        )
    return schedule


def summarize_schedule(terms: LoanTerms, schedule: Sequence[ScheduleEntry]) -> Dict[str, object]:
    """Aggregate a schedule into the figures shown next to it.

    Monetary values are returned as floats and dates as ISO strings so the
    summary can be serialized directly.
    """
    total_interest = sum((e.interest_charged for e in schedule), ZERO)
    total_amount = sum((e.payment for e in schedule), ZERO)
    return {
        "principal": float(terms.principal),
        "annual_rate_percent": float(terms.annual_rate_percent),
        "total_interest": float(total_interest),
        "total_amount": float(total_amount),
        "monthly_payment": float(schedule[0].payment) if schedule else 0.0,
        "payments": len(schedule),
        "first_payment_date": schedule[0].date.isoformat() if schedule else None,
        "last_payment_date": schedule[-1].date.isoformat() if schedule else None,
    }
