"""Data models for the loan schedule engine.

This module defines dataclasses representing the entities used by the
engine: the loan terms that drive a schedule, individual schedule entries and
the loan record as served by the loan administration backend. Using
dataclasses makes it easy to construct, inspect and serialize these
structures.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from .exceptions import InvalidInput


@dataclass(frozen=True)
class LoanTerms:
    """Inputs required to build an amortization schedule.

    Attributes
    ----------
    principal: Decimal
        The disbursed amount. Must be positive.
    annual_rate_percent: Decimal
        Annual nominal interest rate in percent (``12.5`` means 12.5 %).
    tenure_months: int
        Number of monthly payments.
    start_date: date
        Disbursal date. The first payment falls one month later.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    tenure_months: int
    start_date: date


@dataclass(frozen=True)
class ScheduleEntry:
    """An entry in the amortization schedule.

    ``principal_paid + interest_charged`` always equals ``payment``. The
    ``balance`` is what remains after this period's payment.
    """

    period: int
    date: date
    principal_paid: Decimal
    interest_charged: Decimal
    payment: Decimal
    balance: Decimal


@dataclass(frozen=True)
class LoanRecord:
    """A loan as returned by the administration backend.

    Only ``amount``, ``interest_rate``, ``tenure`` and ``start_date`` feed the
    schedule. The remaining monetary fields are precomputed by the backend and
    shown as-is; foreclosure fields are informational only.
    """

    id: int
    name: str
    status: str
    amount: Decimal
    interest_rate: Decimal  # annual, in percent
    tenure: int  # months
    start_date: date
    monthly_payment: Optional[Decimal] = None
    total_interest: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    foreclosure_amount: Optional[Decimal] = None
    foreclosure_date: Optional[date] = None

    def to_terms(self) -> LoanTerms:
        """Return the schedule inputs for this loan.

        Raises ``InvalidInput`` if the record cannot drive a schedule.
        """
        if self.amount <= 0:
            raise InvalidInput("Loan amount must be positive", {"loan_id": self.id})
        if self.tenure < 1:
            raise InvalidInput("Loan tenure must be at least one month", {"loan_id": self.id})
        if self.interest_rate < 0:
            raise InvalidInput("Interest rate must not be negative", {"loan_id": self.id})
        return LoanTerms(
            principal=self.amount,
            annual_rate_percent=self.interest_rate,
            tenure_months=self.tenure,
            start_date=self.start_date,
        )
