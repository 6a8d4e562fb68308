"""Aggregates for the loans dashboard.

The backend lists loans grouped by user name. These helpers flatten that
listing, count loans by status and filter users by name; they never mutate
their input.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from .data_models import LoanRecord

LoansByUser = Mapping[str, Sequence[LoanRecord]]


def _count_status(loans: Sequence[LoanRecord], status: str) -> int:
    return sum(1 for loan in loans if loan.status.lower() == status)


def all_loans(loans_by_user: LoansByUser) -> List[LoanRecord]:
    """Return every loan, in user order then backend order."""
    return [loan for loans in loans_by_user.values() for loan in loans]


def loan_stats(loans_by_user: LoansByUser) -> Dict[str, int]:
    """Count total, active and closed loans and the number of users."""
    loans = all_loans(loans_by_user)
    return {
        "total": len(loans),
        "active": _count_status(loans, "active"),
        "closed": _count_status(loans, "closed"),
        "users": len(loans_by_user),
    }


def user_stats(loans: Sequence[LoanRecord]) -> Dict[str, int]:
    return {
        "total": len(loans),
        "active": _count_status(loans, "active"),
        "closed": _count_status(loans, "closed"),
    }


def filter_users(loans_by_user: LoansByUser, search: str = "") -> Dict[str, List[LoanRecord]]:
    """Keep users whose name contains ``search`` (case-insensitive)."""
    needle = (search or "").strip().lower()
    return {
        name: list(loans)
        for name, loans in loans_by_user.items()
        if needle in name.lower()
    }
