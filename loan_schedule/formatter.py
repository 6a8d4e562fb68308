"""Output helpers for the loan schedule engine.

This module provides simple functions to render amortization schedules,
summaries and loan records in a tabular text format. We rely only on
built‑in printing and string formatting; amounts are shown with two decimals
and no currency symbol.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from .data_models import LoanRecord, ScheduleEntry
from .records import status_label

DEFAULT_PREVIEW_ROWS = 12


def preview_rows(
    schedule: Sequence[ScheduleEntry], show_all: bool = False, limit: int = DEFAULT_PREVIEW_ROWS
) -> Tuple[List[ScheduleEntry], int]:
    """Return the rows to display and how many rows are hidden.

    Only the first ``limit`` rows are shown unless ``show_all`` is set.
    """
    rows = list(schedule)
    if show_all or limit <= 0 or len(rows) <= limit:
        return rows, 0
    return rows[:limit], len(rows) - limit


def _amount(value: Optional[Decimal]) -> str:
    return "N/A" if value is None else f"{value:.2f}"


def print_summary(summary: Dict[str, object]) -> None:
    """Print a summary of loan metrics in a human‑readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Total principal    : {summary['principal']:.2f}")
    print(f"Annual rate        : {summary['annual_rate_percent']:.2f}%")
    print(f"Monthly payment    : {summary['monthly_payment']:.2f}")
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"Total amount       : {summary['total_amount']:.2f}")
    print(f"Payments           : {summary['payments']}")
    print(f"First payment      : {summary['first_payment_date']}")
    print(f"Last payment       : {summary['last_payment_date']}")
    print("-" * 72)


def print_loan_details(record: LoanRecord) -> None:
    """Print the backend's view of a loan, including foreclosure fields."""
    months = "month" if record.tenure == 1 else "months"
    print(f"Loan #{record.id}  {record.name}")
    print("-" * 72)
    print(f"Status             : {status_label(record.status)}")
    print(f"Start date         : {record.start_date.isoformat()}")
    print(f"Loan amount        : {record.amount:.2f}")
    print(f"Interest rate      : {record.interest_rate}%")
    print(f"Tenure             : {record.tenure} {months}")
    print(f"Monthly payment    : {_amount(record.monthly_payment)}")
    print(f"Total interest     : {_amount(record.total_interest)}")
    print(f"Total amount       : {_amount(record.total_amount)}")
    print(f"Foreclosure amount : {_amount(record.foreclosure_amount)}")
    foreclosure_date = record.foreclosure_date.isoformat() if record.foreclosure_date else "N/A"
    print(f"Foreclosure date   : {foreclosure_date}")
    print("-" * 72)


def print_schedule(
    schedule: Sequence[ScheduleEntry], show_all: bool = False, limit: int = DEFAULT_PREVIEW_ROWS
) -> None:
    """Print the amortization schedule as a simple table.

    Parameters
    ----------
    schedule: Sequence[ScheduleEntry]
        The schedule entries to print.
    show_all: bool
        Print every row. By default only the first ``limit`` rows are shown,
        followed by a note with the number of hidden rows.
    """
    rows, hidden = preview_rows(schedule, show_all, limit)
    headers = ["Period", "Date", "Principal", "Interest", "EMI", "Balance"]
    print("\t".join(headers))
    for entry in rows:
        row = [
            str(entry.period),
            entry.date.isoformat(),
            f"{entry.principal_paid:.2f}",
            f"{entry.interest_charged:.2f}",
            f"{entry.payment:.2f}",
            f"{entry.balance:.2f}",
        ]
        print("\t".join(row))
    if hidden:
        print(f"... {hidden} more payments hidden; use --all to view all {len(schedule)} payments.")


def print_loans(loans_by_user: Dict[str, List[LoanRecord]], stats: Dict[str, int]) -> None:
    """Print dashboard counts followed by one table per user."""
    print(
        f"Loans: {stats['total']}  Active: {stats['active']}  "
        f"Closed: {stats['closed']}  Users: {stats['users']}"
    )
    print("-" * 72)
    if not loans_by_user:
        print("No matching users.")
        return
    for user_name, loans in loans_by_user.items():
        print(f"{user_name} ({len(loans)} loan(s))")
        for loan in loans:
            row = [
                f"#{loan.id}",
                loan.name,
                f"{loan.amount:.2f}",
                f"{loan.interest_rate}%",
                f"{loan.tenure}m",
                status_label(loan.status),
            ]
            print("\t" + "\t".join(row))
