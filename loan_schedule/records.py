"""Conversion of backend loan payloads into ``LoanRecord`` objects.

The administration backend serves loans as JSON objects. Monetary values may
arrive as numbers or numeric strings and dates as plain ISO dates or full
timestamps, so every field goes through the parsing helpers in ``utils``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .data_models import LoanRecord
from .exceptions import InvalidInput
from .utils import decimal_from_str, parse_date, parse_int

REQUIRED_FIELDS = ("id", "amount", "interest_rate", "tenure", "start_date")

STATUS_BADGES = {
    "active": "badge-success",
    "pending": "badge-warning",
    "closed": "badge-muted",
    "defaulted": "badge-danger",
}
DEFAULT_BADGE = "badge-info"


def _field(data: Mapping[str, Any], name: str, parser):
    try:
        return parser(data[name])
    except (InvalidInput, TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid loan field '{name}'", {"value": data[name]}) from exc


def _optional(data: Mapping[str, Any], name: str, parser) -> Optional[Any]:
    if data.get(name) in (None, ""):
        return None
    return _field(data, name, parser)


def record_from_json(data: Mapping[str, Any]) -> LoanRecord:
    """Build a ``LoanRecord`` from a backend loan payload.

    Raises ``InvalidInput`` naming the first missing or unparsable field.
    """
    missing = [name for name in REQUIRED_FIELDS if data.get(name) in (None, "")]
    if missing:
        raise InvalidInput("Loan record is missing required fields", {"fields": missing})

    return LoanRecord(
        id=_field(data, "id", parse_int),
        name=str(data.get("name") or ""),
        status=str(data.get("status") or "unknown"),
        amount=_field(data, "amount", decimal_from_str),
        interest_rate=_field(data, "interest_rate", decimal_from_str),
        tenure=_field(data, "tenure", parse_int),
        start_date=_field(data, "start_date", parse_date),
        monthly_payment=_optional(data, "monthly_payment", decimal_from_str),
        total_interest=_optional(data, "total_interest", decimal_from_str),
        total_amount=_optional(data, "total_amount", decimal_from_str),
        foreclosure_amount=_optional(data, "foreclosure_amount", decimal_from_str),
        foreclosure_date=_optional(data, "foreclosure_date", parse_date),
    )


def status_badge(status: str) -> str:
    """Return the CSS badge class for a loan status (case-insensitive)."""
    return STATUS_BADGES.get((status or "").lower(), DEFAULT_BADGE)


def status_label(status: str) -> str:
    """Capitalize the first letter of a status for display."""
    if not status:
        return ""
    return status[0].upper() + status[1:]


def loans_by_user_from_json(data: Mapping[str, Any]) -> Dict[str, List[LoanRecord]]:
    """Parse the backend's ``{user name: [loan, ...]}`` listing.

    User order is kept as served. Raises ``InvalidInput`` if a user's entry
    is not a list or any loan in it is invalid.
    """
    grouped: Dict[str, List[LoanRecord]] = {}
    for user_name, loans in data.items():
        if not isinstance(loans, list):
            raise InvalidInput("Loans for a user must be a list", {"user": user_name})
        grouped[str(user_name)] = [record_from_json(loan) for loan in loans]
    return grouped
