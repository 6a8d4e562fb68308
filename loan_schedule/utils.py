"""Utility functions for the loan schedule engine.

This module provides helpers for parsing user and backend input into Python
data types and for handling dates, including adding calendar months. It uses
Python's ``datetime`` module to calculate month offsets.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, getcontext
import calendar
from typing import Union

from .exceptions import InvalidInput

getcontext().prec = 28  # increase decimal precision to avoid rounding errors


def parse_date(value: Union[str, date]) -> date:
    """Parse an ISO date (``YYYY-MM-DD``) or ISO datetime into a ``date``.

    The backend serves loan dates either as plain dates or as full
    timestamps (``2024-01-01T00:00:00Z``); the time part is dropped.

    Raises
    ------
    InvalidInput
        If the value is not a valid ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        text = str(value).strip()
        if len(text) > 10:
            # fromisoformat() only accepts a trailing "Z" on newer interpreters
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInput(f"Invalid date: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29). Each call starts from
    ``dt``, so Jan 31 plus two months is Mar 31, not Mar 28.
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def decimal_from_str(value: Union[str, int, float, Decimal]) -> Decimal:
    """Convert a numeric value into a ``Decimal``.

    Strings have any commas stripped. Floats go through ``str`` so that
    ``0.1`` becomes ``Decimal("0.1")`` rather than its binary expansion.
    Raises ``InvalidInput`` if conversion fails.
    """
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid numeric value: {value}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).replace(",", "").strip())
        except InvalidOperation as exc:
            raise InvalidInput(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise InvalidInput(f"Invalid numeric value: {value}")
    return result


def parse_int(value: Union[str, int, float]) -> int:
    """Convert a whole number into an ``int`` without truncating.

    Accepts ints, integral floats (``12.0``) and digit strings. Fractional
    values ("12.7", ``12.7``) and booleans raise ``InvalidInput``.
    """
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid whole number: {value}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidInput(f"Invalid whole number: {value}")
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise InvalidInput(f"Invalid whole number: {value}") from exc


def parse_amount(value: str) -> Decimal:
    """Parse an amount with optional ``k``/``m`` suffixes.

    Accepts plain numbers ("500000") and shorthand such as "120k" meaning
    120_000.
    """
    text = str(value).strip().lower().replace(",", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    return decimal_from_str(text) * factor
