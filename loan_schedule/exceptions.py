"""Custom exceptions for the loan schedule package."""

from typing import Optional


class LoanScheduleError(Exception):
    """Base exception for all loan schedule errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvalidInput(LoanScheduleError, ValueError):
    """Raised when loan terms or loan record fields are invalid.

    Subclasses ``ValueError`` so callers that only know about the parsing
    helpers can keep catching the built-in type.
    """


class BackendError(LoanScheduleError):
    """Raised when the loan backend cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[dict] = None):
        details = dict(details or {})
        if status_code is not None:
            details['status_code'] = status_code
        super().__init__(message, details)
        self.status_code = status_code


class LoanNotFound(BackendError):
    """Raised when the backend has no loan with the requested id."""

    def __init__(self, loan_id: int):
        super().__init__(f"Loan #{loan_id} not found", status_code=404, details={'loan_id': loan_id})
        self.loan_id = loan_id
