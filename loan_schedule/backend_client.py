"""HTTP client for the loan administration backend.

The backend owns loan records; this client lists loans grouped by user,
reads a single loan and deletes one. Transport errors and unexpected status
codes are turned into ``BackendError`` so callers never see ``requests``
exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .data_models import LoanRecord
from .exceptions import BackendError, InvalidInput, LoanNotFound
from .records import loans_by_user_from_json, record_from_json

logger = logging.getLogger(__name__)


class LoanBackendClient:
    """Thin wrapper around the ``/api/admin/`` loan endpoints."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def loan_url(self, loan_id: int) -> str:
        return f"{self._base_url}/api/admin/loan/{loan_id}/"

    def loans_url(self) -> str:
        return f"{self._base_url}/api/admin/get/loans/"

    def _request(self, method: str, url: str, loan_id: Optional[int] = None) -> requests.Response:
        logger.info("%s %s", method, url)
        try:
            response = self._session.request(method, url, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise BackendError(f"Could not reach loan backend: {exc}") from exc
        if response.status_code == 404 and loan_id is not None:
            raise LoanNotFound(loan_id)
        if not response.ok:
            logger.warning("%s %s returned %s", method, url, response.status_code)
            raise BackendError(
                f"Loan backend returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json_object(response: requests.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendError("Loan backend returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise BackendError("Loan backend returned an unexpected payload")
        return payload

    def list_loans(self) -> Dict[str, List[LoanRecord]]:
        """Fetch every loan, grouped by user name."""
        payload = self._json_object(self._request("GET", self.loans_url()))
        try:
            return loans_by_user_from_json(payload)
        except InvalidInput:
            logger.warning("Loan listing has an invalid payload")
            raise

    def get_loan(self, loan_id: int) -> LoanRecord:
        """Fetch and parse a loan record."""
        payload = self._json_object(self._request("GET", self.loan_url(loan_id), loan_id))
        try:
            return record_from_json(payload)
        except InvalidInput:
            logger.warning("Loan #%s has an invalid payload", loan_id)
            raise

    def delete_loan(self, loan_id: int) -> None:
        self._request("DELETE", self.loan_url(loan_id), loan_id)
        logger.info("Deleted loan #%s", loan_id)
