"""Runtime settings for the CLI and the web console.

Values come from environment variables. A ``.env`` file in the working
directory is loaded first, without overriding variables already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .exceptions import InvalidInput

DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_API_TIMEOUT = 10.0
DEFAULT_PREVIEW_ROWS = 12
DEFAULT_MAX_TENURE_MONTHS = 600


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: Optional[str] = None
    api_timeout: float = DEFAULT_API_TIMEOUT
    preview_rows: int = DEFAULT_PREVIEW_ROWS
    max_tenure_months: int = DEFAULT_MAX_TENURE_MONTHS
    log_level: str = "INFO"
    secret_key: str = "dev-secret-key"
    asset_version: str = "1"


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise InvalidInput(f"Invalid value for {name}", {"value": raw}) from exc


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to ``os.environ`` plus ``.env``)."""
    if env is None:
        load_dotenv()
        env = os.environ
    return Settings(
        api_base_url=(env.get("LOAN_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/"),
        api_token=env.get("LOAN_API_TOKEN") or None,
        api_timeout=_number(env, "LOAN_API_TIMEOUT", DEFAULT_API_TIMEOUT, float),
        preview_rows=_number(env, "SCHEDULE_PREVIEW_ROWS", DEFAULT_PREVIEW_ROWS, int),
        max_tenure_months=_number(env, "MAX_TENURE_MONTHS", DEFAULT_MAX_TENURE_MONTHS, int),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        secret_key=env.get("FLASK_SECRET_KEY") or "dev-secret-key",
        asset_version=env.get("ASSET_VERSION") or "1",
    )
