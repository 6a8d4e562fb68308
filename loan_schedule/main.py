"""Command‑line interface for the loan schedule engine.

This module uses the ``click`` library to implement a multi‑command
interface. Users can compute full amortization schedules, view summaries or
inspect a loan stored in the administration backend. Results can be printed
to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click

from .backend_client import LoanBackendClient
from .config import load_settings
from .dashboard import filter_users, loan_stats
from .data_models import LoanTerms
from .engine import check_tenure_limit, compute_schedule, summarize_schedule
from .exceptions import BackendError, InvalidInput
from .export import export_to_csv, export_to_json
from .formatter import print_loan_details, print_loans, print_schedule, print_summary
from .logging_setup import configure_logging
from .utils import decimal_from_str, parse_amount, parse_date


def build_terms_from_options(principal: str, rate: str, tenure: int, start_date: str) -> LoanTerms:
    """Turn raw option values into ``LoanTerms``.

    Parsing problems are reported as ``click.BadParameter``; range checks are
    left to the engine.
    """
    try:
        principal_value = parse_amount(principal)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc), param_hint="--principal")
    try:
        rate_value = decimal_from_str(rate)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc), param_hint="--rate")
    try:
        start_dt = parse_date(start_date)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc), param_hint="--start-date")
    return LoanTerms(
        principal=principal_value,
        annual_rate_percent=rate_value,
        tenure_months=tenure,
        start_date=start_dt,
    )


def _compute(terms: LoanTerms, max_tenure_months: int = 0):
    try:
        check_tenure_limit(terms, max_tenure_months)
        schedule_entries = compute_schedule(terms)
    except InvalidInput as exc:
        raise click.UsageError(str(exc))
    return schedule_entries, summarize_schedule(terms, schedule_entries)


def loan_options(func):
    """Attach the options describing a loan to a command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (e.g. 120000 or 120k)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--tenure", "-t", "tenure", required=True, type=int, help="Tenure in months"),
        click.option("--start-date", "-s", "start_date", required=True, help="Disbursal date (YYYY-MM-DD)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Loan amortization schedules for the loan administration console."""
    settings = load_settings()
    configure_logging(settings.log_level, stream=sys.stderr)
    ctx.obj = settings


@cli.command()
@loan_options
@click.option("--all", "show_all", is_flag=True, help="Show every payment instead of the first rows")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def schedule(
    settings,
    principal: str,
    rate: str,
    tenure: int,
    start_date: str,
    show_all: bool,
    output: Optional[str],
) -> None:
    """Compute and print the amortization schedule."""
    terms = build_terms_from_options(principal, rate, tenure, start_date)
    schedule_entries, summary_data = _compute(terms, settings.max_tenure_months)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, schedule_entries, summary_data)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, schedule_entries)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(summary_data)
        print_schedule(schedule_entries, show_all=show_all, limit=settings.preview_rows)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def summary(settings, principal: str, rate: str, tenure: int, start_date: str, output: Optional[str]) -> None:
    """Compute and print only the summary metrics for a loan."""
    terms = build_terms_from_options(principal, rate, tenure, start_date)
    _, summary_data = _compute(terms, settings.max_tenure_months)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@click.argument("loan_id", type=int)
@click.option("--all", "show_all", is_flag=True, help="Show every payment instead of the first rows")
@click.pass_obj
def loan(settings, loan_id: int, show_all: bool) -> None:
    """Fetch a loan from the backend and print its schedule."""
    client = LoanBackendClient(settings.api_base_url, token=settings.api_token, timeout=settings.api_timeout)
    try:
        record = client.get_loan(loan_id)
        terms = record.to_terms()
    except (BackendError, InvalidInput) as exc:
        raise click.ClickException(str(exc))
    schedule_entries, summary_data = _compute(terms, settings.max_tenure_months)
    print_loan_details(record)
    print_summary(summary_data)
    print_schedule(schedule_entries, show_all=show_all, limit=settings.preview_rows)


@cli.command()
@click.option("--search", "search", default="", help="Only show users whose name contains this text")
@click.pass_obj
def loans(settings, search: str) -> None:
    """List loans from the backend, grouped by user."""
    client = LoanBackendClient(settings.api_base_url, token=settings.api_token, timeout=settings.api_timeout)
    try:
        loans_by_user = client.list_loans()
    except (BackendError, InvalidInput) as exc:
        raise click.ClickException(str(exc))
    print_loans(filter_users(loans_by_user, search), loan_stats(loans_by_user))


if __name__ == "__main__":
    cli()
