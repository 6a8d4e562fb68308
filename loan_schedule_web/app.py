import logging

from flask import Flask, abort, flash, jsonify, redirect, render_template, request, url_for

from loan_schedule.backend_client import LoanBackendClient
from loan_schedule.config import load_settings
from loan_schedule.data_models import LoanTerms
from loan_schedule.dashboard import all_loans, filter_users, loan_stats, user_stats
from loan_schedule.engine import check_tenure_limit, compute_schedule, summarize_schedule
from loan_schedule.exceptions import BackendError, InvalidInput, LoanNotFound
from loan_schedule.export import serialize_schedule
from loan_schedule.formatter import preview_rows
from loan_schedule.logging_setup import configure_logging
from loan_schedule.records import status_badge, status_label
from loan_schedule.utils import decimal_from_str, parse_amount, parse_date, parse_int

settings = load_settings()
configure_logging(settings.log_level)

app = Flask(__name__)
app.config["ASSET_VERSION"] = settings.asset_version
app.config["PREVIEW_ROWS"] = settings.preview_rows
app.config["MAX_TENURE_MONTHS"] = settings.max_tenure_months
app.secret_key = settings.secret_key
backend_client = LoanBackendClient(settings.api_base_url, token=settings.api_token, timeout=settings.api_timeout)

app.jinja_env.globals.update(status_badge=status_badge, status_label=status_label)


def _parse_int(value, field: str) -> int:
    try:
        return parse_int(value)
    except InvalidInput as exc:
        raise InvalidInput(f"Invalid value for {field}: {value}") from exc


def _form_to_terms(form) -> LoanTerms:
    return LoanTerms(
        principal=parse_amount(form.get("principal", "")),
        annual_rate_percent=decimal_from_str(form.get("rate", "0") or "0"),
        tenure_months=_parse_int(form.get("tenure", ""), "tenure"),
        start_date=parse_date(form.get("start_date", "")),
    )


def _json_to_terms(payload: dict) -> LoanTerms:
    missing = [k for k in ("principal", "annual_rate_percent", "tenure_months", "start_date") if k not in payload]
    if missing:
        raise InvalidInput("Missing fields", {"fields": missing})
    return LoanTerms(
        principal=decimal_from_str(payload["principal"]),
        annual_rate_percent=decimal_from_str(payload["annual_rate_percent"]),
        tenure_months=_parse_int(payload["tenure_months"], "tenure_months"),
        start_date=parse_date(payload["start_date"]),
    )


def _schedule_view(terms: LoanTerms, show_all: bool):
    check_tenure_limit(terms, app.config["MAX_TENURE_MONTHS"])
    full_schedule = compute_schedule(terms)
    summary = summarize_schedule(terms, full_schedule)
    rows, hidden = preview_rows(full_schedule, show_all, app.config["PREVIEW_ROWS"])
    return summary, full_schedule, rows, hidden


@app.route("/", methods=["GET", "POST"])
def index():
    summary = None
    rows = None
    hidden = 0
    total_payments = 0
    error = None
    show_all = False

    if request.method == "POST":
        show_all = request.form.get("show_all") == "1"
        try:
            terms = _form_to_terms(request.form)
            summary, full_schedule, rows, hidden = _schedule_view(terms, show_all)
            total_payments = len(full_schedule)
        except InvalidInput as exc:
            app.logger.info("Rejected calculator input: %s", exc)
            error = str(exc)

    return render_template(
        "index.html",
        form=request.form,
        summary=summary,
        rows=rows,
        hidden=hidden,
        total_payments=total_payments,
        show_all=show_all,
        error=error,
        asset_version=app.config["ASSET_VERSION"],
    ), (400 if error else 200)


@app.get("/admin/loans")
def loans_dashboard():
    search = request.args.get("search", "").strip()
    tab = "all" if request.args.get("tab") == "all" else "by-user"
    try:
        loans_by_user = backend_client.list_loans()
    except (BackendError, InvalidInput) as exc:
        app.logger.warning("Failed to load loans: %s", exc)
        return render_template(
            "error.html",
            title="Error Loading Loans",
            message="Failed to load loans data. Please try again later.",
            asset_version=app.config["ASSET_VERSION"],
        ), 502

    users = filter_users(loans_by_user, search)
    return render_template(
        "loans.html",
        stats=loan_stats(loans_by_user),
        users=users,
        user_stats={name: user_stats(loans) for name, loans in users.items()},
        loans=all_loans(loans_by_user),
        search=search,
        tab=tab,
        asset_version=app.config["ASSET_VERSION"],
    )


@app.get("/admin/loans/<int:loan_id>")
def loan_detail(loan_id: int):
    show_all = request.args.get("show_all") == "1"
    try:
        record = backend_client.get_loan(loan_id)
    except LoanNotFound:
        abort(404, description="The loan you are looking for does not exist.")
    except (BackendError, InvalidInput) as exc:
        app.logger.warning("Failed to load loan #%s: %s", loan_id, exc)
        return render_template(
            "error.html",
            title="Error Loading Loan",
            message="Failed to load loan details. Please try again later.",
            asset_version=app.config["ASSET_VERSION"],
        ), 502

    summary = rows = None
    hidden = 0
    schedule_error = None
    try:
        summary, _, rows, hidden = _schedule_view(record.to_terms(), show_all)
    except InvalidInput as exc:
        schedule_error = str(exc)

    return render_template(
        "loan_detail.html",
        loan=record,
        summary=summary,
        rows=rows,
        hidden=hidden,
        show_all=show_all,
        schedule_error=schedule_error,
        preview_limit=app.config["PREVIEW_ROWS"],
        asset_version=app.config["ASSET_VERSION"],
    )


@app.post("/admin/loans/<int:loan_id>/delete")
def delete_loan(loan_id: int):
    try:
        backend_client.delete_loan(loan_id)
    except BackendError as exc:
        app.logger.warning("Failed to delete loan #%s: %s", loan_id, exc)
        flash("Failed to delete loan", "error")
        return redirect(url_for("loan_detail", loan_id=loan_id))
    flash("Loan deleted successfully", "success")
    return redirect(url_for("loans_dashboard"))


@app.post("/api/schedule")
def api_schedule():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Expected a JSON object"}), 400
    try:
        terms = _json_to_terms(payload)
        check_tenure_limit(terms, app.config["MAX_TENURE_MONTHS"])
        full_schedule = compute_schedule(terms)
    except InvalidInput as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(
        {
            "summary": summarize_schedule(terms, full_schedule),
            "schedule": serialize_schedule(full_schedule),
        }
    )


@app.errorhandler(404)
def not_found(exc):
    return render_template(
        "error.html",
        title="Loan not found",
        message=getattr(exc, "description", "Not found"),
        asset_version=app.config["ASSET_VERSION"],
    ), 404


if __name__ == "__main__":
    logging.getLogger(__name__).info("Starting loan administration console...")
    app.run(host="0.0.0.0", port=8710, debug=True)
