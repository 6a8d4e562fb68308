import csv
import json
import os
import re
import tempfile
import unittest
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from click.testing import CliRunner

from loan_schedule.data_models import LoanRecord
from loan_schedule.exceptions import BackendError, LoanNotFound
from loan_schedule.main import cli

LOAN_ARGS = ["-p", "120k", "-r", "12", "-t", "24", "-s", "2024-01-01"]
ROW = re.compile(r"^\d+\t", re.MULTILINE)


def make_record(**overrides):
    values = dict(
        id=7,
        name="Home renovation",
        status="active",
        amount=Decimal("120000"),
        interest_rate=Decimal("12"),
        tenure=24,
        start_date=date(2024, 1, 1),
    )
    values.update(overrides)
    return LoanRecord(**values)


class TestScheduleCommand(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()

    def test_prints_preview(self):
        result = self.runner.invoke(cli, ["schedule"] + LOAN_ARGS)

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Monthly payment", result.output)
        self.assertEqual(len(ROW.findall(result.output)), 12)
        self.assertIn("12 more payments hidden", result.output)

    def test_all_rows(self):
        result = self.runner.invoke(cli, ["schedule", "--all"] + LOAN_ARGS)

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(len(ROW.findall(result.output)), 24)
        self.assertNotIn("hidden", result.output)

    def test_preview_rows_from_environment(self):
        result = self.runner.invoke(cli, ["schedule"] + LOAN_ARGS, env={"SCHEDULE_PREVIEW_ROWS": "6"})
        self.assertEqual(len(ROW.findall(result.output)), 6)

    def test_invalid_principal(self):
        result = self.runner.invoke(cli, ["schedule", "-p", "0", "-r", "12", "-t", "12", "-s", "2024-01-01"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Principal must be positive", result.output)

    def test_unparsable_rate(self):
        result = self.runner.invoke(cli, ["schedule", "-p", "1000", "-r", "abc", "-t", "12", "-s", "2024-01-01"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("--rate", result.output)

    def test_export_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "schedule.json")
            result = self.runner.invoke(cli, ["schedule", "--output", path] + LOAN_ARGS)
            self.assertEqual(result.exit_code, 0, result.output)
            with open(path, encoding="utf-8") as f:
                data = json.load(f)

        self.assertEqual(len(data["schedule"]), 24)
        self.assertEqual(data["summary"]["payments"], 24)
        self.assertEqual(data["schedule"][0]["date"], "2024-02-01")
        self.assertAlmostEqual(data["schedule"][0]["interest_charged"], 1200.0, delta=1e-6)

    def test_export_csv(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "schedule.csv")
            result = self.runner.invoke(cli, ["schedule", "--output", path] + LOAN_ARGS)
            self.assertEqual(result.exit_code, 0, result.output)
            with open(path, newline="", encoding="utf-8") as f:
                rows = list(csv.reader(f))

        self.assertEqual(rows[0], ["Period", "Date", "Principal", "Interest", "EMI", "Balance"])
        self.assertEqual(len(rows), 25)
        self.assertEqual(rows[24][1], "2026-01-01")

    def test_export_unsupported_extension(self):
        result = self.runner.invoke(cli, ["schedule", "--output", "schedule.txt"] + LOAN_ARGS)
        self.assertEqual(result.exit_code, 2)


class TestSummaryCommand(unittest.TestCase):

    def test_summary(self):
        result = CliRunner().invoke(cli, ["summary", "-p", "120000", "-r", "12", "-t", "12", "-s", "2024-01-01"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Monthly payment    : 10661.85", result.output)
        self.assertIn("Last payment       : 2025-01-01", result.output)
        self.assertEqual(len(ROW.findall(result.output)), 0)

    def test_summary_export_requires_json(self):
        result = CliRunner().invoke(cli, ["summary", "--output", "summary.csv"] + LOAN_ARGS)
        self.assertEqual(result.exit_code, 2)


class TestLoanCommand(unittest.TestCase):

    def test_prints_backend_loan(self):
        with patch("loan_schedule.main.LoanBackendClient") as client_cls:
            client_cls.return_value.get_loan.return_value = make_record()
            env = {"LOAN_API_BASE_URL": "http://backend", "LOAN_API_TOKEN": None, "LOAN_API_TIMEOUT": None}
            result = CliRunner().invoke(cli, ["loan", "7"], env=env)

        self.assertEqual(result.exit_code, 0, result.output)
        client_cls.assert_called_once_with("http://backend", token=None, timeout=10.0)
        client_cls.return_value.get_loan.assert_called_once_with(7)
        self.assertIn("Loan #7  Home renovation", result.output)
        self.assertIn("Status             : Active", result.output)
        self.assertIn("Foreclosure amount : N/A", result.output)
        self.assertEqual(len(ROW.findall(result.output)), 12)

    def test_not_found(self):
        with patch("loan_schedule.main.LoanBackendClient") as client_cls:
            client_cls.return_value.get_loan.side_effect = LoanNotFound(7)
            result = CliRunner().invoke(cli, ["loan", "7"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Loan #7 not found", result.output)

    def test_backend_down(self):
        with patch("loan_schedule.main.LoanBackendClient") as client_cls:
            client_cls.return_value.get_loan.side_effect = BackendError("Could not reach loan backend")
            result = CliRunner().invoke(cli, ["loan", "7"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Could not reach loan backend", result.output)

    def test_record_that_cannot_be_scheduled(self):
        with patch("loan_schedule.main.LoanBackendClient") as client_cls:
            client_cls.return_value.get_loan.return_value = make_record(amount=Decimal("0"))
            result = CliRunner().invoke(cli, ["loan", "7"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Loan amount must be positive", result.output)


class TestTenureLimit(unittest.TestCase):

    def test_schedule_over_limit(self):
        args = ["schedule", "-p", "1000", "-r", "12", "-t", "700", "-s", "2024-01-01"]
        result = CliRunner().invoke(cli, args, env={"MAX_TENURE_MONTHS": None})
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Tenure must not exceed 600 months", result.output)

    def test_limit_from_environment(self):
        result = CliRunner().invoke(cli, ["summary"] + LOAN_ARGS, env={"MAX_TENURE_MONTHS": "12"})
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Tenure must not exceed 12 months", result.output)


class TestLoansCommand(unittest.TestCase):

    def setUp(self):
        self.listing = {
            "Alice Smith": [make_record(id=1), make_record(id=2, status="closed")],
            "Bob Jones": [make_record(id=3, name="Car", status="Active")],
        }

    def test_lists_loans_by_user(self):
        with patch("loan_schedule.main.LoanBackendClient") as client_cls:
            client_cls.return_value.list_loans.return_value = self.listing
            result = CliRunner().invoke(cli, ["loans"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Loans: 3  Active: 2  Closed: 1  Users: 2", result.output)
        self.assertIn("Alice Smith (2 loan(s))", result.output)
        self.assertIn("#3\tCar\t120000.00", result.output)

    def test_search_is_case_insensitive(self):
        with patch("loan_schedule.main.LoanBackendClient") as client_cls:
            client_cls.return_value.list_loans.return_value = self.listing
            result = CliRunner().invoke(cli, ["loans", "--search", "BOB"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Bob Jones", result.output)
        self.assertNotIn("Alice Smith", result.output)
        self.assertIn("Users: 2", result.output)

    def test_no_match(self):
        with patch("loan_schedule.main.LoanBackendClient") as client_cls:
            client_cls.return_value.list_loans.return_value = self.listing
            result = CliRunner().invoke(cli, ["loans", "--search", "carol"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("No matching users.", result.output)

    def test_backend_down(self):
        with patch("loan_schedule.main.LoanBackendClient") as client_cls:
            client_cls.return_value.list_loans.side_effect = BackendError("Loan backend returned HTTP 500")
            result = CliRunner().invoke(cli, ["loans"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Loan backend returned HTTP 500", result.output)


if __name__ == "__main__":
    unittest.main()
