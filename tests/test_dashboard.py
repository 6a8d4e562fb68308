import unittest
from datetime import date
from decimal import Decimal

from loan_schedule.dashboard import all_loans, filter_users, loan_stats, user_stats
from loan_schedule.data_models import LoanRecord


def make_record(loan_id, status="active"):
    return LoanRecord(
        id=loan_id,
        name=f"Loan {loan_id}",
        status=status,
        amount=Decimal("10000"),
        interest_rate=Decimal("10"),
        tenure=12,
        start_date=date(2024, 1, 1),
    )


LISTING = {
    "Alice Smith": [make_record(1), make_record(2, "closed"), make_record(3, "pending")],
    "Bob Jones": [make_record(4, "Active")],
    "Carol Alison": [],
}


class TestLoanStats(unittest.TestCase):

    def test_counts(self):
        self.assertEqual(loan_stats(LISTING), {"total": 4, "active": 2, "closed": 1, "users": 3})

    def test_empty_listing(self):
        self.assertEqual(loan_stats({}), {"total": 0, "active": 0, "closed": 0, "users": 0})

    def test_user_stats(self):
        self.assertEqual(user_stats(LISTING["Alice Smith"]), {"total": 3, "active": 1, "closed": 1})
        self.assertEqual(user_stats([]), {"total": 0, "active": 0, "closed": 0})


class TestAllLoans(unittest.TestCase):

    def test_keeps_user_order(self):
        self.assertEqual([loan.id for loan in all_loans(LISTING)], [1, 2, 3, 4])


class TestFilterUsers(unittest.TestCase):

    def test_empty_search_keeps_everyone(self):
        self.assertEqual(list(filter_users(LISTING)), ["Alice Smith", "Bob Jones", "Carol Alison"])
        self.assertEqual(list(filter_users(LISTING, "   ")), ["Alice Smith", "Bob Jones", "Carol Alison"])

    def test_case_insensitive_substring(self):
        self.assertEqual(list(filter_users(LISTING, "ALI")), ["Alice Smith", "Carol Alison"])
        self.assertEqual(list(filter_users(LISTING, " jones ")), ["Bob Jones"])

    def test_no_match(self):
        self.assertEqual(filter_users(LISTING, "dave"), {})

    def test_does_not_mutate_input(self):
        result = filter_users(LISTING, "alice")
        result["Alice Smith"].clear()
        self.assertEqual(len(LISTING["Alice Smith"]), 3)


if __name__ == "__main__":
    unittest.main()
