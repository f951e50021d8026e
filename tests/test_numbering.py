"""Tests for TransactionNumberGenerator."""

from feeledger.domain.entities import CategoryKind
from feeledger.domain.numbering import TransactionNumberGenerator


def test_numbers_per_kind(temp_db):
    """Test independent counters for income and expense numbers."""
    numbers = TransactionNumberGenerator(temp_db)
    assert numbers.next_number(CategoryKind.INCOME) == "INC-000001"
    assert numbers.next_number("income") == "INC-000002"
    assert numbers.next_number(CategoryKind.EXPENSE) == "EXP-000001"


def test_number_width(temp_db):
    """Test a custom zero-padding width."""
    numbers = TransactionNumberGenerator(temp_db, width=4)
    assert numbers.next_number(CategoryKind.EXPENSE) == "EXP-0001"
