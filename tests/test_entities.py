"""Tests for domain entities."""

import dataclasses
from datetime import datetime, UTC
from decimal import Decimal

import pytest

from feeledger.domain.entities import (
    BudgetUsage,
    Category,
    CategoryKind,
    CategoryScope,
    FinancialSummary,
    GroupPaymentStatus,
    Household,
)

NOW = datetime(2024, 7, 15, 9, 30, tzinfo=UTC)


def _category(kind, scope):
    return Category(
        id=1,
        kind=kind,
        name="PTA Contribution Fee",
        description=None,
        scope=scope,
        default_amount=Decimal("250.00"),
        budget_ceiling=None,
        is_active=True,
        created_at=NOW,
        updated_at=NOW,
    )


def test_household_is_frozen():
    """Test that entities cannot be mutated."""
    household = Household(1, "Maria", "Cruz", None, None, None, None, False, None, NOW, NOW)
    assert household.display_name == "Cruz, Maria"
    with pytest.raises(dataclasses.FrozenInstanceError):
        household.paid = True


def test_household_scoped_category():
    """Test the household scope helper."""
    assert _category(CategoryKind.INCOME, CategoryScope.HOUSEHOLD).is_household_scoped is True
    assert _category(CategoryKind.INCOME, CategoryScope.MEMBER).is_household_scoped is False
    assert _category(CategoryKind.EXPENSE, None).is_household_scoped is False


def test_financial_summary_balance():
    """Test the computed balance."""
    summary = FinancialSummary("2024-2025", (), Decimal("1000.00"), Decimal("1250.50"))
    assert summary.balance == Decimal("-250.50")


def test_group_payment_status():
    """Test paid percentages, including empty groups."""
    assert GroupPaymentStatus(1, "Grade 1", 3, 1).paid_percentage == Decimal("33.33")
    assert GroupPaymentStatus(1, "Grade 1", 3, 1).unpaid_members == 2
    assert GroupPaymentStatus(2, "Grade 2", 0, 0).paid_percentage == Decimal("0.00")


def test_budget_usage():
    """Test remaining budget and the over-budget flag."""
    usage = BudgetUsage(1, "Utilities", "2024-2025", Decimal("500.00"), Decimal("400.00"))
    assert usage.over_budget is True
    assert usage.remaining == Decimal("-100.00")

    unlimited = BudgetUsage(2, "Maintenance", "2024-2025", Decimal("500.00"), None)
    assert unlimited.over_budget is False
    assert unlimited.remaining is None
