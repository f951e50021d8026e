"""Tests for CategoryRegistry."""

from decimal import Decimal

import pytest

from feeledger.domain.category import DEFAULT_CATEGORIES
from feeledger.domain.entities import MAX_AMOUNT, MAX_BUDGET_CEILING, CategoryKind, CategoryScope
from feeledger.domain.errors import (
    ConflictError,
    DependencyError,
    InactiveCategory,
    UnknownCategory,
    ValidationError,
)

PRINCIPAL = "treasurer"


def test_install_defaults(category_registry):
    """Test installing the default categories once."""
    created = category_registry.install_defaults()
    assert len(created) == len(DEFAULT_CATEGORIES)

    income = category_registry.list(CategoryKind.INCOME)
    expense = category_registry.list(CategoryKind.EXPENSE)
    assert len(income) == 5
    assert len(expense) == 6
    assert all(c.scope is not None for c in income)
    assert all(c.scope is None for c in expense)

    assert category_registry.install_defaults() == []


def test_same_name_allowed_across_kinds(sample_categories, category_registry):
    """Test that income and expense may both use a name."""
    income = category_registry.get_by_name("income", "School Supplies")
    expense = category_registry.get_by_name("expense", "School Supplies")
    assert income.id != expense.id
    assert income.scope == CategoryScope.MEMBER


def test_create_income_category(category_registry):
    """Test creating an income category."""
    category = category_registry.create(
        "income", "  Graduation Fee ", scope="member", default_amount="300", description="Graduation rites"
    )
    assert category.name == "Graduation Fee"
    assert category.kind == CategoryKind.INCOME
    assert category.default_amount == Decimal("300.00")
    assert category.is_active is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"kind": "income", "name": "No Scope"},
        {"kind": "expense", "name": "Scoped Expense", "scope": "household"},
        {"kind": "income", "name": "Ceiling", "scope": "member", "budget_ceiling": Decimal("10")},
        {"kind": "expense", "name": "Negative", "budget_ceiling": Decimal("-1")},
        {"kind": "income", "name": "Negative Fee", "scope": "member", "default_amount": Decimal("-5")},
        {"kind": "expense", "name": "   "},
        {"kind": "expense", "name": "Not A Number", "budget_ceiling": "abc"},
        {"kind": "expense", "name": "Huge Ceiling", "budget_ceiling": Decimal("1e40")},
        {"kind": "expense", "name": "Over Ceiling", "budget_ceiling": MAX_BUDGET_CEILING + Decimal("0.01")},
        {"kind": "income", "name": "Huge Fee", "scope": "member", "default_amount": Decimal("1e30")},
        {"kind": "income", "name": "Over Fee", "scope": "member", "default_amount": MAX_AMOUNT + 1},
        {"kind": "income", "name": "NaN Fee", "scope": "member", "default_amount": Decimal("NaN")},
    ],
)
def test_create_validation(category_registry, kwargs):
    """Test category combinations that are rejected."""
    with pytest.raises(ValidationError):
        category_registry.create(**kwargs)


def test_duplicate_name_within_kind(category_registry, sample_categories):
    """Test ConflictError for a repeated name."""
    with pytest.raises(ConflictError):
        category_registry.create("expense", "Utilities")


def test_update_unreferenced_category(category_registry, sample_categories):
    """Test renaming and rescoping before any transaction exists."""
    updated = category_registry.update(sample_categories["field_trip"].id, name="Educational Trip", scope="household")
    assert updated.name == "Educational Trip"
    assert updated.scope == CategoryScope.HOUSEHOLD


def test_update_referenced_category(recorder, category_registry, sample_categories, cruz_household):
    """Test that a used category keeps its name and scope."""
    pta = sample_categories["pta"]
    recorder.record_income(pta.id, "250", cruz_household.id, PRINCIPAL)

    with pytest.raises(DependencyError):
        category_registry.update(pta.id, name="PTA Fee")
    with pytest.raises(DependencyError):
        category_registry.update(pta.id, scope="member")

    updated = category_registry.update(pta.id, default_amount="300", description="Raised for 2025")
    assert updated.default_amount == Decimal("300.00")
    assert updated.name == "PTA Contribution Fee"


def test_update_missing_category(category_registry):
    """Test UnknownCategory on update."""
    with pytest.raises(UnknownCategory):
        category_registry.update(404, description="x")


def test_update_rejects_oversized_amounts(category_registry, sample_categories):
    """Test that updates keep amounts within what the ledger stores."""
    with pytest.raises(ValidationError, match="cannot exceed"):
        category_registry.update(sample_categories["utilities"].id, budget_ceiling=Decimal("1e40"))
    with pytest.raises(ValidationError, match="cannot exceed"):
        category_registry.update(sample_categories["pta"].id, default_amount="1e30")

    assert category_registry.get(sample_categories["utilities"].id).budget_ceiling == Decimal("15000.00")
    assert category_registry.update(
        sample_categories["utilities"].id, budget_ceiling=MAX_BUDGET_CEILING
    ).budget_ceiling == MAX_BUDGET_CEILING


def test_deactivate_and_reactivate(category_registry, sample_categories):
    """Test toggling a category's active flag."""
    trip = sample_categories["field_trip"]
    category_registry.deactivate(trip.id)

    assert trip.id not in {c.id for c in category_registry.list("income")}
    assert trip.id in {c.id for c in category_registry.list("income", include_inactive=True)}
    with pytest.raises(InactiveCategory):
        category_registry.require(trip.id, "income")

    category_registry.reactivate(trip.id)
    assert category_registry.require(trip.id, "income").is_active is True


def test_require_checks_kind(category_registry, sample_categories):
    """Test that require treats the other kind as unknown."""
    with pytest.raises(UnknownCategory):
        category_registry.require(sample_categories["utilities"].id, CategoryKind.INCOME)
    with pytest.raises(UnknownCategory):
        category_registry.require(9999, CategoryKind.EXPENSE)
