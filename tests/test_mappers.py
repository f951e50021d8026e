"""Tests for ORM to domain mappers."""

from datetime import datetime, UTC
from decimal import Decimal

from feeledger.database.mappers import audit_entry_to_domain, category_to_domain, household_to_domain
from feeledger.database.models import AuditEntry, Category, Household
from feeledger.domain import entities as domain

NOW = datetime(2024, 7, 15, 9, 30, tzinfo=UTC)


def test_household_mapper_drops_version():
    """Test that the row version does not reach the domain entity."""
    orm = Household(
        id=3,
        first_name="Maria",
        last_name="Cruz",
        email="maria@example.com",
        paid=True,
        paid_at=NOW,
        version=4,
        created_at=NOW,
        updated_at=NOW,
    )
    household = household_to_domain(orm)
    assert household.paid is True
    assert household.paid_at == NOW
    assert not hasattr(household, "version")


def test_category_mapper_enums():
    """Test kind and scope strings become enums."""
    orm = Category(
        id=1,
        kind="expense",
        name="Utilities",
        scope=None,
        budget_ceiling=Decimal("15000.00"),
        is_active=True,
        created_at=NOW,
        updated_at=NOW,
    )
    category = category_to_domain(orm)
    assert category.kind == domain.CategoryKind.EXPENSE
    assert category.scope is None
    assert category.budget_ceiling == Decimal("15000.00")


def test_audit_entry_mapper():
    """Test audit rows map their JSON snapshots."""
    orm = AuditEntry(
        id=9,
        entity_name="household",
        entity_id=3,
        seq=2,
        operation="update",
        prior_values={"paid": False},
        new_values={"paid": True},
        principal="treasurer",
        recorded_at=NOW,
    )
    entry = audit_entry_to_domain(orm)
    assert entry.operation == domain.AuditOperation.UPDATE
    assert entry.prior == {"paid": False}
    assert entry.new == {"paid": True}
