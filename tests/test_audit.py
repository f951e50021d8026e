"""Tests for AuditRecorder."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from feeledger.domain.audit import AuditRecorder, snapshot
from feeledger.domain.entities import AuditOperation, CategoryKind, PaymentMethod
from feeledger.domain.errors import ValidationError

PRINCIPAL = "treasurer"


def test_snapshot_is_json_safe():
    """Test conversion of decimals, dates and enums."""
    data = snapshot(
        {
            "amount": Decimal("250.00"),
            "recorded_at": datetime(2024, 7, 15, 9, 30, tzinfo=UTC),
            "expense_date": date(2024, 7, 15),
            "payment_method": PaymentMethod.GCASH,
            "kind": CategoryKind.INCOME,
            "notes": None,
        }
    )
    assert data == {
        "amount": "250.00",
        "recorded_at": "2024-07-15T09:30:00+00:00",
        "expense_date": "2024-07-15",
        "payment_method": "GCash",
        "kind": "income",
        "notes": None,
    }
    assert snapshot(None) is None
    with pytest.raises(TypeError):
        snapshot(object())


def test_insert_has_no_prior(audit_recorder, cruz_household):
    """Test the snapshots of an insert entry."""
    page = audit_recorder.list_trail("household", cruz_household.id)
    assert page.next_offset is None
    (entry,) = page.entries
    assert entry.operation == AuditOperation.INSERT
    assert entry.seq == 1
    assert entry.prior is None
    assert entry.new["email"] == "maria.cruz@example.com"
    assert entry.new["paid"] is False
    assert entry.principal == PRINCIPAL


def test_update_has_both_snapshots(membership_service, audit_recorder, cruz_household):
    """Test that updates carry prior and new values."""
    membership_service.update_household(cruz_household.id, "secretary", contact_number="0917-555-0101")

    entry = audit_recorder.list_trail("household", cruz_household.id).entries[-1]
    assert entry.operation == AuditOperation.UPDATE
    assert entry.seq == 2
    assert entry.prior["contact_number"] is None
    assert entry.new["contact_number"] == "0917-555-0101"
    assert entry.principal == "secretary"


def test_delete_has_no_new_snapshot(membership_service, audit_recorder):
    """Test that deletes keep the prior snapshot only."""
    household = membership_service.register_household("Pedro", "Santos", PRINCIPAL)
    membership_service.delete_household(household.id, PRINCIPAL)

    entries = audit_recorder.list_trail("household", household.id).entries
    assert [e.operation for e in entries] == [AuditOperation.INSERT, AuditOperation.DELETE]
    assert entries[1].prior["last_name"] == "Santos"
    assert entries[1].new is None


def test_failed_mutation_leaves_no_entry(temp_db, audit_recorder):
    """Test that a failing mutation appends nothing."""
    before = temp_db.count_audit_entries()

    def explode():
        raise RuntimeError("write failed")

    with pytest.raises(RuntimeError):
        audit_recorder.with_audit("household", "insert", PRINCIPAL, explode)
    assert temp_db.count_audit_entries() == before


@pytest.mark.parametrize(
    "entity_name, operation, principal, prior",
    [
        ("category", "insert", PRINCIPAL, None),
        ("household", "update", PRINCIPAL, None),
        ("household", "delete", PRINCIPAL, None),
        ("household", "insert", "", None),
    ],
)
def test_with_audit_validation(audit_recorder, entity_name, operation, principal, prior):
    """Test rejected audit requests."""
    with pytest.raises(ValidationError):
        audit_recorder.with_audit(entity_name, operation, principal, lambda: None, prior=prior)


def test_trail_pagination(membership_service, audit_recorder, cruz_household):
    """Test paging through a trail with offset and limit."""
    for number in range(4):
        membership_service.update_household(cruz_household.id, PRINCIPAL, address=f"Street {number}")

    first = audit_recorder.list_trail("household", cruz_household.id, limit=2)
    assert [e.seq for e in first.entries] == [1, 2]
    assert first.next_offset == 2

    second = audit_recorder.list_trail("household", cruz_household.id, offset=first.next_offset, limit=2)
    assert [e.seq for e in second.entries] == [3, 4]
    assert second.next_offset == 4

    last = audit_recorder.list_trail("household", cruz_household.id, offset=second.next_offset, limit=2)
    assert [e.seq for e in last.entries] == [5]
    assert last.next_offset is None


def test_trail_pagination_arguments(audit_recorder):
    """Test invalid offsets, limits and entity names."""
    with pytest.raises(ValidationError):
        audit_recorder.list_trail("household", 1, offset=-1)
    with pytest.raises(ValidationError):
        audit_recorder.list_trail("household", 1, limit=0)
    with pytest.raises(ValidationError):
        audit_recorder.list_trail("ledger", 1)


def test_trail_of_unknown_entity_is_empty(audit_recorder):
    """Test that a trail without entries is an empty last page."""
    page = audit_recorder.list_trail("member", 12345, limit=10)
    assert page.entries == ()
    assert page.next_offset is None


def test_clock_is_injectable(temp_db, cruz_household):
    """Test that the recorder stamps entries with its clock."""
    moment = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)
    recorder = AuditRecorder(temp_db, clock=lambda: moment)
    household = temp_db.get_household(cruz_household.id)
    recorder.with_audit(
        "household",
        AuditOperation.UPDATE,
        PRINCIPAL,
        lambda: temp_db.update_household(household.id, address="Quezon City"),
        prior=household,
    )
    assert temp_db.list_audit_entries("household", household.id)[-1].recorded_at == moment
