"""Tests for StatusPropagator and concurrent household payments."""

import threading
from datetime import timedelta
from decimal import Decimal

import pytest

from feeledger.database.factories import create_sqlite_database
from feeledger.domain.audit import AuditRecorder
from feeledger.domain.entities import AuditOperation, IncomeTransaction, PaymentMethod
from feeledger.domain.errors import UnknownHousehold
from feeledger.domain.propagation import StatusPropagator
from feeledger.domain.recorder import TransactionRecorder

PRINCIPAL = "treasurer"


def test_late_joining_member_stays_unpaid(
    temp_db, recorder, membership_service, sample_categories, cruz_household, cruz_members, payment_time
):
    """Test that a member enrolled after payment is not paid retroactively."""
    recorder.record_income(
        sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL, recorded_at=payment_time
    )

    late = membership_service.enroll_member(
        cruz_household.id, "STU-2024-0009", "Marco", "Cruz", principal=PRINCIPAL
    )

    assert temp_db.get_household(cruz_household.id).paid is True
    assert temp_db.get_member(late.id).paid is False
    assert temp_db.get_member(late.id).paid_at is None


def test_second_payment_reaches_late_member(
    temp_db, recorder, membership_service, sample_categories, cruz_household, cruz_members, payment_time
):
    """Test that the next household payment marks a late member paid."""
    recorder.record_income(
        sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL, recorded_at=payment_time
    )
    late = membership_service.enroll_member(
        cruz_household.id, "STU-2024-0009", "Marco", "Cruz", principal=PRINCIPAL
    )
    later = payment_time + timedelta(days=1)

    recorder.record_income(sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL, recorded_at=later)

    assert temp_db.get_member(late.id).paid_at == later
    assert temp_db.get_household(cruz_household.id).paid_at == later


def test_propagate_reports_changed_rows(
    temp_db, recorder, propagator, sample_categories, cruz_household, cruz_members, payment_time
):
    """Test the PropagationResult of a repeated propagation."""
    transaction = recorder.record_income(
        sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL, recorded_at=payment_time
    )

    with temp_db.atomic():
        result = propagator.propagate(transaction, PRINCIPAL)

    # Already paid at the same moment: nothing to change
    assert result.household_id == cruz_household.id
    assert result.household_updated is False
    assert result.member_ids == ()


def test_paid_at_never_moves_backwards(
    temp_db, recorder, audit_recorder, sample_categories, cruz_household, cruz_members, payment_time
):
    """Test that an older payment recorded later leaves paid_at alone."""
    recorder.record_income(
        sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL, recorded_at=payment_time
    )
    household_entries = temp_db.count_audit_entries("household", cruz_household.id)

    earlier = payment_time - timedelta(hours=2)
    recorder.record_income(
        sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL, recorded_at=earlier
    )

    assert temp_db.get_household(cruz_household.id).paid_at == payment_time
    for member in cruz_members:
        assert temp_db.get_member(member.id).paid_at == payment_time
    assert temp_db.count_audit_entries("household", cruz_household.id) == household_entries


def test_propagation_on_missing_household(temp_db, propagator, payment_time):
    """Test UnknownHousehold when the payer row is gone."""
    ghost = IncomeTransaction(
        id=1,
        transaction_number="INC-000001",
        category_id=1,
        household_id=404,
        member_id=None,
        amount=Decimal("250.00"),
        payment_method=PaymentMethod.CASH,
        reference_number=None,
        notes=None,
        receipt_issued=False,
        school_year="2024-2025",
        recorded_by=PRINCIPAL,
        recorded_at=payment_time,
    )
    with pytest.raises(UnknownHousehold):
        propagator.propagate(ghost, PRINCIPAL)


def test_failed_propagation_rolls_back_transaction(
    temp_db, audit_recorder, settings, sample_categories, cruz_household, cruz_members, payment_time
):
    """Test that a failing propagation leaves no transaction and no audit entries."""

    class FailingPropagator(StatusPropagator):
        def _mark_member_paid(self, member, paid_at, principal):
            raise RuntimeError("member lock lost")

    failing = TransactionRecorder(
        temp_db,
        audit=audit_recorder,
        propagator=FailingPropagator(temp_db, audit_recorder),
        settings=settings,
    )
    audit_before = temp_db.count_audit_entries()

    with pytest.raises(RuntimeError):
        failing.record_income(
            sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL, recorded_at=payment_time
        )

    assert temp_db.list_income_transactions() == []
    assert temp_db.get_household(cruz_household.id).paid is False
    assert temp_db.count_audit_entries() == audit_before


def test_concurrent_household_payments(
    temp_db, settings, sample_categories, cruz_household, cruz_members, payment_time
):
    """Test two simultaneous payments for one household from separate connections."""
    first_at = payment_time
    second_at = payment_time + timedelta(hours=1)
    barrier = threading.Barrier(2)
    results = []
    errors = []

    def pay(recorded_at):
        db = create_sqlite_database(database_path=temp_db.database_path, settings=settings)
        try:
            audit = AuditRecorder(db)
            service = TransactionRecorder(db, audit=audit, settings=settings)
            barrier.wait(timeout=10)
            results.append(
                service.record_income(
                    sample_categories["pta"].id,
                    "250",
                    cruz_household.id,
                    PRINCIPAL,
                    recorded_at=recorded_at,
                )
            )
        except Exception as e:
            errors.append(e)
        finally:
            db.disconnect()

    threads = [threading.Thread(target=pay, args=(moment,)) for moment in (first_at, second_at)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    assert len(results) == 2
    assert {t.transaction_number for t in results} == {"INC-000001", "INC-000002"}
    assert len(temp_db.list_income_transactions(household_id=cruz_household.id)) == 2

    household = temp_db.get_household(cruz_household.id)
    assert household.paid is True
    assert household.paid_at == second_at
    for member in cruz_members:
        stored = temp_db.get_member(member.id)
        assert stored.paid is True
        assert stored.paid_at == second_at

    # Every household update in the trail moved paid_at forward
    updates = [
        entry
        for entry in temp_db.list_audit_entries("household", cruz_household.id)
        if entry.operation == AuditOperation.UPDATE
    ]
    assert 1 <= len(updates) <= 2
    assert updates[-1].new["paid_at"] == second_at.isoformat()
    assert [entry.seq for entry in temp_db.list_audit_entries("household", cruz_household.id)] == list(
        range(1, len(updates) + 2)
    )
