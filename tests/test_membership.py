"""Tests for MembershipService."""

import re

import pytest

from feeledger.domain.entities import AuditOperation
from feeledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    UnknownHousehold,
    UnknownMember,
    ValidationError,
)

PRINCIPAL = "treasurer"


def test_register_household(membership_service, audit_recorder):
    """Test household registration."""
    household = membership_service.register_household(
        " Maria ", "Cruz", PRINCIPAL, contact_number="0917-555-0101", email="maria@example.com"
    )
    assert household.first_name == "Maria"
    assert household.display_name == "Cruz, Maria"
    assert household.paid is False
    assert membership_service.require_household(household.id) == household

    (entry,) = audit_recorder.list_trail("household", household.id).entries
    assert entry.operation == AuditOperation.INSERT


def test_register_household_validation(membership_service, cruz_household):
    """Test required names and unique emails."""
    with pytest.raises(ValidationError):
        membership_service.register_household("", "Cruz", PRINCIPAL)
    with pytest.raises(ConflictError):
        membership_service.register_household("Marco", "Cruz", PRINCIPAL, email="maria.cruz@example.com")


def test_list_households_by_status(recorder, membership_service, sample_categories, cruz_household):
    """Test filtering households by paid status."""
    santos = membership_service.register_household("Pedro", "Santos", PRINCIPAL)
    recorder.record_income(sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL)

    assert [h.id for h in membership_service.list_households(paid=True)] == [cruz_household.id]
    assert [h.id for h in membership_service.list_households(paid=False)] == [santos.id]
    assert len(membership_service.list_households()) == 2


def test_update_household_email_conflict(membership_service, cruz_household):
    """Test that an email taken by another household is rejected."""
    other = membership_service.register_household("Pedro", "Santos", PRINCIPAL, email="pedro@example.com")
    with pytest.raises(ConflictError):
        membership_service.update_household(other.id, PRINCIPAL, email="maria.cruz@example.com")

    same = membership_service.update_household(cruz_household.id, PRINCIPAL, email="maria.cruz@example.com")
    assert same.email == "maria.cruz@example.com"


def test_update_missing_household(membership_service):
    """Test UnknownHousehold on update."""
    with pytest.raises(UnknownHousehold):
        membership_service.update_household(42, PRINCIPAL, address="Manila")


def test_delete_household_blocked_by_members(membership_service, cruz_household, cruz_members):
    """Test that a household with members cannot be deleted."""
    with pytest.raises(DependencyError, match="2 members"):
        membership_service.delete_household(cruz_household.id, PRINCIPAL)
    assert membership_service.get_household(cruz_household.id) is not None


def test_delete_household_blocked_by_payments(recorder, membership_service, sample_categories, cruz_household):
    """Test that a household with payments cannot be deleted."""
    recorder.record_income(sample_categories["pta"].id, "250", cruz_household.id, PRINCIPAL)
    with pytest.raises(DependencyError, match="1 payment"):
        membership_service.delete_household(cruz_household.id, PRINCIPAL)


def test_enroll_member(membership_service, audit_recorder, cruz_household):
    """Test enrolling a member with a group."""
    group = membership_service.create_group("Grade 3 - Sampaguita", "2024-2025", grade_level=3)
    member = membership_service.enroll_member(
        cruz_household.id, "STU-2024-0100", "Juan", "Cruz", PRINCIPAL, group_id=group.id
    )
    assert member.group_id == group.id
    assert member.paid is False
    assert membership_service.get_member_by_code("STU-2024-0100") == member
    assert membership_service.list_members(group_id=group.id) == [member]

    (entry,) = audit_recorder.list_trail("member", member.id).entries
    assert entry.new["member_code"] == "STU-2024-0100"


def test_enroll_member_validation(membership_service, cruz_household, cruz_members):
    """Test enrollment failures."""
    with pytest.raises(UnknownHousehold):
        membership_service.enroll_member(404, "STU-2024-0500", "Ana", "Reyes", PRINCIPAL)
    with pytest.raises(NotFoundError):
        membership_service.enroll_member(cruz_household.id, "STU-2024-0500", "Ana", "Cruz", PRINCIPAL, group_id=9)
    with pytest.raises(ConflictError):
        membership_service.enroll_member(cruz_household.id, "STU-2024-0001", "Ana", "Cruz", PRINCIPAL)


def test_update_member_group(membership_service, audit_recorder, cruz_members):
    """Test moving a member between groups and clearing it."""
    juan = cruz_members[0]
    group = membership_service.create_group("Grade 4 - Rosal", "2024-2025")

    moved = membership_service.update_member(juan.id, PRINCIPAL, group_id=group.id)
    assert moved.group_id == group.id

    cleared = membership_service.update_member(juan.id, PRINCIPAL, clear_group=True)
    assert cleared.group_id is None

    entries = audit_recorder.list_trail("member", juan.id).entries
    assert [e.operation for e in entries] == [AuditOperation.INSERT, AuditOperation.UPDATE, AuditOperation.UPDATE]
    assert entries[2].prior["group_id"] == group.id


def test_delete_member(membership_service, cruz_household, cruz_members):
    """Test deleting a member without payments."""
    membership_service.delete_member(cruz_members[1].id, PRINCIPAL)
    assert membership_service.get_member(cruz_members[1].id) is None
    with pytest.raises(UnknownMember):
        membership_service.delete_member(cruz_members[1].id, PRINCIPAL)


def test_delete_member_with_payments(recorder, membership_service, sample_categories, cruz_household, cruz_members):
    """Test that a member with own payments cannot be deleted."""
    recorder.record_income(
        sample_categories["spg"].id, "50", cruz_household.id, PRINCIPAL, member_id=cruz_members[0].id
    )
    with pytest.raises(DependencyError):
        membership_service.delete_member(cruz_members[0].id, PRINCIPAL)


def test_create_group_validation(membership_service):
    """Test group school year and uniqueness checks."""
    membership_service.create_group("Grade 1 - Ilang-Ilang", "2024-2025")
    with pytest.raises(ConflictError):
        membership_service.create_group("Grade 1 - Ilang-Ilang", "2024-2025")
    with pytest.raises(ValidationError):
        membership_service.create_group("Grade 1 - Ilang-Ilang", "2024-2026")

    other_year = membership_service.create_group("Grade 1 - Ilang-Ilang", "2025-2026")
    assert [g.id for g in membership_service.list_groups("2025-2026")] == [other_year.id]


def test_generate_member_code(membership_service, cruz_members):
    """Test generated member codes are well formed and unused."""
    code = membership_service.generate_member_code(year=2024)
    assert re.fullmatch(r"STU-2024-\d{4}", code)
    assert code not in {m.member_code for m in cruz_members}
