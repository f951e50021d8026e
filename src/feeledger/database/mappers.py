"""Mapper functions to convert SQLAlchemy models into domain entities.

Keeping the conversion here lets the domain layer stay unaware of the ORM,
and keeps store-only columns (such as row versions) out of audit snapshots.
"""

from feeledger.domain import entities as domain
from feeledger.database.models import (
    Household as ORMHousehold,
    Member as ORMMember,
    MemberGroup as ORMMemberGroup,
    Category as ORMCategory,
    IncomeTransaction as ORMIncomeTransaction,
    ExpenseTransaction as ORMExpenseTransaction,
    Attachment as ORMAttachment,
    AuditEntry as ORMAuditEntry,
)


def household_to_domain(orm_household: ORMHousehold) -> domain.Household:
    """Convert SQLAlchemy Household model to domain Household entity."""
    return domain.Household(
        id=orm_household.id,
        first_name=orm_household.first_name,
        last_name=orm_household.last_name,
        middle_name=orm_household.middle_name,
        contact_number=orm_household.contact_number,
        email=orm_household.email,
        address=orm_household.address,
        paid=bool(orm_household.paid),
        paid_at=orm_household.paid_at,
        created_at=orm_household.created_at,
        updated_at=orm_household.updated_at,
    )


def member_to_domain(orm_member: ORMMember) -> domain.Member:
    """Convert SQLAlchemy Member model to domain Member entity."""
    return domain.Member(
        id=orm_member.id,
        member_code=orm_member.member_code,
        household_id=orm_member.household_id,
        group_id=orm_member.group_id,
        first_name=orm_member.first_name,
        last_name=orm_member.last_name,
        middle_name=orm_member.middle_name,
        paid=bool(orm_member.paid),
        paid_at=orm_member.paid_at,
        created_at=orm_member.created_at,
        updated_at=orm_member.updated_at,
    )


def group_to_domain(orm_group: ORMMemberGroup) -> domain.Group:
    """Convert SQLAlchemy MemberGroup model to domain Group entity."""
    return domain.Group(
        id=orm_group.id,
        name=orm_group.name,
        school_year=orm_group.school_year,
        grade_level=orm_group.grade_level,
        created_at=orm_group.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        kind=domain.CategoryKind(orm_category.kind),
        name=orm_category.name,
        description=orm_category.description,
        scope=domain.CategoryScope(orm_category.scope) if orm_category.scope else None,
        default_amount=orm_category.default_amount,
        budget_ceiling=orm_category.budget_ceiling,
        is_active=bool(orm_category.is_active),
        created_at=orm_category.created_at,
        updated_at=orm_category.updated_at,
    )


def income_transaction_to_domain(orm_transaction: ORMIncomeTransaction) -> domain.IncomeTransaction:
    """Convert SQLAlchemy IncomeTransaction model to domain IncomeTransaction entity."""
    return domain.IncomeTransaction(
        id=orm_transaction.id,
        transaction_number=orm_transaction.transaction_number,
        category_id=orm_transaction.category_id,
        household_id=orm_transaction.household_id,
        member_id=orm_transaction.member_id,
        amount=orm_transaction.amount,
        payment_method=domain.PaymentMethod(orm_transaction.payment_method),
        reference_number=orm_transaction.reference_number,
        notes=orm_transaction.notes,
        receipt_issued=bool(orm_transaction.receipt_issued),
        school_year=orm_transaction.school_year,
        recorded_by=orm_transaction.recorded_by,
        recorded_at=orm_transaction.recorded_at,
    )


def expense_transaction_to_domain(orm_transaction: ORMExpenseTransaction) -> domain.ExpenseTransaction:
    """Convert SQLAlchemy ExpenseTransaction model to domain ExpenseTransaction entity."""
    return domain.ExpenseTransaction(
        id=orm_transaction.id,
        transaction_number=orm_transaction.transaction_number,
        category_id=orm_transaction.category_id,
        amount=orm_transaction.amount,
        description=orm_transaction.description,
        vendor_name=orm_transaction.vendor_name,
        payment_method=domain.PaymentMethod(orm_transaction.payment_method),
        reference_number=orm_transaction.reference_number,
        approved_by=orm_transaction.approved_by,
        expense_date=orm_transaction.expense_date,
        school_year=orm_transaction.school_year,
        recorded_by=orm_transaction.recorded_by,
        recorded_at=orm_transaction.recorded_at,
    )


def attachment_to_domain(orm_attachment: ORMAttachment) -> domain.Attachment:
    """Convert SQLAlchemy Attachment model to domain Attachment entity."""
    return domain.Attachment(
        id=orm_attachment.id,
        income_transaction_id=orm_attachment.income_transaction_id,
        expense_transaction_id=orm_attachment.expense_transaction_id,
        file_name=orm_attachment.file_name,
        file_path=orm_attachment.file_path,
        file_size=orm_attachment.file_size,
        mime_type=orm_attachment.mime_type,
        uploaded_by=orm_attachment.uploaded_by,
        created_at=orm_attachment.created_at,
    )


def audit_entry_to_domain(orm_entry: ORMAuditEntry) -> domain.AuditEntry:
    """Convert SQLAlchemy AuditEntry model to domain AuditEntry entity."""
    return domain.AuditEntry(
        id=orm_entry.id,
        entity_name=orm_entry.entity_name,
        entity_id=orm_entry.entity_id,
        seq=orm_entry.seq,
        operation=domain.AuditOperation(orm_entry.operation),
        prior=orm_entry.prior_values,
        new=orm_entry.new_values,
        principal=orm_entry.principal,
        recorded_at=orm_entry.recorded_at,
    )
