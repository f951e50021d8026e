"""Abstract ledger store interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from feeledger.domain.entities import (
    Attachment,
    AuditEntry,
    Category,
    CategoryKind,
    CategoryScope,
    ExpenseTransaction,
    Group,
    Household,
    IncomeTransaction,
    Member,
    PaymentMethod,
)


class Database(ABC):
    """Abstract ledger store for feeledger.

    Every write joins the atomic unit opened by ``atomic()`` when one is
    active; otherwise it runs in a unit of its own.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Open an atomic unit; nested calls join the outermost one.

        Raises on exit:
            ConcurrencyConflict: A versioned row changed underneath the unit
            ConflictError: A uniqueness or integrity constraint failed
            StoreUnavailable: Any other persistence failure
        """
        pass

    @abstractmethod
    def in_atomic(self) -> bool:
        """Return True when the caller is inside an open atomic unit."""
        pass

    # Household operations
    @abstractmethod
    def create_household(
        self,
        first_name: str,
        last_name: str,
        middle_name: Optional[str] = None,
        contact_number: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Household:
        """Create a household. Returns the stored household."""
        pass

    @abstractmethod
    def get_household(self, household_id: int) -> Optional[Household]:
        """Get household by ID."""
        pass

    @abstractmethod
    def get_household_by_email(self, email: str) -> Optional[Household]:
        """Get household by email address."""
        pass

    @abstractmethod
    def list_households(self, paid: Optional[bool] = None) -> list[Household]:
        """List households ordered by last and first name."""
        pass

    @abstractmethod
    def update_household(
        self,
        household_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        middle_name: Optional[str] = None,
        contact_number: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Household:
        """Update household contact fields. Returns the updated household."""
        pass

    @abstractmethod
    def lock_household(self, household_id: int) -> Optional[Household]:
        """Load a household holding a row lock until the unit ends."""
        pass

    @abstractmethod
    def mark_household_paid(self, household_id: int, paid_at: datetime) -> Household:
        """Set paid flag and timestamp on a household."""
        pass

    @abstractmethod
    def delete_household(self, household_id: int) -> None:
        """Delete a household."""
        pass

    @abstractmethod
    def count_household_members(self, household_id: int) -> int:
        """Count members linked to a household."""
        pass

    @abstractmethod
    def count_household_payments(self, household_id: int) -> int:
        """Count income transactions referencing a household."""
        pass

    # Member operations
    @abstractmethod
    def create_member(
        self,
        household_id: int,
        member_code: str,
        first_name: str,
        last_name: str,
        middle_name: Optional[str] = None,
        group_id: Optional[int] = None,
    ) -> Member:
        """Create a member (always unpaid). Returns the stored member."""
        pass

    @abstractmethod
    def get_member(self, member_id: int) -> Optional[Member]:
        """Get member by ID."""
        pass

    @abstractmethod
    def get_member_by_code(self, member_code: str) -> Optional[Member]:
        """Get member by external member code."""
        pass

    @abstractmethod
    def list_members(
        self,
        household_id: Optional[int] = None,
        group_id: Optional[int] = None,
        paid: Optional[bool] = None,
    ) -> list[Member]:
        """List members with optional filters."""
        pass

    @abstractmethod
    def update_member(
        self,
        member_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        middle_name: Optional[str] = None,
        group_id: Optional[int] = None,
        clear_group: bool = False,
    ) -> Member:
        """Update member fields. Returns the updated member."""
        pass

    @abstractmethod
    def lock_members_of_household(self, household_id: int) -> list[Member]:
        """Load every member of a household holding row locks until the unit ends."""
        pass

    @abstractmethod
    def mark_member_paid(self, member_id: int, paid_at: datetime) -> Member:
        """Set paid flag and timestamp on a member."""
        pass

    @abstractmethod
    def delete_member(self, member_id: int) -> None:
        """Delete a member."""
        pass

    # Group operations
    @abstractmethod
    def create_group(self, name: str, school_year: str, grade_level: Optional[int] = None) -> Group:
        """Create a group. Returns the stored group."""
        pass

    @abstractmethod
    def get_group(self, group_id: int) -> Optional[Group]:
        """Get group by ID."""
        pass

    @abstractmethod
    def list_groups(self, school_year: Optional[str] = None) -> list[Group]:
        """List groups, optionally for one school year."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        kind: CategoryKind,
        name: str,
        scope: Optional[CategoryScope] = None,
        default_amount: Optional[Decimal] = None,
        budget_ceiling: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> Category:
        """Create a category. Returns the stored category."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, kind: CategoryKind, name: str) -> Optional[Category]:
        """Get category by kind and name."""
        pass

    @abstractmethod
    def list_categories(
        self, kind: Optional[CategoryKind] = None, include_inactive: bool = False
    ) -> list[Category]:
        """List categories ordered by kind and name."""
        pass

    @abstractmethod
    def update_category(self, category_id: int, changes: dict[str, Any]) -> Category:
        """Apply column changes to a category. Returns the updated category."""
        pass

    @abstractmethod
    def count_category_references(self, category_id: int) -> int:
        """Count transactions of either kind referencing a category."""
        pass

    # Transaction operations
    @abstractmethod
    def create_income_transaction(
        self,
        transaction_number: str,
        category_id: int,
        household_id: int,
        amount: Decimal,
        payment_method: PaymentMethod,
        school_year: str,
        recorded_by: str,
        recorded_at: datetime,
        member_id: Optional[int] = None,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> IncomeTransaction:
        """Create an income transaction.

        Raises:
            DuplicateTransactionNumber: If the number is already taken; the
                open unit stays usable
        """
        pass

    @abstractmethod
    def get_income_transaction(self, transaction_id: int) -> Optional[IncomeTransaction]:
        """Get income transaction by ID."""
        pass

    @abstractmethod
    def get_income_transaction_by_number(self, transaction_number: str) -> Optional[IncomeTransaction]:
        """Get income transaction by transaction number."""
        pass

    @abstractmethod
    def list_income_transactions(
        self,
        household_id: Optional[int] = None,
        member_id: Optional[int] = None,
        category_id: Optional[int] = None,
        school_year: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[IncomeTransaction]:
        """List income transactions, newest first."""
        pass

    @abstractmethod
    def update_income_transaction(self, transaction_id: int, changes: dict[str, Any]) -> IncomeTransaction:
        """Apply column changes to an income transaction."""
        pass

    @abstractmethod
    def delete_income_transaction(self, transaction_id: int) -> None:
        """Delete an income transaction (attachments must be gone already)."""
        pass

    @abstractmethod
    def create_expense_transaction(
        self,
        transaction_number: str,
        category_id: int,
        amount: Decimal,
        description: str,
        payment_method: PaymentMethod,
        expense_date: date,
        school_year: str,
        recorded_by: str,
        recorded_at: datetime,
        vendor_name: Optional[str] = None,
        reference_number: Optional[str] = None,
        approved_by: Optional[str] = None,
    ) -> ExpenseTransaction:
        """Create an expense transaction.

        Raises:
            DuplicateTransactionNumber: If the number is already taken; the
                open unit stays usable
        """
        pass

    @abstractmethod
    def get_expense_transaction(self, transaction_id: int) -> Optional[ExpenseTransaction]:
        """Get expense transaction by ID."""
        pass

    @abstractmethod
    def get_expense_transaction_by_number(self, transaction_number: str) -> Optional[ExpenseTransaction]:
        """Get expense transaction by transaction number."""
        pass

    @abstractmethod
    def list_expense_transactions(
        self,
        category_id: Optional[int] = None,
        school_year: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[ExpenseTransaction]:
        """List expense transactions, newest first."""
        pass

    @abstractmethod
    def update_expense_transaction(self, transaction_id: int, changes: dict[str, Any]) -> ExpenseTransaction:
        """Apply column changes to an expense transaction."""
        pass

    @abstractmethod
    def delete_expense_transaction(self, transaction_id: int) -> None:
        """Delete an expense transaction (attachments must be gone already)."""
        pass

    @abstractmethod
    def total_expenses(self, category_id: int, school_year: str) -> Decimal:
        """Sum of expense amounts for a category within a school year."""
        pass

    # Attachment operations
    @abstractmethod
    def create_attachment(
        self,
        file_name: str,
        file_path: str,
        uploaded_by: str,
        income_transaction_id: Optional[int] = None,
        expense_transaction_id: Optional[int] = None,
        file_size: Optional[int] = None,
        mime_type: Optional[str] = None,
    ) -> Attachment:
        """Create an attachment. Returns the stored attachment."""
        pass

    @abstractmethod
    def get_attachment(self, attachment_id: int) -> Optional[Attachment]:
        """Get attachment by ID."""
        pass

    @abstractmethod
    def list_attachments(
        self,
        income_transaction_id: Optional[int] = None,
        expense_transaction_id: Optional[int] = None,
    ) -> list[Attachment]:
        """List attachments of one transaction, oldest first."""
        pass

    @abstractmethod
    def delete_attachment(self, attachment_id: int) -> None:
        """Delete an attachment."""
        pass

    # Audit operations
    @abstractmethod
    def append_audit_entry(
        self,
        entity_name: str,
        entity_id: int,
        operation: str,
        prior: Optional[dict[str, Any]],
        new: Optional[dict[str, Any]],
        principal: str,
        recorded_at: datetime,
    ) -> AuditEntry:
        """Append an audit entry with the next per-entity sequence number."""
        pass

    @abstractmethod
    def list_audit_entries(
        self,
        entity_name: Optional[str] = None,
        entity_id: Optional[int] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[AuditEntry]:
        """List audit entries oldest first."""
        pass

    @abstractmethod
    def count_audit_entries(self, entity_name: Optional[str] = None, entity_id: Optional[int] = None) -> int:
        """Count audit entries with optional filters."""
        pass

    # Sequence operations
    @abstractmethod
    def next_sequence_value(self, sequence_name: str) -> int:
        """Allocate the next value of a named counter inside the current unit."""
        pass
