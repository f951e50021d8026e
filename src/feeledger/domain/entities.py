"""Domain model entities for feeledger.

These are pure data classes representing business concepts, independent of
database schema. Stores hand them out and services pass them around; they
are never mutated in place.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class CategoryKind(str, Enum):
    """Whether a category (and its transactions) brings money in or out."""

    INCOME = "income"
    EXPENSE = "expense"


class CategoryScope(str, Enum):
    """Who an income category bills: the whole household or each member."""

    HOUSEHOLD = "household"
    MEMBER = "member"


class PaymentMethod(str, Enum):
    """Settlement methods accepted by the organization."""

    CASH = "Cash"
    CHECK = "Check"
    BANK_TRANSFER = "Bank Transfer"
    GCASH = "GCash"
    PAYMAYA = "PayMaya"


INCOME_PAYMENT_METHODS = frozenset(PaymentMethod)
EXPENSE_PAYMENT_METHODS = frozenset(
    {PaymentMethod.CASH, PaymentMethod.CHECK, PaymentMethod.BANK_TRANSFER}
)

# Largest values the amount and budget ceiling columns hold (10 and 12 digits, 2 decimals)
MAX_AMOUNT = Decimal("99999999.99")
MAX_BUDGET_CEILING = Decimal("9999999999.99")


class AuditOperation(str, Enum):
    """Kind of mutation an audit entry describes."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Household:
    """Paying family unit."""

    id: int
    first_name: str
    last_name: str
    middle_name: Optional[str]
    contact_number: Optional[str]
    email: Optional[str]
    address: Optional[str]
    paid: bool
    paid_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @property
    def display_name(self) -> str:
        return f"{self.last_name}, {self.first_name}"


@dataclass(frozen=True)
class Member:
    """Individual beneficiary linked to exactly one household."""

    id: int
    member_code: str
    household_id: int
    group_id: Optional[int]
    first_name: str
    last_name: str
    middle_name: Optional[str]
    paid: bool
    paid_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @property
    def display_name(self) -> str:
        return f"{self.last_name}, {self.first_name}"


@dataclass(frozen=True)
class Group:
    """Section or class a member is enrolled in."""

    id: int
    name: str
    school_year: str
    grade_level: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Income or expense category."""

    id: int
    kind: CategoryKind
    name: str
    description: Optional[str]
    scope: Optional[CategoryScope]
    default_amount: Optional[Decimal]
    budget_ceiling: Optional[Decimal]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @property
    def is_household_scoped(self) -> bool:
        return self.kind == CategoryKind.INCOME and self.scope == CategoryScope.HOUSEHOLD


@dataclass(frozen=True)
class IncomeTransaction:
    """Money received from a household."""

    id: int
    transaction_number: str
    category_id: int
    household_id: int
    member_id: Optional[int]
    amount: Decimal
    payment_method: PaymentMethod
    reference_number: Optional[str]
    notes: Optional[str]
    receipt_issued: bool
    school_year: str
    recorded_by: str
    recorded_at: datetime

    kind = CategoryKind.INCOME


@dataclass(frozen=True)
class ExpenseTransaction:
    """Money spent by the organization."""

    id: int
    transaction_number: str
    category_id: int
    amount: Decimal
    description: str
    vendor_name: Optional[str]
    payment_method: PaymentMethod
    reference_number: Optional[str]
    approved_by: Optional[str]
    expense_date: date
    school_year: str
    recorded_by: str
    recorded_at: datetime

    kind = CategoryKind.EXPENSE


@dataclass(frozen=True)
class AttachmentFile:
    """File metadata handed over by the blob store collaborator.

    ``file_path`` is the stable reference returned by the blob store and is
    stored verbatim.
    """

    file_name: str
    file_path: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class Attachment:
    """Receipt or supporting document owned by one transaction."""

    id: int
    income_transaction_id: Optional[int]
    expense_transaction_id: Optional[int]
    file_name: str
    file_path: str
    file_size: Optional[int]
    mime_type: Optional[str]
    uploaded_by: str
    created_at: datetime


@dataclass(frozen=True)
class AuditEntry:
    """Immutable record of a single mutation."""

    id: int
    entity_name: str
    entity_id: int
    seq: int
    operation: AuditOperation
    prior: Optional[dict[str, Any]]
    new: Optional[dict[str, Any]]
    principal: str
    recorded_at: datetime


@dataclass(frozen=True)
class AuditPage:
    """One page of an audit trail, oldest entry first."""

    entries: tuple[AuditEntry, ...]
    next_offset: Optional[int]


@dataclass(frozen=True)
class PaymentStatus:
    """Paid flag and timestamp of a household or member."""

    entity_name: str
    entity_id: int
    paid: bool
    paid_at: Optional[datetime]


@dataclass(frozen=True)
class PropagationResult:
    """Rows touched by one status propagation pass."""

    household_id: int
    household_updated: bool
    member_ids: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FinancialSummaryRow:
    """Totals for one category within a school year."""

    school_year: str
    kind: CategoryKind
    category_id: int
    category_name: str
    count: int
    total: Decimal


@dataclass(frozen=True)
class FinancialSummary:
    """Income and expense totals with the resulting balance."""

    school_year: Optional[str]
    rows: tuple[FinancialSummaryRow, ...]
    total_income: Decimal
    total_expenses: Decimal

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expenses


@dataclass(frozen=True)
class GroupPaymentStatus:
    """Paid and unpaid member counts for one group."""

    group_id: Optional[int]
    group_name: str
    total_members: int
    paid_members: int

    @property
    def unpaid_members(self) -> int:
        return self.total_members - self.paid_members

    @property
    def paid_percentage(self) -> Decimal:
        if self.total_members == 0:
            return Decimal("0.00")
        ratio = Decimal(self.paid_members) / Decimal(self.total_members) * 100
        return ratio.quantize(Decimal("0.01"))


@dataclass(frozen=True)
class BudgetUsage:
    """Spending of one expense category against its ceiling."""

    category_id: int
    category_name: str
    school_year: str
    spent: Decimal
    budget_ceiling: Optional[Decimal]

    @property
    def remaining(self) -> Optional[Decimal]:
        if self.budget_ceiling is None:
            return None
        return self.budget_ceiling - self.spent

    @property
    def over_budget(self) -> bool:
        return self.budget_ceiling is not None and self.spent > self.budget_ceiling
