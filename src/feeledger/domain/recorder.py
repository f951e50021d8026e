"""Transaction recorder: validates and books income and expense transactions."""

from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from feeledger.config import LedgerSettings
from feeledger.database.base import Database
from feeledger.domain.attachment import AttachmentLinker
from feeledger.domain.audit import AuditRecorder
from feeledger.domain.category import CategoryRegistry
from feeledger.domain.concurrency import run_with_retry
from feeledger.domain.entities import (
    EXPENSE_PAYMENT_METHODS,
    INCOME_PAYMENT_METHODS,
    MAX_AMOUNT,
    AuditOperation,
    CategoryKind,
    CategoryScope,
    ExpenseTransaction,
    IncomeTransaction,
    PaymentMethod,
)
from feeledger.domain.errors import (
    DuplicateTransactionNumber,
    InvalidAmount,
    NumberGenerationFailed,
    ScopeMismatch,
    UnknownHousehold,
    UnknownTransaction,
    ValidationError,
    amount_too_large,
    household_not_found,
    invalid_amount,
    member_not_allowed,
    member_not_found,
    member_outside_household,
    member_required,
    transaction_not_found,
)
from feeledger.domain.numbering import TransactionNumberGenerator
from feeledger.domain.propagation import StatusPropagator
from feeledger.logging_config import get_logger
from feeledger.utils.school_year import school_year_for, validate_school_year

logger = get_logger(__name__)

CENT = Decimal("0.01")


def validate_amount(amount) -> Decimal:
    """Return ``amount`` as a Decimal rounded to centavos.

    Raises:
        InvalidAmount: If it is not a finite number greater than zero, or is
            larger than ``MAX_AMOUNT``
    """
    if isinstance(amount, bool) or amount is None:
        raise InvalidAmount(invalid_amount(amount))
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation:
        raise InvalidAmount(invalid_amount(amount)) from None
    if not value.is_finite() or value <= 0:
        raise InvalidAmount(invalid_amount(amount))
    if value > MAX_AMOUNT:
        raise InvalidAmount(amount_too_large("Amount", amount, MAX_AMOUNT))
    # Bounded above, so quantizing cannot exceed the context precision
    value = value.quantize(CENT)
    if value <= 0:
        raise InvalidAmount(invalid_amount(amount))
    if value > MAX_AMOUNT:
        raise InvalidAmount(amount_too_large("Amount", amount, MAX_AMOUNT))
    return value


def parse_payment_method(value: PaymentMethod | str, allowed: frozenset[PaymentMethod]) -> PaymentMethod:
    """Resolve a payment method by value, case-insensitively.

    Raises:
        ValidationError: If the method is unknown or not allowed here
    """
    method = None
    if isinstance(value, PaymentMethod):
        method = value
    elif isinstance(value, str):
        wanted = value.strip().lower()
        for candidate in PaymentMethod:
            if candidate.value.lower() == wanted or candidate.name.lower() == wanted:
                method = candidate
                break
    if method is None or method not in allowed:
        names = ", ".join(m.value for m in PaymentMethod if m in allowed)
        raise ValidationError(f"Invalid payment method '{value}'. Expected one of: {names}")
    return method


class TransactionRecorder:
    """Service for recording income and expense transactions.

    Each recording is one atomic unit: the transaction insert, the status
    propagation of a household-scoped payment and every audit entry commit
    or roll back together.
    """

    def __init__(
        self,
        db: Database,
        audit: Optional[AuditRecorder] = None,
        propagator: Optional[StatusPropagator] = None,
        numbers: Optional[TransactionNumberGenerator] = None,
        settings: Optional[LedgerSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize transaction recorder.

        Args:
            db: Database instance
            audit: Audit recorder (created over ``db`` when omitted)
            propagator: Status propagator (created over ``db`` when omitted)
            numbers: Transaction number generator
            settings: Retry limits and school year start month
            clock: Returns the current aware timestamp (defaults to UTC now)
        """
        self.db = db
        self.audit = audit or AuditRecorder(db)
        self.propagator = propagator or StatusPropagator(db, self.audit)
        self.numbers = numbers or TransactionNumberGenerator(db)
        self.settings = settings or LedgerSettings()
        self.clock = clock or (lambda: datetime.now(UTC))
        self.categories = CategoryRegistry(db)
        self.attachments = AttachmentLinker(db, self.audit)

    def record(
        self,
        kind: CategoryKind | str,
        category_id: int,
        amount,
        principal: str,
        household_id: Optional[int] = None,
        member_id: Optional[int] = None,
        method: PaymentMethod | str = PaymentMethod.CASH,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        description: Optional[str] = None,
        vendor_name: Optional[str] = None,
        approved_by: Optional[str] = None,
        expense_date: Optional[date] = None,
        school_year: Optional[str] = None,
        recorded_at: Optional[datetime] = None,
    ) -> IncomeTransaction | ExpenseTransaction:
        """Record a transaction of either kind.

        Income requires ``household_id``; expense requires ``description``
        and ignores the household fields.
        """
        kind = CategoryKind(kind)
        if kind == CategoryKind.INCOME:
            if household_id is None:
                validate_amount(amount)
                raise ValidationError("A household is required for income transactions")
            return self.record_income(
                category_id,
                amount,
                household_id,
                principal,
                member_id=member_id,
                method=method,
                reference=reference,
                notes=notes,
                school_year=school_year,
                recorded_at=recorded_at,
            )
        if household_id is not None or member_id is not None:
            raise ValidationError("Expense transactions are not linked to a household or member")
        return self.record_expense(
            category_id,
            amount,
            description,
            principal,
            method=method,
            vendor_name=vendor_name,
            reference=reference,
            approved_by=approved_by,
            expense_date=expense_date,
            school_year=school_year,
            recorded_at=recorded_at,
        )

    def record_income(
        self,
        category_id: int,
        amount,
        household_id: int,
        principal: str,
        member_id: Optional[int] = None,
        method: PaymentMethod | str = PaymentMethod.CASH,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        school_year: Optional[str] = None,
        recorded_at: Optional[datetime] = None,
    ) -> IncomeTransaction:
        """Record money received from a household.

        A payment against a household-scoped category marks the household
        and all of its current members paid in the same unit.

        Args:
            category_id: Active income category
            amount: Positive amount
            household_id: Paying household
            principal: Identity recording the payment
            member_id: Member paid for (required for member-scoped categories,
                forbidden for household-scoped ones)
            method: Payment method
            reference: Check number, transfer reference, etc.
            notes: Free text
            school_year: ``YYYY-YYYY``; derived from ``recorded_at`` when omitted
            recorded_at: Payment timestamp (defaults to now)

        Returns:
            Stored income transaction

        Raises:
            InvalidAmount, UnknownCategory, InactiveCategory, UnknownHousehold,
            ScopeMismatch, ValidationError,
            NumberGenerationFailed, ConcurrencyConflict, StoreUnavailable
        """
        amount = validate_amount(amount)
        self._check_principal(principal)
        recorded_at = self._timestamp(recorded_at)
        school_year = self._school_year(school_year, recorded_at)

        def unit() -> tuple[IncomeTransaction, bool]:
            with self.db.atomic():
                category = self.categories.require(category_id, CategoryKind.INCOME)
                if self.db.get_household(household_id) is None:
                    raise UnknownHousehold(household_not_found(household_id))
                self._check_scope(category.name, category.scope, household_id, member_id)
                payment_method = parse_payment_method(method, INCOME_PAYMENT_METHODS)

                transaction = self._insert_numbered(
                    CategoryKind.INCOME,
                    lambda number: self.audit.with_audit(
                        "income_transaction",
                        AuditOperation.INSERT,
                        principal,
                        lambda: self.db.create_income_transaction(
                            transaction_number=number,
                            category_id=category.id,
                            household_id=household_id,
                            amount=amount,
                            payment_method=payment_method,
                            school_year=school_year,
                            recorded_by=principal,
                            recorded_at=recorded_at,
                            member_id=member_id,
                            reference_number=reference,
                            notes=notes,
                        ),
                    ),
                )
                if category.is_household_scoped:
                    self.propagator.propagate(transaction, principal)
                return transaction, category.is_household_scoped

        transaction, propagated = run_with_retry(
            self.db, unit, retries=self.settings.conflict_retries, operation="record_income"
        )
        logger.info(
            "transaction_recorded",
            extra={
                "transaction_number": transaction.transaction_number,
                "kind": "income",
                "amount": str(transaction.amount),
                "household_id": household_id,
                "member_id": member_id,
                "propagated": propagated,
            },
        )
        return transaction

    def record_expense(
        self,
        category_id: int,
        amount,
        description: str,
        principal: str,
        method: PaymentMethod | str = PaymentMethod.CASH,
        vendor_name: Optional[str] = None,
        reference: Optional[str] = None,
        approved_by: Optional[str] = None,
        expense_date: Optional[date] = None,
        school_year: Optional[str] = None,
        recorded_at: Optional[datetime] = None,
    ) -> ExpenseTransaction:
        """Record money spent by the organization.

        Spending past the category's budget ceiling is recorded anyway and
        logged as a warning.

        Raises:
            InvalidAmount, UnknownCategory, InactiveCategory, ValidationError,
            NumberGenerationFailed, ConcurrencyConflict, StoreUnavailable
        """
        amount = validate_amount(amount)
        self._check_principal(principal)
        recorded_at = self._timestamp(recorded_at)
        school_year = self._school_year(school_year, recorded_at)
        expense_date = expense_date or recorded_at.date()

        def unit() -> tuple[ExpenseTransaction, Optional[Decimal], Decimal]:
            with self.db.atomic():
                category = self.categories.require(category_id, CategoryKind.EXPENSE)
                text = (description or "").strip()
                if not text:
                    raise ValidationError("Expense description cannot be empty")
                payment_method = parse_payment_method(method, EXPENSE_PAYMENT_METHODS)

                transaction = self._insert_numbered(
                    CategoryKind.EXPENSE,
                    lambda number: self.audit.with_audit(
                        "expense_transaction",
                        AuditOperation.INSERT,
                        principal,
                        lambda: self.db.create_expense_transaction(
                            transaction_number=number,
                            category_id=category.id,
                            amount=amount,
                            description=text,
                            payment_method=payment_method,
                            expense_date=expense_date,
                            school_year=school_year,
                            recorded_by=principal,
                            recorded_at=recorded_at,
                            vendor_name=vendor_name,
                            reference_number=reference,
                            approved_by=approved_by,
                        ),
                    ),
                )
                spent = self.db.total_expenses(category.id, school_year)
                return transaction, category.budget_ceiling, spent

        transaction, ceiling, spent = run_with_retry(
            self.db, unit, retries=self.settings.conflict_retries, operation="record_expense"
        )
        logger.info(
            "transaction_recorded",
            extra={
                "transaction_number": transaction.transaction_number,
                "kind": "expense",
                "amount": str(transaction.amount),
            },
        )
        if ceiling is not None and spent > ceiling:
            logger.warning(
                "budget_exceeded",
                extra={
                    "category_id": transaction.category_id,
                    "school_year": school_year,
                    "spent": str(spent),
                    "budget_ceiling": str(ceiling),
                },
            )
        return transaction

    def update_income(
        self,
        transaction_id: int,
        principal: str,
        amount=None,
        method: PaymentMethod | str | None = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        receipt_issued: Optional[bool] = None,
    ) -> IncomeTransaction:
        """Update the editable fields of an income transaction.

        Category, household and member are fixed once recorded.

        Raises:
            UnknownTransaction: If the transaction does not exist
            InvalidAmount: If the new amount is not positive
            ValidationError: If the payment method is not accepted
        """
        self._check_principal(principal)
        changes = {}
        if amount is not None:
            changes["amount"] = validate_amount(amount)
        if method is not None:
            changes["payment_method"] = parse_payment_method(method, INCOME_PAYMENT_METHODS)
        if reference is not None:
            changes["reference_number"] = reference
        if notes is not None:
            changes["notes"] = notes
        if receipt_issued is not None:
            changes["receipt_issued"] = receipt_issued

        with self.db.atomic():
            prior = self.require_income(transaction_id)
            if not changes:
                return prior
            return self.audit.with_audit(
                "income_transaction",
                AuditOperation.UPDATE,
                principal,
                lambda: self.db.update_income_transaction(transaction_id, changes),
                prior=prior,
            )

    def update_expense(
        self,
        transaction_id: int,
        principal: str,
        amount=None,
        method: PaymentMethod | str | None = None,
        description: Optional[str] = None,
        vendor_name: Optional[str] = None,
        reference: Optional[str] = None,
        approved_by: Optional[str] = None,
    ) -> ExpenseTransaction:
        """Update the editable fields of an expense transaction.

        Raises:
            UnknownTransaction: If the transaction does not exist
            InvalidAmount: If the new amount is not positive
            ValidationError: If the payment method or description is invalid
        """
        self._check_principal(principal)
        changes = {}
        if amount is not None:
            changes["amount"] = validate_amount(amount)
        if method is not None:
            changes["payment_method"] = parse_payment_method(method, EXPENSE_PAYMENT_METHODS)
        if description is not None:
            if not description.strip():
                raise ValidationError("Expense description cannot be empty")
            changes["description"] = description.strip()
        if vendor_name is not None:
            changes["vendor_name"] = vendor_name
        if reference is not None:
            changes["reference_number"] = reference
        if approved_by is not None:
            changes["approved_by"] = approved_by

        with self.db.atomic():
            prior = self.require_expense(transaction_id)
            if not changes:
                return prior
            return self.audit.with_audit(
                "expense_transaction",
                AuditOperation.UPDATE,
                principal,
                lambda: self.db.update_expense_transaction(transaction_id, changes),
                prior=prior,
            )

    def delete_income(self, transaction_id: int, principal: str) -> None:
        """Delete an income transaction and its attachments.

        Paid status already applied to the household and members stays.

        Raises:
            UnknownTransaction: If the transaction does not exist
        """
        self._check_principal(principal)
        with self.db.atomic():
            prior = self.require_income(transaction_id)
            for attachment in self.attachments.list_for_income(transaction_id):
                self.attachments.detach(attachment.id, principal)
            self.audit.with_audit(
                "income_transaction",
                AuditOperation.DELETE,
                principal,
                lambda: self.db.delete_income_transaction(transaction_id),
                prior=prior,
            )
        logger.info("transaction_deleted", extra={"transaction_number": prior.transaction_number})

    def delete_expense(self, transaction_id: int, principal: str) -> None:
        """Delete an expense transaction and its attachments.

        Raises:
            UnknownTransaction: If the transaction does not exist
        """
        self._check_principal(principal)
        with self.db.atomic():
            prior = self.require_expense(transaction_id)
            for attachment in self.attachments.list_for_expense(transaction_id):
                self.attachments.detach(attachment.id, principal)
            self.audit.with_audit(
                "expense_transaction",
                AuditOperation.DELETE,
                principal,
                lambda: self.db.delete_expense_transaction(transaction_id),
                prior=prior,
            )
        logger.info("transaction_deleted", extra={"transaction_number": prior.transaction_number})

    def get_income(self, transaction_id: int) -> Optional[IncomeTransaction]:
        """Get income transaction by ID."""
        return self.db.get_income_transaction(transaction_id)

    def get_expense(self, transaction_id: int) -> Optional[ExpenseTransaction]:
        """Get expense transaction by ID."""
        return self.db.get_expense_transaction(transaction_id)

    def require_income(self, transaction_id: int) -> IncomeTransaction:
        transaction = self.db.get_income_transaction(transaction_id)
        if transaction is None:
            raise UnknownTransaction(transaction_not_found("income", transaction_id))
        return transaction

    def require_expense(self, transaction_id: int) -> ExpenseTransaction:
        transaction = self.db.get_expense_transaction(transaction_id)
        if transaction is None:
            raise UnknownTransaction(transaction_not_found("expense", transaction_id))
        return transaction

    def list_income(
        self,
        household_id: Optional[int] = None,
        member_id: Optional[int] = None,
        category_id: Optional[int] = None,
        school_year: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[IncomeTransaction]:
        """List income transactions with optional filters, newest first."""
        return self.db.list_income_transactions(
            household_id=household_id,
            member_id=member_id,
            category_id=category_id,
            school_year=school_year,
            start_date=start_date,
            end_date=end_date,
        )

    def list_expenses(
        self,
        category_id: Optional[int] = None,
        school_year: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[ExpenseTransaction]:
        """List expense transactions with optional filters, newest first."""
        return self.db.list_expense_transactions(
            category_id=category_id,
            school_year=school_year,
            start_date=start_date,
            end_date=end_date,
        )

    def _insert_numbered(self, kind: CategoryKind, create):
        """Allocate a number and insert, trying again with a fresh number on a clash."""
        attempts = self.settings.number_attempts
        for attempt in range(1, attempts + 1):
            number = self.numbers.next_number(kind)
            try:
                return create(number)
            except DuplicateTransactionNumber:
                logger.warning(
                    "transaction_number_collision",
                    extra={"transaction_number": number, "attempt": attempt},
                )
        raise NumberGenerationFailed(
            f"Could not allocate a unique {kind.value} transaction number after {attempts} attempts"
        )

    def _check_scope(
        self,
        category_name: str,
        scope: Optional[CategoryScope],
        household_id: int,
        member_id: Optional[int],
    ) -> None:
        if scope == CategoryScope.HOUSEHOLD:
            if member_id is not None:
                raise ScopeMismatch(member_not_allowed(category_name))
            return
        if member_id is None:
            raise ScopeMismatch(member_required(category_name))
        member = self.db.get_member(member_id)
        if member is None:
            raise ScopeMismatch(member_not_found(member_id))
        if member.household_id != household_id:
            raise ScopeMismatch(member_outside_household(member_id, household_id))

    def _school_year(self, school_year: Optional[str], recorded_at: datetime) -> str:
        if school_year is None:
            return school_year_for(recorded_at, self.settings.school_year_start_month)
        try:
            return validate_school_year(school_year)
        except ValueError as e:
            raise ValidationError(str(e)) from None

    def _timestamp(self, recorded_at: Optional[datetime]) -> datetime:
        if recorded_at is None:
            return self.clock()
        if recorded_at.tzinfo is None:
            return recorded_at.replace(tzinfo=UTC)
        return recorded_at.astimezone(UTC)

    @staticmethod
    def _check_principal(principal: str) -> None:
        if not principal or not principal.strip():
            raise ValidationError("A principal is required to record a change")
