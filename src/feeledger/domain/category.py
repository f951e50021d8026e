"""Category registry: income and expense categories."""

from decimal import Decimal, InvalidOperation
from typing import Optional

from feeledger.database.base import Database
from feeledger.domain.entities import (
    MAX_AMOUNT,
    MAX_BUDGET_CEILING,
    Category,
    CategoryKind,
    CategoryScope,
)
from feeledger.domain.errors import (
    ConflictError,
    DependencyError,
    InactiveCategory,
    UnknownCategory,
    ValidationError,
    amount_too_large,
    category_inactive,
    category_not_found,
)
from feeledger.logging_config import get_logger

logger = get_logger(__name__)

# (kind, name, scope, default amount, budget ceiling, description)
DEFAULT_CATEGORIES = [
    (CategoryKind.INCOME, "PTA Contribution Fee", CategoryScope.HOUSEHOLD, Decimal("250.00"), None,
     "Annual PTA contribution, paid once per household"),
    (CategoryKind.INCOME, "SPG Fee", CategoryScope.MEMBER, Decimal("50.00"), None,
     "Supreme Pupil Government fee, paid per student"),
    (CategoryKind.INCOME, "School Supplies", CategoryScope.MEMBER, Decimal("100.00"), None,
     "Shared school supplies, paid per student"),
    (CategoryKind.INCOME, "Field Trip", CategoryScope.MEMBER, Decimal("200.00"), None,
     "Field trip fee, paid per student"),
    (CategoryKind.INCOME, "Special Projects", CategoryScope.MEMBER, Decimal("150.00"), None,
     "Special project contribution, paid per student"),
    (CategoryKind.EXPENSE, "Security Guards", None, None, Decimal("50000.00"), "Security guard services"),
    (CategoryKind.EXPENSE, "Snacks/Refreshments", None, None, Decimal("20000.00"),
     "Snacks and refreshments for meetings and events"),
    (CategoryKind.EXPENSE, "School Supplies", None, None, Decimal("30000.00"), "Purchased school supplies"),
    (CategoryKind.EXPENSE, "Maintenance", None, None, Decimal("40000.00"), "Facility repairs and maintenance"),
    (CategoryKind.EXPENSE, "Events/Activities", None, None, Decimal("25000.00"), "School events and activities"),
    (CategoryKind.EXPENSE, "Utilities", None, None, Decimal("15000.00"), "Electricity, water and internet"),
]


def _check_non_negative(label: str, value, limit: Decimal) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        value = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{label} must be a number, got {value}") from None
    if not value.is_finite() or value < 0:
        raise ValidationError(f"{label} must be a non-negative number, got {value}")
    if value > limit:
        raise ValidationError(amount_too_large(label, value, limit))
    value = value.quantize(Decimal("0.01"))
    if value > limit:
        raise ValidationError(amount_too_large(label, value, limit))
    return value


class CategoryRegistry:
    """Service for managing income and expense categories."""

    def __init__(self, db: Database):
        """Initialize category registry.

        Args:
            db: Database instance
        """
        self.db = db

    def create(
        self,
        kind: CategoryKind | str,
        name: str,
        scope: CategoryScope | str | None = None,
        default_amount: Optional[Decimal] = None,
        budget_ceiling: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> Category:
        """Create a category.

        Args:
            kind: income or expense
            name: Category name, unique within its kind
            scope: household or member (income only, required there)
            default_amount: Suggested fee amount
            budget_ceiling: Spending ceiling per school year (expense only)
            description: Optional description

        Returns:
            Created category

        Raises:
            ValidationError: If the scope or ceiling does not fit the kind
            ConflictError: If the name is taken within the kind
        """
        kind = CategoryKind(kind)
        scope = CategoryScope(scope) if scope is not None else None
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        if kind == CategoryKind.INCOME and scope is None:
            raise ValidationError("Income categories require a scope (household or member)")
        if kind == CategoryKind.EXPENSE and scope is not None:
            raise ValidationError("Expense categories do not take a scope")
        if kind == CategoryKind.INCOME and budget_ceiling is not None:
            raise ValidationError("Only expense categories carry a budget ceiling")
        default_amount = _check_non_negative("Default amount", default_amount, MAX_AMOUNT)
        budget_ceiling = _check_non_negative("Budget ceiling", budget_ceiling, MAX_BUDGET_CEILING)

        with self.db.atomic():
            if self.db.get_category_by_name(kind, name) is not None:
                raise ConflictError(f"{kind.value.capitalize()} category '{name}' already exists")
            category = self.db.create_category(
                kind=kind,
                name=name,
                scope=scope,
                default_amount=default_amount,
                budget_ceiling=budget_ceiling,
                description=description,
            )
        logger.info("category_created", extra={"category_id": category.id, "kind": kind.value, "name": name})
        return category

    def update(
        self,
        category_id: int,
        name: Optional[str] = None,
        scope: CategoryScope | str | None = None,
        default_amount: Optional[Decimal] = None,
        budget_ceiling: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> Category:
        """Update a category.

        Description, default amount and budget ceiling are always editable;
        name and scope only while no transaction references the category.

        Raises:
            UnknownCategory: If the category does not exist
            DependencyError: If name or scope changes on a referenced category
        """
        with self.db.atomic():
            category = self.db.get_category(category_id)
            if category is None:
                raise UnknownCategory(category_not_found(category_id))

            changes = {}
            if name is not None and name.strip() != category.name:
                name = name.strip()
                if not name:
                    raise ValidationError("Category name cannot be empty")
                clash = self.db.get_category_by_name(category.kind, name)
                if clash is not None and clash.id != category.id:
                    raise ConflictError(f"{category.kind.value.capitalize()} category '{name}' already exists")
                changes["name"] = name
            if scope is not None:
                scope = CategoryScope(scope)
                if category.kind == CategoryKind.EXPENSE:
                    raise ValidationError("Expense categories do not take a scope")
                if scope != category.scope:
                    changes["scope"] = scope
            if ("name" in changes or "scope" in changes) and self.db.count_category_references(category_id) > 0:
                raise DependencyError(
                    f"Category '{category.name}' is referenced by transactions; "
                    "its name and scope can no longer change"
                )
            if default_amount is not None:
                changes["default_amount"] = _check_non_negative("Default amount", default_amount, MAX_AMOUNT)
            if budget_ceiling is not None:
                if category.kind == CategoryKind.INCOME:
                    raise ValidationError("Only expense categories carry a budget ceiling")
                changes["budget_ceiling"] = _check_non_negative("Budget ceiling", budget_ceiling, MAX_BUDGET_CEILING)
            if description is not None:
                changes["description"] = description

            if not changes:
                return category
            return self.db.update_category(category_id, changes)

    def deactivate(self, category_id: int) -> Category:
        """Deactivate a category; existing transactions keep referencing it."""
        return self._set_active(category_id, False)

    def reactivate(self, category_id: int) -> Category:
        """Reactivate a previously deactivated category."""
        return self._set_active(category_id, True)

    def _set_active(self, category_id: int, active: bool) -> Category:
        with self.db.atomic():
            category = self.db.get_category(category_id)
            if category is None:
                raise UnknownCategory(category_not_found(category_id))
            if category.is_active == active:
                return category
            updated = self.db.update_category(category_id, {"is_active": active})
        logger.info("category_active_changed", extra={"category_id": category_id, "is_active": active})
        return updated

    def get(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def get_by_name(self, kind: CategoryKind | str, name: str) -> Optional[Category]:
        """Get category by kind and name."""
        return self.db.get_category_by_name(CategoryKind(kind), name)

    def require(self, category_id: int, kind: CategoryKind | str) -> Category:
        """Return an active category of the given kind.

        A category of the other kind counts as unknown.

        Raises:
            UnknownCategory: If it does not exist for ``kind``
            InactiveCategory: If it has been deactivated
        """
        kind = CategoryKind(kind)
        category = self.db.get_category(category_id)
        if category is None or category.kind != kind:
            raise UnknownCategory(category_not_found(category_id, kind.value))
        if not category.is_active:
            raise InactiveCategory(category_inactive(category.name))
        return category

    def install_defaults(self) -> list[Category]:
        """Create the default categories that do not exist yet.

        Returns:
            The categories created by this call
        """
        created = []
        with self.db.atomic():
            for kind, name, scope, default_amount, budget_ceiling, description in DEFAULT_CATEGORIES:
                if self.db.get_category_by_name(kind, name) is not None:
                    continue
                created.append(
                    self.create(
                        kind,
                        name,
                        scope=scope,
                        default_amount=default_amount,
                        budget_ceiling=budget_ceiling,
                        description=description,
                    )
                )
        return created

    def list(self, kind: CategoryKind | str | None = None, include_inactive: bool = False) -> list[Category]:
        """List categories, active ones only unless asked otherwise."""
        kind = CategoryKind(kind) if kind is not None else None
        return self.db.list_categories(kind=kind, include_inactive=include_inactive)
