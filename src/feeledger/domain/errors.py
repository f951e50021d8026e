"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ConfigurationError(DomainError):
    """Settings could not be parsed or are out of range."""


class InvalidAmount(ValidationError):
    """Transaction amount is not a positive number."""


class ScopeMismatch(ValidationError):
    """Member reference does not fit the category scope."""


class InvalidAssociation(ValidationError):
    """Attachment is not linked to exactly one transaction."""


class UnknownCategory(NotFoundError):
    """Category does not exist for the requested kind."""


class InactiveCategory(UnknownCategory):
    """Category exists but has been deactivated."""


class UnknownHousehold(NotFoundError):
    """Household does not exist."""


class UnknownMember(NotFoundError):
    """Member does not exist."""


class UnknownTransaction(NotFoundError):
    """Income or expense transaction does not exist."""


class DuplicateTransactionNumber(ConflictError):
    """A transaction number is already taken."""


class NumberGenerationFailed(ConflictError):
    """No unique transaction number could be allocated."""


class ConcurrencyConflict(ConflictError):
    """A row changed underneath the current unit (version mismatch)."""


class ImmutabilityViolation(DomainError):
    """An attempt was made to change or remove an audit entry."""


class StoreUnavailable(DomainError):
    """The ledger store failed for a reason unrelated to the data."""


def invalid_amount(amount) -> str:
    """Return message for a non-positive amount."""
    return f"Amount must be greater than zero, got {amount}"


def amount_too_large(label: str, amount, limit) -> str:
    """Return message for an amount the ledger columns cannot hold."""
    return f"{label} cannot exceed {limit}, got {amount}"


def category_not_found(category_id: int, kind: str | None = None) -> str:
    """Return message for missing category by ID."""
    if kind is None:
        return f"Category {category_id} not found"
    return f"{kind.capitalize()} category {category_id} not found"


def category_inactive(name: str) -> str:
    """Return message for a deactivated category."""
    return f"Category '{name}' is inactive"


def household_not_found(household_id: int) -> str:
    """Return message for missing household."""
    return f"Household {household_id} not found"


def member_not_found(member_id: int) -> str:
    """Return message for missing member."""
    return f"Member {member_id} not found"


def transaction_not_found(kind: str, transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"{kind.capitalize()} transaction {transaction_id} not found"


def member_required(category_name: str) -> str:
    """Return message for a member-scoped payment without a member."""
    return f"Category '{category_name}' is billed per member; a member is required"


def member_not_allowed(category_name: str) -> str:
    """Return message for a household-scoped payment naming a member."""
    return f"Category '{category_name}' is billed per household; a member must not be given"


def member_outside_household(member_id: int, household_id: int) -> str:
    """Return message for a member linked to another household."""
    return f"Member {member_id} does not belong to household {household_id}"


def attachment_owner_required() -> str:
    """Return message for an attachment without exactly one owner."""
    return "An attachment must reference exactly one of an income or an expense transaction"


def household_delete_blocked(household_id: int, member_count: int, payment_count: int) -> str:
    """Return message when a household still has members or payments."""
    parts = []
    if member_count > 0:
        parts.append(f"{member_count} member{'s' if member_count != 1 else ''}")
    if payment_count > 0:
        parts.append(f"{payment_count} payment{'s' if payment_count != 1 else ''}")
    return (
        f"Cannot delete household {household_id}: it has {', '.join(parts)}. "
        "Please remove them first."
    )
