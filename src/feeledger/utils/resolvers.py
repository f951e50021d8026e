"""Utilities for resolving names, emails and codes to IDs."""

from feeledger.database.base import Database
from feeledger.domain.entities import CategoryKind
from feeledger.domain.errors import UnknownCategory, UnknownHousehold, UnknownMember


def _as_id(value: str | int) -> int | None:
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def resolve_household(db: Database, household: str | int) -> int:
    """Resolve household ID or email to household ID.

    Raises:
        UnknownHousehold: If household is not found
    """
    household_id = _as_id(household)
    if household_id is not None:
        if db.get_household(household_id) is None:
            raise UnknownHousehold(f"Household ID {household_id} not found")
        return household_id

    found = db.get_household_by_email(str(household).strip())
    if found is None:
        raise UnknownHousehold(f"Household '{household}' not found")
    return found.id


def resolve_member(db: Database, member: str | int) -> int:
    """Resolve member ID or member code to member ID.

    Raises:
        UnknownMember: If member is not found
    """
    member_id = _as_id(member)
    if member_id is not None:
        if db.get_member(member_id) is None:
            raise UnknownMember(f"Member ID {member_id} not found")
        return member_id

    found = db.get_member_by_code(str(member).strip())
    if found is None:
        raise UnknownMember(f"Member '{member}' not found")
    return found.id


def resolve_category(db: Database, kind: CategoryKind, category: str | int) -> int:
    """Resolve category ID or name (within ``kind``) to category ID.

    Raises:
        UnknownCategory: If category is not found
    """
    category_id = _as_id(category)
    if category_id is not None:
        found = db.get_category(category_id)
        if found is None or found.kind != kind:
            raise UnknownCategory(f"{kind.value.capitalize()} category ID {category_id} not found")
        return category_id

    found = db.get_category_by_name(kind, str(category).strip())
    if found is None:
        raise UnknownCategory(f"{kind.value.capitalize()} category '{category}' not found")
    return found.id
