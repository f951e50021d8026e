"""Membership service: households, members and groups."""

import random
from datetime import date
from typing import Optional

from feeledger.database.base import Database
from feeledger.domain.audit import AuditRecorder
from feeledger.domain.entities import AuditOperation, Group, Household, Member
from feeledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    UnknownHousehold,
    UnknownMember,
    ValidationError,
    household_delete_blocked,
    household_not_found,
    member_not_found,
)
from feeledger.logging_config import get_logger
from feeledger.utils.school_year import validate_school_year

logger = get_logger(__name__)


def _required(label: str, value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} cannot be empty")
    return value


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class MembershipService:
    """Service for managing households, their members and member groups.

    Household and member mutations are audited. Paid status is never
    writable here; it only changes through a household-scoped payment.
    """

    def __init__(self, db: Database, audit: AuditRecorder):
        """Initialize membership service.

        Args:
            db: Database instance
            audit: Audit recorder
        """
        self.db = db
        self.audit = audit

    def register_household(
        self,
        first_name: str,
        last_name: str,
        principal: str,
        middle_name: Optional[str] = None,
        contact_number: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Household:
        """Register a household.

        Raises:
            ValidationError: If a name is empty
            ConflictError: If the email is already registered
        """
        first_name = _required("First name", first_name)
        last_name = _required("Last name", last_name)
        email = _optional(email)

        with self.db.atomic():
            if email is not None and self.db.get_household_by_email(email) is not None:
                raise ConflictError(f"A household with email '{email}' already exists")
            household = self.audit.with_audit(
                "household",
                AuditOperation.INSERT,
                principal,
                lambda: self.db.create_household(
                    first_name=first_name,
                    last_name=last_name,
                    middle_name=_optional(middle_name),
                    contact_number=_optional(contact_number),
                    email=email,
                    address=_optional(address),
                ),
            )
        logger.info("household_registered", extra={"household_id": household.id})
        return household

    def get_household(self, household_id: int) -> Optional[Household]:
        """Get household by ID."""
        return self.db.get_household(household_id)

    def require_household(self, household_id: int) -> Household:
        """Get household by ID or raise UnknownHousehold."""
        household = self.db.get_household(household_id)
        if household is None:
            raise UnknownHousehold(household_not_found(household_id))
        return household

    def list_households(self, paid: Optional[bool] = None) -> list[Household]:
        """List households, optionally by paid status."""
        return self.db.list_households(paid=paid)

    def update_household(
        self,
        household_id: int,
        principal: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        middle_name: Optional[str] = None,
        contact_number: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Household:
        """Update household contact fields.

        Raises:
            UnknownHousehold: If the household does not exist
            ConflictError: If the new email belongs to another household
        """
        if first_name is not None:
            first_name = _required("First name", first_name)
        if last_name is not None:
            last_name = _required("Last name", last_name)

        with self.db.atomic():
            prior = self.require_household(household_id)
            if email is not None:
                email = email.strip()
                owner = self.db.get_household_by_email(email)
                if owner is not None and owner.id != household_id:
                    raise ConflictError(f"A household with email '{email}' already exists")
            return self.audit.with_audit(
                "household",
                AuditOperation.UPDATE,
                principal,
                lambda: self.db.update_household(
                    household_id,
                    first_name=first_name,
                    last_name=last_name,
                    middle_name=middle_name,
                    contact_number=contact_number,
                    email=email,
                    address=address,
                ),
                prior=prior,
            )

    def delete_household(self, household_id: int, principal: str) -> None:
        """Delete a household with no members and no payments.

        Raises:
            UnknownHousehold: If the household does not exist
            DependencyError: If members or payments still reference it
        """
        with self.db.atomic():
            prior = self.require_household(household_id)
            member_count = self.db.count_household_members(household_id)
            payment_count = self.db.count_household_payments(household_id)
            if member_count or payment_count:
                raise DependencyError(household_delete_blocked(household_id, member_count, payment_count))
            self.audit.with_audit(
                "household",
                AuditOperation.DELETE,
                principal,
                lambda: self.db.delete_household(household_id),
                prior=prior,
            )
        logger.info("household_deleted", extra={"household_id": household_id})

    def enroll_member(
        self,
        household_id: int,
        member_code: str,
        first_name: str,
        last_name: str,
        principal: str,
        group_id: Optional[int] = None,
        middle_name: Optional[str] = None,
    ) -> Member:
        """Enroll a member in a household.

        New members start unpaid even when their household has already
        paid; earlier payments are never applied retroactively.

        Raises:
            UnknownHousehold: If the household does not exist
            NotFoundError: If the group does not exist
            ConflictError: If the member code is taken
        """
        member_code = _required("Member code", member_code)
        first_name = _required("First name", first_name)
        last_name = _required("Last name", last_name)

        with self.db.atomic():
            self.require_household(household_id)
            if group_id is not None and self.db.get_group(group_id) is None:
                raise NotFoundError(f"Group {group_id} not found")
            if self.db.get_member_by_code(member_code) is not None:
                raise ConflictError(f"Member code '{member_code}' already exists")
            member = self.audit.with_audit(
                "member",
                AuditOperation.INSERT,
                principal,
                lambda: self.db.create_member(
                    household_id=household_id,
                    member_code=member_code,
                    first_name=first_name,
                    last_name=last_name,
                    middle_name=_optional(middle_name),
                    group_id=group_id,
                ),
            )
        logger.info("member_enrolled", extra={"member_id": member.id, "household_id": household_id})
        return member

    def get_member(self, member_id: int) -> Optional[Member]:
        """Get member by ID."""
        return self.db.get_member(member_id)

    def require_member(self, member_id: int) -> Member:
        """Get member by ID or raise UnknownMember."""
        member = self.db.get_member(member_id)
        if member is None:
            raise UnknownMember(member_not_found(member_id))
        return member

    def get_member_by_code(self, member_code: str) -> Optional[Member]:
        """Get member by member code."""
        return self.db.get_member_by_code(member_code)

    def list_members(
        self,
        household_id: Optional[int] = None,
        group_id: Optional[int] = None,
        paid: Optional[bool] = None,
    ) -> list[Member]:
        """List members with optional filters."""
        return self.db.list_members(household_id=household_id, group_id=group_id, paid=paid)

    def update_member(
        self,
        member_id: int,
        principal: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        middle_name: Optional[str] = None,
        group_id: Optional[int] = None,
        clear_group: bool = False,
    ) -> Member:
        """Update member names or group.

        Raises:
            UnknownMember: If the member does not exist
            NotFoundError: If the group does not exist
        """
        if first_name is not None:
            first_name = _required("First name", first_name)
        if last_name is not None:
            last_name = _required("Last name", last_name)

        with self.db.atomic():
            prior = self.require_member(member_id)
            if group_id is not None and self.db.get_group(group_id) is None:
                raise NotFoundError(f"Group {group_id} not found")
            return self.audit.with_audit(
                "member",
                AuditOperation.UPDATE,
                principal,
                lambda: self.db.update_member(
                    member_id,
                    first_name=first_name,
                    last_name=last_name,
                    middle_name=middle_name,
                    group_id=group_id,
                    clear_group=clear_group,
                ),
                prior=prior,
            )

    def delete_member(self, member_id: int, principal: str) -> None:
        """Delete a member with no payments of their own.

        Raises:
            UnknownMember: If the member does not exist
            DependencyError: If income transactions name the member
        """
        with self.db.atomic():
            prior = self.require_member(member_id)
            payments = self.db.list_income_transactions(member_id=member_id)
            if payments:
                raise DependencyError(
                    f"Cannot delete member {member_id}: it has {len(payments)} "
                    f"payment{'s' if len(payments) != 1 else ''}. Please remove them first."
                )
            self.audit.with_audit(
                "member",
                AuditOperation.DELETE,
                principal,
                lambda: self.db.delete_member(member_id),
                prior=prior,
            )
        logger.info("member_deleted", extra={"member_id": member_id})

    def create_group(self, name: str, school_year: str, grade_level: Optional[int] = None) -> Group:
        """Create a member group (section) for a school year.

        Raises:
            ValidationError: If the name or school year is invalid
            ConflictError: If the group already exists for that school year
        """
        name = _required("Group name", name)
        try:
            school_year = validate_school_year(school_year)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        if grade_level is not None and grade_level < 0:
            raise ValidationError("Grade level cannot be negative")

        with self.db.atomic():
            for group in self.db.list_groups(school_year=school_year):
                if group.name == name:
                    raise ConflictError(f"Group '{name}' already exists for {school_year}")
            return self.db.create_group(name=name, school_year=school_year, grade_level=grade_level)

    def get_group(self, group_id: int) -> Optional[Group]:
        """Get group by ID."""
        return self.db.get_group(group_id)

    def list_groups(self, school_year: Optional[str] = None) -> list[Group]:
        """List groups, optionally for one school year."""
        return self.db.list_groups(school_year=school_year)

    def generate_member_code(self, year: Optional[int] = None, attempts: int = 20) -> str:
        """Generate an unused ``STU-<year>-<4 digits>`` member code.

        Raises:
            ConflictError: If no free code was found
        """
        year = year or date.today().year
        for _ in range(attempts):
            code = f"STU-{year}-{random.randint(0, 9999):04d}"
            if self.db.get_member_by_code(code) is None:
                return code
        raise ConflictError(f"Could not find a free member code for {year}")
