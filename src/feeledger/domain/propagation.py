"""Status propagator: marks a household and its members paid after a household-scoped payment."""

from datetime import datetime
from typing import Optional

from feeledger.database.base import Database
from feeledger.domain.audit import AuditRecorder
from feeledger.domain.entities import AuditOperation, IncomeTransaction, Member, PropagationResult
from feeledger.domain.errors import UnknownHousehold, household_not_found
from feeledger.logging_config import get_logger

logger = get_logger(__name__)


def _needs_update(paid: bool, paid_at: Optional[datetime], moment: datetime) -> bool:
    return not paid or paid_at is None or paid_at < moment


def _latest(paid_at: Optional[datetime], moment: datetime) -> datetime:
    if paid_at is None:
        return moment
    return max(paid_at, moment)


class StatusPropagator:
    """Applies the paid status of a household-scoped payment."""

    def __init__(self, db: Database, audit: AuditRecorder):
        """Initialize status propagator.

        Args:
            db: Database instance
            audit: Audit recorder used for every row changed
        """
        self.db = db
        self.audit = audit

    def propagate(self, transaction: IncomeTransaction, principal: str) -> PropagationResult:
        """Mark the payer household and its current members paid.

        Runs inside the caller's atomic unit; both the household row and the
        member rows are locked before they are read. ``paid_at`` only ever
        moves forward, and rows that would not change are left untouched.

        Args:
            transaction: Stored income transaction against a household-scoped category
            principal: Identity recorded on the audit entries

        Returns:
            PropagationResult naming the rows changed

        Raises:
            UnknownHousehold: If the household no longer exists
        """
        moment = transaction.recorded_at
        with self.db.atomic():
            household = self.db.lock_household(transaction.household_id)
            if household is None:
                raise UnknownHousehold(household_not_found(transaction.household_id))

            household_updated = False
            if _needs_update(household.paid, household.paid_at, moment):
                paid_at = _latest(household.paid_at, moment)
                self.audit.with_audit(
                    "household",
                    AuditOperation.UPDATE,
                    principal,
                    lambda: self.db.mark_household_paid(household.id, paid_at),
                    prior=household,
                )
                household_updated = True

            updated_members = []
            for member in self.db.lock_members_of_household(household.id):
                if _needs_update(member.paid, member.paid_at, moment):
                    self._mark_member_paid(member, _latest(member.paid_at, moment), principal)
                    updated_members.append(member.id)

        logger.info(
            "propagation_applied",
            extra={
                "transaction_number": transaction.transaction_number,
                "household_id": household.id,
                "household_updated": household_updated,
                "members_updated": len(updated_members),
            },
        )
        return PropagationResult(
            household_id=household.id,
            household_updated=household_updated,
            member_ids=tuple(updated_members),
        )

    def _mark_member_paid(self, member: Member, paid_at: datetime, principal: str) -> None:
        self.audit.with_audit(
            "member",
            AuditOperation.UPDATE,
            principal,
            lambda: self.db.mark_member_paid(member.id, paid_at),
            prior=member,
        )
