"""Payment status queries."""

from feeledger.database.base import Database
from feeledger.domain.entities import PaymentStatus
from feeledger.domain.errors import (
    UnknownHousehold,
    UnknownMember,
    household_not_found,
    member_not_found,
)


class PaymentStatusService:
    """Reports whether a household or member has paid."""

    def __init__(self, db: Database):
        self.db = db

    def household_status(self, household_id: int) -> PaymentStatus:
        """Get the paid flag and timestamp of a household.

        Raises:
            UnknownHousehold: If the household does not exist
        """
        household = self.db.get_household(household_id)
        if household is None:
            raise UnknownHousehold(household_not_found(household_id))
        return PaymentStatus("household", household.id, household.paid, household.paid_at)

    def member_status(self, member_id: int) -> PaymentStatus:
        """Get the paid flag and timestamp of a member.

        Raises:
            UnknownMember: If the member does not exist
        """
        member = self.db.get_member(member_id)
        if member is None:
            raise UnknownMember(member_not_found(member_id))
        return PaymentStatus("member", member.id, member.paid, member.paid_at)
