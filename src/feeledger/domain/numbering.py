"""Transaction number allocation."""

from feeledger.database.base import Database
from feeledger.domain.entities import CategoryKind

TRANSACTION_PREFIXES = {CategoryKind.INCOME: "INC", CategoryKind.EXPENSE: "EXP"}


class TransactionNumberGenerator:
    """Allocates ``INC-000001`` / ``EXP-000001`` style numbers from store counters."""

    def __init__(self, db: Database, width: int = 6):
        self.db = db
        self.width = width

    def next_number(self, kind: CategoryKind) -> str:
        """Allocate the next number for a transaction kind inside the current unit."""
        kind = CategoryKind(kind)
        value = self.db.next_sequence_value(f"{kind.value}_transaction_number")
        return f"{TRANSACTION_PREFIXES[kind]}-{value:0{self.width}d}"
