"""Audit recorder: append-only history of household, member, transaction and attachment changes."""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime, UTC
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from feeledger.database.base import Database
from feeledger.domain.entities import AuditOperation, AuditPage
from feeledger.domain.errors import ValidationError
from feeledger.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

WATCHED_ENTITIES = frozenset(
    {"household", "member", "income_transaction", "expense_transaction", "attachment"}
)


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_value(item) for item in value]
    return value


def snapshot(entity: Any) -> Optional[dict[str, Any]]:
    """Return a JSON-safe dict of a domain entity (or pass a dict through)."""
    if entity is None:
        return None
    if is_dataclass(entity):
        return _json_value(asdict(entity))
    if isinstance(entity, dict):
        return _json_value(entity)
    raise TypeError(f"Cannot snapshot {type(entity).__name__}")


class AuditRecorder:
    """Appends audit entries in the same atomic unit as the mutation they describe."""

    def __init__(self, db: Database, clock: Callable[[], datetime] | None = None):
        """Initialize audit recorder.

        Args:
            db: Database instance
            clock: Returns the current aware timestamp (defaults to UTC now)
        """
        self.db = db
        self.clock = clock or (lambda: datetime.now(UTC))

    def with_audit(
        self,
        entity_name: str,
        operation: AuditOperation | str,
        principal: str,
        mutation: Callable[[], T],
        prior: Any = None,
        new: Any = None,
    ) -> T:
        """Run a mutation and record it atomically.

        The new snapshot is taken from ``new`` when given, otherwise from the
        entity the mutation returns. Deletions carry no new snapshot.

        Args:
            entity_name: One of ``WATCHED_ENTITIES``
            operation: insert, update or delete
            principal: Identity responsible for the change
            mutation: Callable performing the write and returning the entity
            prior: Entity state before the change (required for update and delete)
            new: Explicit entity state after the change

        Returns:
            Whatever ``mutation`` returned

        Raises:
            ValidationError: If the entity is not watched, the principal is
                blank, or a required snapshot is missing
        """
        operation = AuditOperation(operation)
        if entity_name not in WATCHED_ENTITIES:
            raise ValidationError(f"Entity '{entity_name}' is not audited")
        if not principal or not principal.strip():
            raise ValidationError("A principal is required to record a change")
        if operation != AuditOperation.INSERT and prior is None:
            raise ValidationError(f"A prior snapshot is required for {operation.value}")

        with self.db.atomic():
            result = mutation()
            if operation == AuditOperation.DELETE:
                after = None
                entity_id = prior.id
            else:
                after = new if new is not None else result
                entity_id = after.id
            entry = self.db.append_audit_entry(
                entity_name=entity_name,
                entity_id=entity_id,
                operation=operation.value,
                prior=snapshot(prior),
                new=snapshot(after),
                principal=principal,
                recorded_at=self.clock(),
            )
        logger.debug(
            "audit_entry_appended",
            extra={
                "entity_name": entity_name,
                "entity_id": entity_id,
                "operation": operation.value,
                "seq": entry.seq,
                "principal": principal,
            },
        )
        return result

    def list_trail(
        self, entity_name: str, entity_id: int, offset: int = 0, limit: Optional[int] = None
    ) -> AuditPage:
        """List the audit trail of one entity, oldest first.

        Args:
            entity_name: One of ``WATCHED_ENTITIES``
            entity_id: Entity ID
            offset: Number of entries to skip
            limit: Page size, or None for everything after ``offset``

        Returns:
            AuditPage whose ``next_offset`` is None on the last page
        """
        if entity_name not in WATCHED_ENTITIES:
            raise ValidationError(f"Entity '{entity_name}' is not audited")
        if offset < 0:
            raise ValidationError("Offset cannot be negative")
        if limit is not None and limit < 1:
            raise ValidationError("Limit must be at least 1")

        with self.db.atomic():
            entries = self.db.list_audit_entries(entity_name, entity_id, offset=offset, limit=limit)
            total = self.db.count_audit_entries(entity_name, entity_id)

        consumed = offset + len(entries)
        next_offset = consumed if limit is not None and consumed < total else None
        return AuditPage(entries=tuple(entries), next_offset=next_offset)
