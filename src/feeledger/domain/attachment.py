"""Attachment linker: receipts and supporting documents for transactions."""

from typing import Optional

from feeledger.database.base import Database
from feeledger.domain.audit import AuditRecorder
from feeledger.domain.entities import Attachment, AttachmentFile, AuditOperation
from feeledger.domain.errors import (
    InvalidAssociation,
    NotFoundError,
    UnknownTransaction,
    ValidationError,
    attachment_owner_required,
    transaction_not_found,
)
from feeledger.logging_config import get_logger

logger = get_logger(__name__)


class AttachmentLinker:
    """Links stored files to exactly one income or expense transaction.

    The file itself lives in an external blob store; only its reference and
    metadata are kept here.
    """

    def __init__(self, db: Database, audit: AuditRecorder):
        """Initialize attachment linker.

        Args:
            db: Database instance
            audit: Audit recorder
        """
        self.db = db
        self.audit = audit

    def attach(
        self,
        file: AttachmentFile,
        principal: str,
        income_transaction_id: Optional[int] = None,
        expense_transaction_id: Optional[int] = None,
    ) -> Attachment:
        """Attach a file to one transaction.

        Args:
            file: Blob store reference and metadata
            principal: Identity recorded as uploader and on the audit entry
            income_transaction_id: Owning income transaction
            expense_transaction_id: Owning expense transaction

        Returns:
            Created attachment

        Raises:
            InvalidAssociation: Unless exactly one transaction ID is given
            UnknownTransaction: If the transaction does not exist
            ValidationError: If the file name or path is empty
        """
        if (income_transaction_id is None) == (expense_transaction_id is None):
            raise InvalidAssociation(attachment_owner_required())
        if not file.file_name or not file.file_name.strip():
            raise ValidationError("File name cannot be empty")
        if not file.file_path or not file.file_path.strip():
            raise ValidationError("File path cannot be empty")
        if file.file_size is not None and file.file_size < 0:
            raise ValidationError("File size cannot be negative")

        with self.db.atomic():
            if income_transaction_id is not None:
                if self.db.get_income_transaction(income_transaction_id) is None:
                    raise UnknownTransaction(transaction_not_found("income", income_transaction_id))
            elif self.db.get_expense_transaction(expense_transaction_id) is None:
                raise UnknownTransaction(transaction_not_found("expense", expense_transaction_id))

            attachment = self.audit.with_audit(
                "attachment",
                AuditOperation.INSERT,
                principal,
                lambda: self.db.create_attachment(
                    file_name=file.file_name.strip(),
                    file_path=file.file_path,
                    uploaded_by=principal,
                    income_transaction_id=income_transaction_id,
                    expense_transaction_id=expense_transaction_id,
                    file_size=file.file_size,
                    mime_type=file.mime_type,
                ),
            )
        logger.info(
            "attachment_linked",
            extra={
                "attachment_id": attachment.id,
                "income_transaction_id": income_transaction_id,
                "expense_transaction_id": expense_transaction_id,
            },
        )
        return attachment

    def detach(self, attachment_id: int, principal: str) -> None:
        """Remove an attachment record (the blob itself is left alone).

        Raises:
            NotFoundError: If the attachment does not exist
        """
        with self.db.atomic():
            prior = self.db.get_attachment(attachment_id)
            if prior is None:
                raise NotFoundError(f"Attachment {attachment_id} not found")
            self.audit.with_audit(
                "attachment",
                AuditOperation.DELETE,
                principal,
                lambda: self.db.delete_attachment(attachment_id),
                prior=prior,
            )

    def get(self, attachment_id: int) -> Optional[Attachment]:
        """Get attachment by ID."""
        return self.db.get_attachment(attachment_id)

    def list_for_income(self, transaction_id: int) -> list[Attachment]:
        """List attachments of an income transaction."""
        return self.db.list_attachments(income_transaction_id=transaction_id)

    def list_for_expense(self, transaction_id: int) -> list[Attachment]:
        """List attachments of an expense transaction."""
        return self.db.list_attachments(expense_transaction_id=transaction_id)
