"""Attach receipt command."""

import mimetypes

import click

from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.services import attachment_linker
from feeledger.domain.entities import AttachmentFile
from feeledger.domain.errors import DomainError


@click.command("attach")
@click.argument("file_path")
@click.option("--income", "income_id", type=int, help="Income transaction ID")
@click.option("--expense", "expense_id", type=int, help="Expense transaction ID")
@click.option("--name", "file_name", help="Display file name (defaults to the last path segment)")
@click.option("--size", "file_size", type=int, help="File size in bytes")
@click.option("--mime-type", help="MIME type (guessed from the name if omitted)")
@click.pass_context
def attach_receipt(
    ctx,
    file_path: str,
    income_id: int | None,
    expense_id: int | None,
    file_name: str | None,
    file_size: int | None,
    mime_type: str | None,
):
    """Attach a stored file to exactly one transaction.

    FILE_PATH is the reference returned by the file store; it is recorded
    as given.

    Examples:
        feeledger attach receipts/2024/inc-000001.jpg --income 1
    """
    file_name = file_name or file_path.rstrip("/").rsplit("/", 1)[-1]
    attachment_file = AttachmentFile(
        file_name=file_name,
        file_path=file_path,
        file_size=file_size,
        mime_type=mime_type or mimetypes.guess_type(file_name)[0],
    )
    try:
        attachment = attachment_linker(ctx).attach(
            attachment_file,
            ctx.obj["principal"],
            income_transaction_id=income_id,
            expense_transaction_id=expense_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    owner = f"income {income_id}" if income_id is not None else f"expense {expense_id}"
    click.echo(f"Attached '{attachment.file_name}' to {owner} (ID: {attachment.id})")


def register_commands(cli):
    """Register attach command with main CLI."""
    cli.add_command(attach_receipt)
