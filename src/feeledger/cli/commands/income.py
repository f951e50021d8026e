"""Income transaction commands."""

import click

from feeledger.cli.date_filters import resolve_cli_date_range
from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import income_line
from feeledger.cli.resolution import (
    resolve_category_or_exit,
    resolve_household_or_exit,
    resolve_member_or_exit,
)
from feeledger.cli.services import transaction_recorder
from feeledger.domain.category import CategoryRegistry
from feeledger.domain.entities import CategoryKind, PaymentMethod
from feeledger.domain.errors import DomainError
from feeledger.utils.amount_parser import format_amount, parse_amount
from feeledger.utils.date_parser import PERIODS, parse_timestamp

METHOD_CHOICE = click.Choice([m.value for m in PaymentMethod], case_sensitive=False)


@click.group()
def income_group():
    """Record and manage income (payments received)."""
    pass


@income_group.command("record")
@click.option("--household", required=True, help="Household ID or email")
@click.option("--category", required=True, help="Income category ID or name")
@click.option("--amount", help="Amount (defaults to the category's default amount)")
@click.option("--member", help="Member ID or code (required for per-member categories)")
@click.option("--method", type=METHOD_CHOICE, default=PaymentMethod.CASH.value, show_default=True, help="Payment method")
@click.option("--reference", help="Reference number (check number, transfer reference)")
@click.option("--notes", help="Notes")
@click.option("--school-year", help="School year (e.g., 2024-2025); derived from the payment time if omitted")
@click.option("--at", "recorded_at", help="Payment timestamp (ISO 8601, UTC if no offset); defaults to now")
@click.pass_context
def record_income(
    ctx,
    household: str,
    category: str,
    amount: str | None,
    member: str | None,
    method: str,
    reference: str | None,
    notes: str | None,
    school_year: str | None,
    recorded_at: str | None,
):
    """Record a payment received from a household.

    Examples:
        feeledger income record --household 1 --category "PTA Contribution Fee" --amount 250
        feeledger income record --household maria@example.com --category "SPG Fee" --member STU-2024-0001
    """
    household_id = resolve_household_or_exit(ctx, household)
    category_id = resolve_category_or_exit(ctx, CategoryKind.INCOME, category)
    member_id = resolve_member_or_exit(ctx, member) if member else None

    if amount is None:
        found = CategoryRegistry(ctx.obj["db"]).get(category_id)
        if found is None or found.default_amount is None:
            click.echo("Error: --amount is required for categories without a default amount.", err=True)
            ctx.exit(1)
        txn_amount = found.default_amount
    else:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    timestamp = None
    if recorded_at:
        try:
            timestamp = parse_timestamp(recorded_at)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

    try:
        transaction = transaction_recorder(ctx).record_income(
            category_id=category_id,
            amount=txn_amount,
            household_id=household_id,
            principal=ctx.obj["principal"],
            member_id=member_id,
            method=method,
            reference=reference,
            notes=notes,
            school_year=school_year,
            recorded_at=timestamp,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Recorded income {transaction.transaction_number}")
    click.echo(f"  Amount: {format_amount(transaction.amount)}")
    click.echo(f"  School year: {transaction.school_year}")
    click.echo(f"  Method: {transaction.payment_method.value}")


@income_group.command("list")
@click.option("--household", help="Household ID or email")
@click.option("--member", help="Member ID or code")
@click.option("--category", help="Income category ID or name")
@click.option("--school-year", help="School year (e.g., 2024-2025)")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@click.option("--period", type=click.Choice(PERIODS, case_sensitive=False), help="Named date range")
@click.pass_context
def list_income(
    ctx,
    household: str | None,
    member: str | None,
    category: str | None,
    school_year: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
):
    """List income transactions, newest first."""
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    household_id = resolve_household_or_exit(ctx, household) if household else None
    member_id = resolve_member_or_exit(ctx, member) if member else None
    category_id = resolve_category_or_exit(ctx, CategoryKind.INCOME, category) if category else None

    transactions = transaction_recorder(ctx).list_income(
        household_id=household_id,
        member_id=member_id,
        category_id=category_id,
        school_year=school_year,
        start_date=start,
        end_date=end,
    )
    if not transactions:
        click.echo("No income transactions found.")
        return

    names = {c.id: c.name for c in CategoryRegistry(ctx.obj["db"]).list(include_inactive=True)}
    for transaction in transactions:
        click.echo(income_line(transaction, names.get(transaction.category_id, "?")))
    total = sum(t.amount for t in transactions)
    click.echo(f"\n{len(transactions)} transactions, total {format_amount(total)}")


@income_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--amount", help="New amount")
@click.option("--method", type=METHOD_CHOICE, help="New payment method")
@click.option("--reference", help="New reference number")
@click.option("--notes", help="New notes")
@click.option("--receipt-issued/--no-receipt-issued", default=None, help="Mark whether an official receipt was issued")
@click.pass_context
def update_income(
    ctx,
    transaction_id: int,
    amount: str | None,
    method: str | None,
    reference: str | None,
    notes: str | None,
    receipt_issued: bool | None,
):
    """Update an income transaction."""
    new_amount = None
    if amount is not None:
        try:
            new_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    try:
        transaction = transaction_recorder(ctx).update_income(
            transaction_id,
            ctx.obj["principal"],
            amount=new_amount,
            method=method,
            reference=reference,
            notes=notes,
            receipt_issued=receipt_issued,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated income {transaction.transaction_number}")


@income_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_income(ctx, transaction_id: int, yes: bool):
    """Delete an income transaction and its attachments.

    Paid status already given to the household is not withdrawn.
    """
    if not yes and not click.confirm(f"Delete income transaction {transaction_id}?"):
        click.echo("Cancelled.")
        return
    try:
        transaction_recorder(ctx).delete_income(transaction_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted income transaction {transaction_id}")


def register_commands(cli):
    """Register income commands with main CLI."""
    cli.add_command(income_group, name="income")
