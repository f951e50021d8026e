"""Expense transaction commands."""

import click

from feeledger.cli.date_filters import resolve_cli_date_range
from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import expense_line
from feeledger.cli.resolution import resolve_category_or_exit
from feeledger.cli.services import transaction_recorder
from feeledger.domain.category import CategoryRegistry
from feeledger.domain.entities import EXPENSE_PAYMENT_METHODS, CategoryKind, PaymentMethod
from feeledger.domain.errors import DomainError
from feeledger.utils.amount_parser import format_amount, parse_amount
from feeledger.utils.date_parser import PERIODS, parse_date

METHOD_CHOICE = click.Choice(
    [m.value for m in PaymentMethod if m in EXPENSE_PAYMENT_METHODS], case_sensitive=False
)


@click.group()
def expense_group():
    """Record and manage expenses."""
    pass


@expense_group.command("record")
@click.option("--category", required=True, help="Expense category ID or name")
@click.option("--amount", required=True, help="Amount (e.g., 1500.00)")
@click.option("--description", required=True, help="What the money was spent on")
@click.option("--vendor", help="Vendor name")
@click.option("--method", type=METHOD_CHOICE, default=PaymentMethod.CASH.value, show_default=True, help="Payment method")
@click.option("--reference", help="Reference number")
@click.option("--approved-by", help="Name of the approving officer")
@click.option("--date", "expense_date", help="Expense date (YYYY-MM-DD or relative like 'yesterday'); defaults to today")
@click.option("--school-year", help="School year (e.g., 2024-2025)")
@click.pass_context
def record_expense(
    ctx,
    category: str,
    amount: str,
    description: str,
    vendor: str | None,
    method: str,
    reference: str | None,
    approved_by: str | None,
    expense_date: str | None,
    school_year: str | None,
):
    """Record an expense.

    Examples:
        feeledger expense record --category Utilities --amount 3200 --description "June electricity"
    """
    category_id = resolve_category_or_exit(ctx, CategoryKind.EXPENSE, category)
    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    txn_date = None
    if expense_date:
        try:
            txn_date = parse_date(expense_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        transaction = transaction_recorder(ctx).record_expense(
            category_id=category_id,
            amount=txn_amount,
            description=description,
            principal=ctx.obj["principal"],
            method=method,
            vendor_name=vendor,
            reference=reference,
            approved_by=approved_by,
            expense_date=txn_date,
            school_year=school_year,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Recorded expense {transaction.transaction_number}")
    click.echo(f"  Amount: {format_amount(transaction.amount)}")
    click.echo(f"  School year: {transaction.school_year}")

    found = CategoryRegistry(ctx.obj["db"]).get(category_id)
    if found is not None and found.budget_ceiling is not None:
        spent = ctx.obj["db"].total_expenses(category_id, transaction.school_year)
        if spent > found.budget_ceiling:
            click.echo(
                f"Warning: '{found.name}' is over budget: {format_amount(spent)} spent "
                f"of {format_amount(found.budget_ceiling)}",
                err=True,
            )


@expense_group.command("list")
@click.option("--category", help="Expense category ID or name")
@click.option("--school-year", help="School year (e.g., 2024-2025)")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@click.option("--period", type=click.Choice(PERIODS, case_sensitive=False), help="Named date range")
@click.pass_context
def list_expenses(
    ctx,
    category: str | None,
    school_year: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
):
    """List expense transactions, newest first."""
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    category_id = resolve_category_or_exit(ctx, CategoryKind.EXPENSE, category) if category else None

    transactions = transaction_recorder(ctx).list_expenses(
        category_id=category_id, school_year=school_year, start_date=start, end_date=end
    )
    if not transactions:
        click.echo("No expense transactions found.")
        return

    names = {c.id: c.name for c in CategoryRegistry(ctx.obj["db"]).list(include_inactive=True)}
    for transaction in transactions:
        click.echo(expense_line(transaction, names.get(transaction.category_id, "?")))
    total = sum(t.amount for t in transactions)
    click.echo(f"\n{len(transactions)} transactions, total {format_amount(total)}")


@expense_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--amount", help="New amount")
@click.option("--method", type=METHOD_CHOICE, help="New payment method")
@click.option("--description", help="New description")
@click.option("--vendor", help="New vendor name")
@click.option("--reference", help="New reference number")
@click.option("--approved-by", help="New approving officer")
@click.pass_context
def update_expense(
    ctx,
    transaction_id: int,
    amount: str | None,
    method: str | None,
    description: str | None,
    vendor: str | None,
    reference: str | None,
    approved_by: str | None,
):
    """Update an expense transaction."""
    new_amount = None
    if amount is not None:
        try:
            new_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    try:
        transaction = transaction_recorder(ctx).update_expense(
            transaction_id,
            ctx.obj["principal"],
            amount=new_amount,
            method=method,
            description=description,
            vendor_name=vendor,
            reference=reference,
            approved_by=approved_by,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated expense {transaction.transaction_number}")


@expense_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_expense(ctx, transaction_id: int, yes: bool):
    """Delete an expense transaction and its attachments."""
    if not yes and not click.confirm(f"Delete expense transaction {transaction_id}?"):
        click.echo("Cancelled.")
        return
    try:
        transaction_recorder(ctx).delete_expense(transaction_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted expense transaction {transaction_id}")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
