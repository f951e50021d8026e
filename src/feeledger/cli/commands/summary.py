"""Summary report commands."""

from datetime import date

import click

from feeledger.domain.entities import CategoryKind
from feeledger.domain.summary import SummaryService
from feeledger.utils.amount_parser import format_amount
from feeledger.utils.school_year import school_year_for


@click.group()
def summary_group():
    """Show financial and payment reports."""
    pass


@summary_group.command("financial")
@click.option("--school-year", help="Only this school year (e.g., 2024-2025)")
@click.pass_context
def financial_summary(ctx, school_year: str | None):
    """Income and expense totals per category, with the balance."""
    summary = SummaryService(ctx.obj["db"]).financial_summary(school_year=school_year)
    if not summary.rows:
        click.echo("No transactions found.")
        return

    current = None
    for row in summary.rows:
        if (row.school_year, row.kind) != current:
            current = (row.school_year, row.kind)
            label = "Income" if row.kind == CategoryKind.INCOME else "Expenses"
            click.echo(f"\n{row.school_year} {label}:")
        click.echo(f"  {row.category_name:<30} {row.count:>5}  {format_amount(row.total):>14}")

    click.echo("")
    click.echo(f"Total income:   {format_amount(summary.total_income):>14}")
    click.echo(f"Total expenses: {format_amount(summary.total_expenses):>14}")
    click.echo(f"Balance:        {format_amount(summary.balance):>14}")


@summary_group.command("payments")
@click.option("--school-year", help="Only groups of this school year")
@click.pass_context
def payments_summary(ctx, school_year: str | None):
    """Paid and unpaid members per group."""
    rows = SummaryService(ctx.obj["db"]).payment_status_summary(school_year=school_year)
    if not rows:
        click.echo("No groups found.")
        return

    click.echo(f"{'Group':<20} {'Total':>6} {'Paid':>6} {'Unpaid':>6} {'Paid %':>7}")
    for row in rows:
        click.echo(
            f"{row.group_name:<20} {row.total_members:>6} {row.paid_members:>6} "
            f"{row.unpaid_members:>6} {row.paid_percentage:>6}%"
        )


@summary_group.command("budget")
@click.option("--school-year", help="School year (defaults to the current one)")
@click.pass_context
def budget_summary(ctx, school_year: str | None):
    """Expense category spending against budget ceilings."""
    if school_year is None:
        school_year = school_year_for(date.today(), ctx.obj["settings"].school_year_start_month)
    usages = SummaryService(ctx.obj["db"]).budget_usage(school_year)
    if not usages:
        click.echo("No expense categories found.")
        return

    click.echo(f"Budget usage for {school_year}:")
    for usage in usages:
        ceiling = format_amount(usage.budget_ceiling) if usage.budget_ceiling is not None else "no ceiling"
        flag = "  OVER BUDGET" if usage.over_budget else ""
        click.echo(f"  {usage.category_name:<30} {format_amount(usage.spent):>14} / {ceiling}{flag}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
