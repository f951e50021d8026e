"""Plain-text rendering of domain entities for the CLI."""

from datetime import datetime
from typing import Optional

import click

from feeledger.domain.entities import ExpenseTransaction, Household, IncomeTransaction, Member
from feeledger.utils.amount_parser import format_amount


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")


def paid_label(paid: bool) -> str:
    return "PAID" if paid else "UNPAID"


def echo_household(household: Household) -> None:
    click.echo(f"Household {household.id}: {household.display_name}")
    if household.email:
        click.echo(f"  Email: {household.email}")
    if household.contact_number:
        click.echo(f"  Contact: {household.contact_number}")
    if household.address:
        click.echo(f"  Address: {household.address}")
    click.echo(f"  Status: {paid_label(household.paid)} (paid at {format_timestamp(household.paid_at)})")


def member_line(member: Member) -> str:
    return (
        f"{member.id:>5}  {member.member_code:<14} {member.display_name:<30} "
        f"{paid_label(member.paid):<7} {format_timestamp(member.paid_at)}"
    )


def income_line(transaction: IncomeTransaction, category_name: str) -> str:
    member = f" member {transaction.member_id}" if transaction.member_id else ""
    return (
        f"{transaction.transaction_number}  {transaction.recorded_at:%Y-%m-%d}  "
        f"{format_amount(transaction.amount):>12}  {category_name} (household {transaction.household_id}{member}) "
        f"[{transaction.payment_method.value}]"
    )


def expense_line(transaction: ExpenseTransaction, category_name: str) -> str:
    vendor = f" - {transaction.vendor_name}" if transaction.vendor_name else ""
    return (
        f"{transaction.transaction_number}  {transaction.expense_date:%Y-%m-%d}  "
        f"{format_amount(transaction.amount):>12}  {category_name}: {transaction.description}{vendor} "
        f"[{transaction.payment_method.value}]"
    )
