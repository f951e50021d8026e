"""Payment status commands."""

import click

from feeledger.cli.formatting import format_timestamp, paid_label
from feeledger.cli.resolution import resolve_household_or_exit, resolve_member_or_exit
from feeledger.domain.entities import PaymentStatus
from feeledger.domain.status import PaymentStatusService


def _echo_status(label: str, status: PaymentStatus) -> None:
    click.echo(f"{label}: {paid_label(status.paid)}")
    if status.paid:
        click.echo(f"  Paid at: {format_timestamp(status.paid_at)}")


@click.group()
def status_group():
    """Show payment status."""
    pass


@status_group.command("household")
@click.argument("household")
@click.pass_context
def household_status(ctx, household: str):
    """Show whether a household (ID or email) has paid."""
    household_id = resolve_household_or_exit(ctx, household)
    status = PaymentStatusService(ctx.obj["db"]).household_status(household_id)
    _echo_status(f"Household {household_id}", status)


@status_group.command("member")
@click.argument("member")
@click.pass_context
def member_status(ctx, member: str):
    """Show whether a member (ID or code) has paid."""
    member_id = resolve_member_or_exit(ctx, member)
    status = PaymentStatusService(ctx.obj["db"]).member_status(member_id)
    _echo_status(f"Member {member_id}", status)


def register_commands(cli):
    """Register status commands with main CLI."""
    cli.add_command(status_group, name="status")
