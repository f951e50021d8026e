"""Household management commands."""

import click

from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import echo_household, format_timestamp, member_line, paid_label
from feeledger.cli.resolution import resolve_household_or_exit
from feeledger.cli.services import membership_service
from feeledger.domain.errors import DomainError


@click.group()
def household_group():
    """Manage households."""
    pass


@household_group.command("register")
@click.option("--first-name", required=True, help="First name of the parent or guardian")
@click.option("--last-name", required=True, help="Last name of the parent or guardian")
@click.option("--middle-name", help="Middle name")
@click.option("--contact", "contact_number", help="Contact number")
@click.option("--email", help="Email address (must be unique)")
@click.option("--address", help="Home address")
@click.pass_context
def register_household(
    ctx,
    first_name: str,
    last_name: str,
    middle_name: str | None,
    contact_number: str | None,
    email: str | None,
    address: str | None,
):
    """Register a new household.

    Examples:
        feeledger household register --first-name Maria --last-name Cruz --email maria@example.com
    """
    service = membership_service(ctx)
    try:
        household = service.register_household(
            first_name=first_name,
            last_name=last_name,
            principal=ctx.obj["principal"],
            middle_name=middle_name,
            contact_number=contact_number,
            email=email,
            address=address,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Registered household '{household.display_name}' (ID: {household.id})")


@household_group.command("list")
@click.option("--status", type=click.Choice(["paid", "unpaid"], case_sensitive=False), help="Only households with this payment status")
@click.pass_context
def list_households(ctx, status: str | None):
    """List households."""
    paid = None if status is None else status.lower() == "paid"
    households = membership_service(ctx).list_households(paid=paid)
    if not households:
        click.echo("No households found.")
        return

    click.echo(f"{'ID':>5}  {'Name':<30} {'Status':<7} Paid at")
    for household in households:
        click.echo(
            f"{household.id:>5}  {household.display_name:<30} "
            f"{paid_label(household.paid):<7} {format_timestamp(household.paid_at)}"
        )


@household_group.command("show")
@click.argument("household")
@click.pass_context
def show_household(ctx, household: str):
    """Show a household (by ID or email) and its members."""
    household_id = resolve_household_or_exit(ctx, household)
    service = membership_service(ctx)
    found = service.require_household(household_id)
    echo_household(found)

    members = service.list_members(household_id=household_id)
    if members:
        click.echo("  Members:")
        for member in members:
            click.echo(f"  {member_line(member)}")
    else:
        click.echo("  No members enrolled.")


@household_group.command("update")
@click.argument("household")
@click.option("--first-name", help="New first name")
@click.option("--last-name", help="New last name")
@click.option("--middle-name", help="New middle name")
@click.option("--contact", "contact_number", help="New contact number")
@click.option("--email", help="New email address")
@click.option("--address", help="New address")
@click.pass_context
def update_household(
    ctx,
    household: str,
    first_name: str | None,
    last_name: str | None,
    middle_name: str | None,
    contact_number: str | None,
    email: str | None,
    address: str | None,
):
    """Update household contact details.

    Paid status cannot be edited; it follows household-wide payments.
    """
    household_id = resolve_household_or_exit(ctx, household)
    try:
        updated = membership_service(ctx).update_household(
            household_id,
            ctx.obj["principal"],
            first_name=first_name,
            last_name=last_name,
            middle_name=middle_name,
            contact_number=contact_number,
            email=email,
            address=address,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated household '{updated.display_name}' (ID: {updated.id})")


@household_group.command("delete")
@click.argument("household")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_household(ctx, household: str, yes: bool):
    """Delete a household without members or payments."""
    household_id = resolve_household_or_exit(ctx, household)
    if not yes and not click.confirm(f"Delete household {household_id}?"):
        click.echo("Cancelled.")
        return
    try:
        membership_service(ctx).delete_household(household_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted household {household_id}")


def register_commands(cli):
    """Register household commands with main CLI."""
    cli.add_command(household_group, name="household")
