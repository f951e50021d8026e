"""Member management commands."""

import click

from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import member_line
from feeledger.cli.resolution import resolve_household_or_exit, resolve_member_or_exit
from feeledger.cli.services import membership_service
from feeledger.domain.errors import DomainError


@click.group()
def member_group():
    """Manage members (students)."""
    pass


@member_group.command("enroll")
@click.option("--household", required=True, help="Household ID or email")
@click.option("--first-name", required=True, help="First name")
@click.option("--last-name", required=True, help="Last name")
@click.option("--middle-name", help="Middle name")
@click.option("--code", "member_code", help="Member code (generated as STU-<year>-NNNN if omitted)")
@click.option("--group", "group_id", type=int, help="Group (section) ID")
@click.pass_context
def enroll_member(
    ctx,
    household: str,
    first_name: str,
    last_name: str,
    middle_name: str | None,
    member_code: str | None,
    group_id: int | None,
):
    """Enroll a member in a household.

    New members start unpaid even if the household has already paid.
    """
    household_id = resolve_household_or_exit(ctx, household)
    service = membership_service(ctx)
    try:
        member = service.enroll_member(
            household_id=household_id,
            member_code=member_code or service.generate_member_code(),
            first_name=first_name,
            last_name=last_name,
            principal=ctx.obj["principal"],
            group_id=group_id,
            middle_name=middle_name,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Enrolled member '{member.display_name}' as {member.member_code} (ID: {member.id})")


@member_group.command("list")
@click.option("--household", help="Household ID or email")
@click.option("--group", "group_id", type=int, help="Group (section) ID")
@click.option("--status", type=click.Choice(["paid", "unpaid"], case_sensitive=False), help="Only members with this payment status")
@click.pass_context
def list_members(ctx, household: str | None, group_id: int | None, status: str | None):
    """List members."""
    paid = None if status is None else status.lower() == "paid"
    household_id = resolve_household_or_exit(ctx, household) if household else None
    members = membership_service(ctx).list_members(household_id=household_id, group_id=group_id, paid=paid)
    if not members:
        click.echo("No members found.")
        return
    for member in members:
        click.echo(member_line(member))


@member_group.command("update")
@click.argument("member")
@click.option("--first-name", help="New first name")
@click.option("--last-name", help="New last name")
@click.option("--middle-name", help="New middle name")
@click.option("--group", "group_id", type=int, help="New group (section) ID")
@click.option("--clear-group", is_flag=True, help="Remove the member from its group")
@click.pass_context
def update_member(
    ctx,
    member: str,
    first_name: str | None,
    last_name: str | None,
    middle_name: str | None,
    group_id: int | None,
    clear_group: bool,
):
    """Update a member (by ID or member code)."""
    if group_id is not None and clear_group:
        click.echo("Error: --group and --clear-group cannot be combined.", err=True)
        ctx.exit(1)
    member_id = resolve_member_or_exit(ctx, member)
    try:
        updated = membership_service(ctx).update_member(
            member_id,
            ctx.obj["principal"],
            first_name=first_name,
            last_name=last_name,
            middle_name=middle_name,
            group_id=group_id,
            clear_group=clear_group,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated member '{updated.display_name}' (ID: {updated.id})")


@member_group.command("delete")
@click.argument("member")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_member(ctx, member: str, yes: bool):
    """Delete a member without payments of its own."""
    member_id = resolve_member_or_exit(ctx, member)
    if not yes and not click.confirm(f"Delete member {member_id}?"):
        click.echo("Cancelled.")
        return
    try:
        membership_service(ctx).delete_member(member_id, ctx.obj["principal"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted member {member_id}")


def register_commands(cli):
    """Register member commands with main CLI."""
    cli.add_command(member_group, name="member")
