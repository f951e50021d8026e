"""Group (section) commands."""

import click

from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.services import membership_service
from feeledger.domain.errors import DomainError


@click.group()
def group_group():
    """Manage member groups (sections)."""
    pass


@group_group.command("create")
@click.argument("name")
@click.option("--school-year", required=True, help="School year (e.g., 2024-2025)")
@click.option("--grade", "grade_level", type=int, help="Grade level")
@click.pass_context
def create_group(ctx, name: str, school_year: str, grade_level: int | None):
    """Create a group for a school year."""
    try:
        group = membership_service(ctx).create_group(name, school_year, grade_level=grade_level)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created group '{group.name}' for {group.school_year} (ID: {group.id})")


@group_group.command("list")
@click.option("--school-year", help="Only groups of this school year")
@click.pass_context
def list_groups(ctx, school_year: str | None):
    """List groups."""
    groups = membership_service(ctx).list_groups(school_year=school_year)
    if not groups:
        click.echo("No groups found.")
        return
    for group in groups:
        grade = f"Grade {group.grade_level}" if group.grade_level is not None else "-"
        click.echo(f"{group.id:>5}  {group.name:<20} {group.school_year}  {grade}")


def register_commands(cli):
    """Register group commands with main CLI."""
    cli.add_command(group_group, name="group")
