"""Audit trail commands."""

import json

import click

from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import format_timestamp
from feeledger.cli.services import audit_recorder
from feeledger.domain.audit import WATCHED_ENTITIES
from feeledger.domain.errors import DomainError


@click.group()
def audit_group():
    """Inspect the audit trail."""
    pass


@audit_group.command("trail")
@click.argument("entity_name", type=click.Choice(sorted(WATCHED_ENTITIES)))
@click.argument("entity_id", type=int)
@click.option("--offset", type=int, default=0, show_default=True, help="Entries to skip")
@click.option("--limit", type=int, help="Maximum number of entries to show")
@click.option("--values", "show_values", is_flag=True, help="Show prior and new values")
@click.pass_context
def audit_trail(ctx, entity_name: str, entity_id: int, offset: int, limit: int | None, show_values: bool):
    """Show the change history of one entity, oldest first.

    Examples:
        feeledger audit trail household 1
        feeledger audit trail income_transaction 3 --values
    """
    try:
        page = audit_recorder(ctx).list_trail(entity_name, entity_id, offset=offset, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not page.entries:
        click.echo(f"No audit entries for {entity_name} {entity_id}.")
        return

    for entry in page.entries:
        click.echo(
            f"#{entry.seq:<4} {format_timestamp(entry.recorded_at)}  "
            f"{entry.operation.value:<7} by {entry.principal}"
        )
        if show_values:
            if entry.prior is not None:
                click.echo(f"      prior: {json.dumps(entry.prior, sort_keys=True)}")
            if entry.new is not None:
                click.echo(f"      new:   {json.dumps(entry.new, sort_keys=True)}")
    if page.next_offset is not None:
        click.echo(f"\nMore entries available; continue with --offset {page.next_offset}")


def register_commands(cli):
    """Register audit commands with main CLI."""
    cli.add_command(audit_group, name="audit")
