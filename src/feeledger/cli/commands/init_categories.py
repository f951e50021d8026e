"""Initialize default categories."""

import click

from feeledger.domain.category import CategoryRegistry, DEFAULT_CATEGORIES
from feeledger.domain.errors import DomainError


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Create the default income and expense categories.

    Categories that already exist are left untouched, so the command can be
    run again safely.
    """
    registry = CategoryRegistry(ctx.obj["db"])

    try:
        created = registry.install_defaults()
    except DomainError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    skipped = len(DEFAULT_CATEGORIES) - len(created)
    for category in created:
        click.echo(f"Created {category.kind.value} category '{category.name}' (ID: {category.id})")
    if not created:
        click.echo("Default categories already exist.")
    elif skipped:
        click.echo(f"Created {len(created)} categories; {skipped} already existed.")
    else:
        click.echo(f"Successfully created {len(created)} categories.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
