"""Main CLI entry point."""

import os

import click

from feeledger.config import LedgerSettings
from feeledger.database.factories import create_sqlite_database
from feeledger.domain.errors import ConfigurationError
from feeledger.logging_config import configure_logging

# Import and register all commands at module level
from feeledger.cli.commands import (
    attach,
    audit,
    category,
    expense,
    group,
    household,
    income,
    init_categories,
    member,
    status,
    summary,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FEELEDGER_DB_PATH environment variable)",
    envvar="FEELEDGER_DB_PATH",
)
@click.option(
    "--principal",
    help="Name recorded as the author of changes (defaults to FEELEDGER_PRINCIPAL or $USER)",
    envvar="FEELEDGER_PRINCIPAL",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (overrides FEELEDGER_LOG_LEVEL environment variable)",
)
@click.pass_context
def cli(ctx, db_path: str | None, principal: str | None, log_level: str | None):
    """Feeledger - household and member fee ledger.

    Record PTA fees and other collections from households, track who has
    paid, book expenses against budgets and keep an audit trail of every
    change.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = LedgerSettings.from_env().with_overrides(
                database_path=db_path, log_level=log_level.upper() if log_level else None
            )
        except ConfigurationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        configure_logging(settings.log_level)

        db = create_sqlite_database(settings=settings)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["settings"] = settings
        ctx.obj["principal"] = principal or os.environ.get("USER") or "cli"


# Register all commands
init_categories.register_commands(cli)
category.register_commands(cli)
household.register_commands(cli)
member.register_commands(cli)
group.register_commands(cli)
income.register_commands(cli)
expense.register_commands(cli)
attach.register_commands(cli)
status.register_commands(cli)
audit.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
