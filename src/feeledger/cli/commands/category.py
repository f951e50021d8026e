"""Category management commands."""

import click

from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.resolution import resolve_category_or_exit
from feeledger.domain.category import CategoryRegistry
from feeledger.domain.entities import Category, CategoryKind
from feeledger.domain.errors import DomainError
from feeledger.utils.amount_parser import format_amount, parse_amount

KIND_CHOICE = click.Choice([k.value for k in CategoryKind], case_sensitive=False)


def _parse_optional_amount(ctx, label: str, value: str | None):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _describe(category: Category) -> str:
    parts = [f"{category.name} (ID: {category.id})"]
    if category.scope is not None:
        parts.append(f"per {category.scope.value}")
    if category.default_amount is not None:
        parts.append(f"default {format_amount(category.default_amount)}")
    if category.budget_ceiling is not None:
        parts.append(f"budget {format_amount(category.budget_ceiling)}")
    if not category.is_active:
        parts.append("inactive")
    return ", ".join(parts)


@click.group()
def category_group():
    """Manage income and expense categories."""
    pass


@category_group.command("list")
@click.option("--kind", type=KIND_CHOICE, help="Only list categories of this kind")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive categories")
@click.pass_context
def list_categories(ctx, kind: str | None, include_inactive: bool):
    """List categories."""
    registry = CategoryRegistry(ctx.obj["db"])
    categories = registry.list(kind=kind, include_inactive=include_inactive)
    if not categories:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    for current_kind in CategoryKind:
        of_kind = [c for c in categories if c.kind == current_kind]
        if not of_kind:
            continue
        click.echo(f"\n{current_kind.value.capitalize()} categories:")
        for category in of_kind:
            click.echo(f"  {_describe(category)}")


@category_group.command("create")
@click.argument("name")
@click.option("--kind", type=KIND_CHOICE, required=True, help="income or expense")
@click.option(
    "--scope",
    type=click.Choice(["household", "member"], case_sensitive=False),
    help="Who an income category bills (required for income)",
)
@click.option("--default-amount", help="Suggested amount (e.g., 250.00)")
@click.option("--budget", help="Budget ceiling per school year (expense only)")
@click.option("--description", help="Category description")
@click.pass_context
def create_category(
    ctx,
    name: str,
    kind: str,
    scope: str | None,
    default_amount: str | None,
    budget: str | None,
    description: str | None,
):
    """Create a new category.

    Examples:
        feeledger category create "PTA Contribution Fee" --kind income --scope household --default-amount 250
        feeledger category create "Utilities" --kind expense --budget 15000
    """
    registry = CategoryRegistry(ctx.obj["db"])
    try:
        category = registry.create(
            kind=kind.lower(),
            name=name,
            scope=scope.lower() if scope else None,
            default_amount=_parse_optional_amount(ctx, "default amount", default_amount),
            budget_ceiling=_parse_optional_amount(ctx, "budget", budget),
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {category.kind.value} category '{category.name}' (ID: {category.id})")


@category_group.command("update")
@click.argument("category")
@click.option("--kind", type=KIND_CHOICE, default="income", show_default=True, help="Kind used to resolve a name")
@click.option("--name", help="New name (only while unused)")
@click.option("--scope", type=click.Choice(["household", "member"], case_sensitive=False), help="New scope (only while unused)")
@click.option("--default-amount", help="New default amount")
@click.option("--budget", help="New budget ceiling")
@click.option("--description", help="New description")
@click.pass_context
def update_category(
    ctx,
    category: str,
    kind: str,
    name: str | None,
    scope: str | None,
    default_amount: str | None,
    budget: str | None,
    description: str | None,
):
    """Update a category by ID or name."""
    category_id = resolve_category_or_exit(ctx, CategoryKind(kind.lower()), category)
    registry = CategoryRegistry(ctx.obj["db"])
    try:
        updated = registry.update(
            category_id,
            name=name,
            scope=scope.lower() if scope else None,
            default_amount=_parse_optional_amount(ctx, "default amount", default_amount),
            budget_ceiling=_parse_optional_amount(ctx, "budget", budget),
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated category {_describe(updated)}")


@category_group.command("deactivate")
@click.argument("category_id", type=int)
@click.pass_context
def deactivate_category(ctx, category_id: int):
    """Deactivate a category (existing transactions are kept)."""
    registry = CategoryRegistry(ctx.obj["db"])
    try:
        category = registry.deactivate(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated category '{category.name}' (ID: {category.id})")


@category_group.command("reactivate")
@click.argument("category_id", type=int)
@click.pass_context
def reactivate_category(ctx, category_id: int):
    """Reactivate a deactivated category."""
    registry = CategoryRegistry(ctx.obj["db"])
    try:
        category = registry.reactivate(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Reactivated category '{category.name}' (ID: {category.id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
