"""CLI helpers for resolving households, members and categories."""

from __future__ import annotations

import click

from feeledger.domain.entities import CategoryKind
from feeledger.domain.errors import DomainError
from feeledger.utils.resolvers import resolve_category, resolve_household, resolve_member


def resolve_household_or_exit(ctx: click.Context, household: str | int) -> int:
    """Resolve household ID or email, or exit with a CLI error."""
    try:
        return resolve_household(ctx.obj["db"], household)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_member_or_exit(ctx: click.Context, member: str | int) -> int:
    """Resolve member ID or member code, or exit with a CLI error."""
    try:
        return resolve_member(ctx.obj["db"], member)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_category_or_exit(ctx: click.Context, kind: CategoryKind, category: str | int) -> int:
    """Resolve category ID or name within a kind, or exit with a CLI error."""
    try:
        return resolve_category(ctx.obj["db"], kind, category)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
