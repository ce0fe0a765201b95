"""CLI helpers for user resolution and error handling."""

from __future__ import annotations

import click
from foragetrack.domain.users import UserService
from foragetrack.utils.user_resolver import resolve_user


def resolve_user_or_exit(
    ctx: click.Context, user_service: UserService, user: str | int
) -> int:
    """Resolve user alias or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_user(user_service, user)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
