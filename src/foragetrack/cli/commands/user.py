"""User management commands."""

import click
from foragetrack.cli.error_handling import handle_domain_error
from foragetrack.cli.user_resolution import resolve_user_or_exit
from foragetrack.cli.value_parsing import format_money
from foragetrack.domain.errors import DomainError
from foragetrack.domain.users import UserService


@click.group()
def user_group():
    """Manage users."""
    pass


@user_group.command("create")
@click.argument("alias", metavar="ALIAS")
@click.pass_context
def create_user(ctx, alias: str):
    """Register a new user under a display name.

    Examples:
        foragetrack user create "Alice"
    """
    service = UserService(ctx.obj["db"])

    try:
        user = service.create_user(alias)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created user '{user.alias}' (ID: {user.id})")


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users with their revenue and profit."""
    service = UserService(ctx.obj["db"])

    users = service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 60)
    for user in users:
        click.echo(
            f"ID: {user.id:3d} | {user.alias:20s} | "
            f"Revenue: {format_money(user.revenue):>10s} | Profit: {format_money(user.profit):>10s}"
        )


@user_group.command("show")
@click.argument("user", metavar="USER")
@click.pass_context
def show_user(ctx, user: str):
    """Show a user.

    USER can be a user alias or ID.
    """
    service = UserService(ctx.obj["db"])
    user_id = resolve_user_or_exit(ctx, service, user)
    user_obj = service.get_user(user_id)

    click.echo(f"User {user_obj.id}: {user_obj.alias}")
    click.echo(f"  Registered: {user_obj.created_at:%Y-%m-%d %H:%M}")
    click.echo(f"  Revenue: {format_money(user_obj.revenue)}")
    click.echo(f"  Profit: {format_money(user_obj.profit)}")


@user_group.command("login")
@click.argument("alias", metavar="ALIAS")
@click.pass_context
def login(ctx, alias: str):
    """Look up a user by display name and print a session token.

    No password is involved; the token only scopes later calls to the user ID.
    """
    service = UserService(ctx.obj["db"])

    try:
        session = service.login(alias)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Logged in as '{session.alias}' (ID: {session.user_id})")
    click.echo(f"Session token: {session.token}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
