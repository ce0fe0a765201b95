"""Main CLI entry point."""

import logging

import click
from foragetrack.database.factories import DB_PATH_ENV, create_sqlite_database

# Import and register all commands at module level
from foragetrack.cli.commands import (
    user,
    record,
    price,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file, or ':memory:' (overrides FORAGETRACK_DB_PATH environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Foragetrack - purchase and sale tracking for foraged goods.

    Record berry and mushroom purchases and sales, keep a market price
    table, and report profit, inventory and data integrity.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
record.register_commands(cli)
price.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
