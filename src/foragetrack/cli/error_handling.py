"""CLI error handling helpers."""

import logging

import click

from foragetrack.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError | OSError) -> None:
    """Render a domain or file error and exit with failure.

    The message goes to stderr; with --verbose the traceback is logged too.
    """
    logger.debug("%s in '%s'", type(error).__name__, ctx.command_path, exc_info=error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
