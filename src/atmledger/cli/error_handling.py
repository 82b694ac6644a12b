"""CLI error handling helpers."""

import logging
from contextlib import contextmanager
from typing import Iterator

import click

from atmledger.domain.errors import DomainError, TransactionFailedError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error on stderr and exit with status 1."""
    logger.debug("cli.domain_error", extra={"error_type": type(error).__name__})
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, TransactionFailedError):
        click.echo("No changes were applied; it is safe to retry.", err=True)
    ctx.exit(1)


@contextmanager
def domain_errors(ctx: click.Context) -> Iterator[None]:
    """Turn any DomainError raised in the block into a CLI failure."""
    try:
        yield
    except DomainError as e:
        handle_domain_error(ctx, e)
