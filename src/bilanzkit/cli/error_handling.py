"""CLI error handling helpers."""

import click

from bilanzkit.domain.errors import DomainError
from bilanzkit.domain.results import ServiceResult


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_failed_result(ctx: click.Context, result: ServiceResult) -> None:
    """Render the errors of a failed service result and exit with failure."""
    for message in result.errors or ("Unknown error",):
        click.echo(f"Error: {message}", err=True)
    ctx.exit(1)
