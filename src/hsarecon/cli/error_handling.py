"""CLI error handling helpers."""

import click

from hsarecon.domain.entities import DataWarning
from hsarecon.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def echo_warnings(warnings: list[DataWarning]) -> None:
    """Print data-quality warnings after a report."""
    if not warnings:
        return
    click.echo(f"\nWarnings ({len(warnings)}):")
    for warning in warnings:
        click.echo(f"  [{warning.kind}] {warning.message}")
