"""Main CLI entry point."""

import logging

import click

from hsarecon.cli.error_handling import handle_domain_error
from hsarecon.config import load_settings
from hsarecon.domain.reconciliation import ReconciliationService
from hsarecon.errors import DomainError
from hsarecon.sources.factories import create_csv_source

# Import and register all commands at module level
from hsarecon.cli.commands import accounts, reconcile, stats, vault


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    help="Directory holding invoices.csv, payments.csv and hsa_accounts.csv "
    "(overrides HSARECON_DATA_DIR environment variable)",
    envvar="HSARECON_DATA_DIR",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, data_dir: str | None, verbose: bool):
    """hsarecon - HSA payment reconciliation.

    Reconcile how medical bills were paid against your HSA, find what you
    can still reimburse, and project the growth of deferred reimbursements.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Load records only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = load_settings()
            source = create_csv_source(data_dir or settings.data_dir).load()
        except DomainError as e:
            handle_domain_error(ctx, e)

        for message in source.errors:
            click.echo(f"Warning: {message}", err=True)

        ctx.obj["settings"] = settings
        ctx.obj["source"] = source
        ctx.obj["service"] = ReconciliationService(source, settings)


# Register all commands
reconcile.register_commands(cli)
vault.register_commands(cli)
accounts.register_commands(cli)
stats.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
