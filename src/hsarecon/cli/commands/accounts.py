"""HSA account commands."""

import click

from hsarecon.cli.date_filters import parse_date_option
from hsarecon.domain.eligibility import (
    active_account,
    eligible_accounts,
    format_account_date_range,
    has_valid_window,
)


@click.command("accounts")
@click.option("--date", "date_str", help="Check which accounts cover this expense date")
@click.pass_context
def list_accounts(ctx, date_str: str | None):
    """List HSA accounts and their eligibility windows.

    Examples:
        hsarecon accounts
        hsarecon accounts --date 2023-06-15
    """
    source = ctx.obj["source"]
    service = ctx.obj["service"]
    accounts = source.list_hsa_accounts()

    if not accounts:
        click.echo("No HSA accounts found.")
    else:
        click.echo("\nHSA accounts:")
        click.echo("-" * 80)
        for account in accounts:
            flags = []
            if account.is_active:
                flags.append("active")
            if not has_valid_window(account):
                flags.append("invalid window")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            click.echo(
                f"{account.id:<10} | {account.account_name:<24} | "
                f"{format_account_date_range(account)}{suffix}"
            )

        current = active_account(accounts)
        if current is not None:
            click.echo(f"\nCurrent account: {current.account_name}")

    for warning in service.account_warnings():
        click.echo(f"Warning: {warning.message}", err=True)

    check_date = parse_date_option(ctx, "date", date_str)
    if check_date is None:
        return

    covering = eligible_accounts(check_date, accounts)
    if covering:
        names = ", ".join(account.account_name for account in covering)
        click.echo(f"\n{check_date.isoformat()} is eligible (covered by: {names})")
    else:
        click.echo(f"\n{check_date.isoformat()} is not covered by any HSA account")


def register_commands(cli):
    """Register accounts command with main CLI."""
    cli.add_command(list_accounts)
