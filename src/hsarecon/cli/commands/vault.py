"""Vault tracking commands."""

import click

from hsarecon.cli.date_filters import parse_date_option
from hsarecon.cli.error_handling import handle_domain_error
from hsarecon.domain.vault import strategy_label
from hsarecon.errors import DomainError
from hsarecon.utils.money import format_money


@click.command("vault")
@click.option(
    "--return-rate",
    type=float,
    help="Assumed annual return, e.g. 0.08 (overrides HSARECON_RETURN_RATE)",
)
@click.option("--today", "today_str", help="Reference date for the next reminder (default: today)")
@click.pass_context
def show_vault(ctx, return_rate: float | None, today_str: str | None):
    """Project the growth of deferred reimbursements.

    Only invoices with a medium-term or vault strategy are included.

    Examples:
        hsarecon vault
        hsarecon vault --return-rate 0.06
    """
    service = ctx.obj["service"]
    today = parse_date_option(ctx, "today", today_str)
    rate = ctx.obj["settings"].return_rate if return_rate is None else return_rate

    try:
        projections = service.vault_projections(return_rate=rate)
        summary = service.vault_summary(return_rate=rate, today=today)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not projections:
        click.echo("No vaulted expenses found.")
        return

    expenses = {expense.id: expense for expense in service.vault_expenses()}

    click.echo(f"\nVaulted expenses at {rate:.1%} annual return:")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<12} {'Date':<12} {'Amount':>12} {'Strategy':<28} "
        f"{'Reimburse':<12} {'Years':>6} {'Projected':>12}"
    )
    click.echo("-" * 100)
    for projection in projections:
        expense = expenses[projection.expense_id]
        planned = expense.planned_reimbursement_date
        click.echo(
            f"{expense.id:<12} {expense.date.isoformat():<12} {format_money(projection.amount):>12} "
            f"{strategy_label(expense.reimbursement_strategy):<28} "
            f"{planned.isoformat() if planned else '-':<12} {projection.elapsed_years:>6.1f} "
            f"{format_money(projection.projected_value):>12}"
        )
    click.echo("-" * 100)

    click.echo(f"Total in vault:          {format_money(summary.total_in_vault)}")
    click.echo(f"Projected growth:        {format_money(summary.projected_growth)}")
    click.echo(f"Average years invested:  {summary.average_years_invested:.1f}")
    click.echo(
        "Next reminder:           "
        f"{summary.next_reminder.isoformat() if summary.next_reminder else 'none'}"
    )


def register_commands(cli):
    """Register vault command with main CLI."""
    cli.add_command(show_vault)
