"""Portfolio statistics command."""

import click

from hsarecon.cli.error_handling import echo_warnings, handle_domain_error
from hsarecon.domain.entities import EligibilityMode
from hsarecon.errors import DomainError
from hsarecon.utils.money import format_money


@click.command("stats")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in EligibilityMode]),
    help="Eligibility strictness (overrides HSARECON_ELIGIBILITY_MODE)",
)
@click.pass_context
def show_stats(ctx, mode: str | None):
    """Show totals across all invoices."""
    service = ctx.obj["service"]
    settings = ctx.obj["settings"]

    try:
        stats = service.aggregate(service.reconcile_all(mode=mode))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if stats.invoice_count == 0:
        click.echo("No invoices found.")
        return

    rows = [
        ("Invoices", str(stats.invoice_count)),
        ("Total invoiced", format_money(stats.total_invoiced)),
        ("Paid via HSA", format_money(stats.total_paid_via_hsa)),
        ("Paid out of pocket", format_money(stats.total_paid_via_other)),
        ("Unpaid", format_money(stats.total_unpaid)),
        ("Overpaid", format_money(stats.total_overpaid)),
        ("HSA reimbursement eligible", format_money(stats.total_hsa_eligible)),
        ("  Already paid, recoverable", format_money(stats.total_recoverable)),
        ("  Unpaid, strategic", format_money(stats.total_strategic_opportunity)),
        ("Outside account windows", format_money(stats.total_ineligible)),
        ("Potential card rewards", format_money(stats.total_potential_rewards)),
        (f"Tax savings at {settings.tax_rate:.0%}", format_money(stats.tax_savings)),
        (
            f"Value in {settings.growth_years}y at {settings.growth_rate:.0%}",
            format_money(stats.investment_growth_potential),
        ),
    ]

    click.echo("\nHSA summary:")
    click.echo("-" * 50)
    for label, value in rows:
        click.echo(f"{label:<32} {value:>16}")
    echo_warnings(list(stats.warnings))


def register_commands(cli):
    """Register stats command with main CLI."""
    cli.add_command(show_stats)
