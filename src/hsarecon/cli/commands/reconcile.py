"""Reconciliation commands."""

import click

from hsarecon.cli.date_filters import resolve_cli_date_range
from hsarecon.cli.error_handling import echo_warnings, handle_domain_error
from hsarecon.domain.eligibility import eligible_accounts, format_account_date_range
from hsarecon.domain.entities import EligibilityMode, PaymentStatus
from hsarecon.domain.status import filter_breakdowns
from hsarecon.domain.vault import (
    is_vaulted,
    project_expense,
    strategy_label,
    vault_expense_from_invoice,
)
from hsarecon.errors import DomainError
from hsarecon.utils.money import format_money

MODE_CHOICE = click.Choice([m.value for m in EligibilityMode])
STATUS_CHOICE = click.Choice([s.value for s in PaymentStatus])


@click.command("reconcile")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option("--this-month", is_flag=True, help="Invoices from this month")
@click.option("--this-year", is_flag=True, help="Invoices from this year")
@click.option("--last-month", is_flag=True, help="Invoices from last month")
@click.option("--last-year", is_flag=True, help="Invoices from last year")
@click.option("--mode", type=MODE_CHOICE, help="Eligibility strictness (overrides HSARECON_ELIGIBILITY_MODE)")
@click.option("--status", "statuses", type=STATUS_CHOICE, multiple=True, help="Only show these statuses")
@click.option("--hide-settled", is_flag=True, help="Hide invoices with nothing unpaid or reimbursable")
@click.option("--only-eligible", is_flag=True, help="Only show invoices with a reimbursable amount")
@click.pass_context
def reconcile_invoices(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_year: bool,
    last_month: bool,
    last_year: bool,
    mode: str | None,
    statuses: tuple[str, ...],
    hide_settled: bool,
    only_eligible: bool,
):
    """Reconcile every invoice against its payments.

    Examples:
        hsarecon reconcile
        hsarecon reconcile --this-year --only-eligible
        hsarecon reconcile --status unpaid_with_balance --mode strict
    """
    service = ctx.obj["service"]
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={
            "this-month": this_month,
            "this-year": this_year,
            "last-month": last_month,
            "last-year": last_year,
        },
    )

    try:
        results = service.reconcile_all(start_date=start, end_date=end, mode=mode)
    except DomainError as e:
        handle_domain_error(ctx, e)

    kept = filter_breakdowns(
        [result.breakdown for result in results],
        statuses=statuses or None,
        hide_settled=hide_settled,
        only_eligible=only_eligible,
    )
    kept_ids = {breakdown.invoice_id for breakdown in kept}
    results = [result for result in results if result.invoice.id in kept_ids]

    if not results:
        click.echo("No invoices found.")
        return

    click.echo(f"\nReconciled {len(results)} invoice(s):")
    click.echo("-" * 118)
    click.echo(
        f"{'ID':<12} {'Date':<12} {'Total':>12} {'Via HSA':>12} {'Other':>12} "
        f"{'Unpaid':>12} {'Eligible':>12}  {'Status':<28}"
    )
    click.echo("-" * 118)

    warnings = []
    for result in results:
        b = result.breakdown
        click.echo(
            f"{result.invoice.id:<12} {result.invoice.date.isoformat():<12} "
            f"{format_money(b.total_invoiced):>12} {format_money(b.paid_via_hsa):>12} "
            f"{format_money(b.paid_via_other):>12} {format_money(b.unpaid_balance):>12} "
            f"{format_money(b.hsa_reimbursement_eligible):>12}  {result.label:<28}"
        )
        for warning in b.warnings:
            if warning not in warnings:
                warnings.append(warning)

    click.echo("-" * 118)
    stats = service.aggregate(results)
    click.echo(
        f"{'Total':<25} {format_money(stats.total_invoiced):>12} "
        f"{format_money(stats.total_paid_via_hsa):>12} {format_money(stats.total_paid_via_other):>12} "
        f"{format_money(stats.total_unpaid):>12} {format_money(stats.total_hsa_eligible):>12}"
    )
    echo_warnings(warnings)


@click.command("show")
@click.argument("invoice_id")
@click.option("--mode", type=MODE_CHOICE, help="Eligibility strictness (overrides HSARECON_ELIGIBILITY_MODE)")
@click.pass_context
def show_invoice(ctx, invoice_id: str, mode: str | None):
    """Show the full breakdown for one invoice."""
    service = ctx.obj["service"]
    source = ctx.obj["source"]

    try:
        result = service.reconcile(invoice_id, mode=mode)
    except DomainError as e:
        handle_domain_error(ctx, e)

    invoice = result.invoice
    b = result.breakdown

    click.echo(f"\nInvoice: {invoice.id}")
    click.echo(f"  Date: {invoice.date.isoformat()}")
    if invoice.vendor:
        click.echo(f"  Vendor: {invoice.vendor}")
    if invoice.category:
        click.echo(f"  Category: {invoice.category}")
    click.echo(f"  HSA eligible: {'yes' if invoice.is_hsa_eligible else 'no'}")
    click.echo(f"  Status: {result.label}")

    click.echo("\nPayments:")
    click.echo(f"  Total invoiced:        {format_money(b.total_invoiced):>12}")
    click.echo(f"  Paid via HSA:          {format_money(b.paid_via_hsa):>12}")
    click.echo(f"  Paid out of pocket:    {format_money(b.paid_via_other):>12}")
    click.echo(f"  Unpaid balance:        {format_money(b.unpaid_balance):>12}")
    if b.is_overpaid:
        click.echo(f"  Overpaid:              {format_money(b.overpaid_amount):>12}")

    click.echo("\nReimbursement:")
    click.echo(f"  Already paid, recoverable:   {format_money(b.already_paid_recoverable):>12}")
    click.echo(f"  Unpaid, strategic:           {format_money(b.unpaid_strategic_opportunity):>12}")
    click.echo(f"  HSA reimbursement eligible:  {format_money(b.hsa_reimbursement_eligible):>12}")
    if b.ineligible_amount:
        click.echo(f"  Outside account windows:     {format_money(b.ineligible_amount):>12}")
    click.echo(f"  Potential card rewards:      {format_money(b.potential_rewards):>12}")

    covering = eligible_accounts(invoice.date, source.list_hsa_accounts())
    if covering:
        click.echo("\nCovering HSA accounts:")
        for account in covering:
            click.echo(f"  {account.account_name} ({format_account_date_range(account)})")

    expense = vault_expense_from_invoice(invoice)
    if is_vaulted(expense):
        settings = ctx.obj["settings"]
        projection = project_expense(expense, settings.return_rate)
        click.echo(f"\nStrategy: {strategy_label(expense.reimbursement_strategy)}")
        if expense.planned_reimbursement_date:
            click.echo(f"  Planned reimbursement: {expense.planned_reimbursement_date.isoformat()}")
        click.echo(
            f"  Projected value at {settings.return_rate:.1%}: "
            f"{format_money(projection.projected_value)} ({projection.elapsed_years:.1f} years)"
        )

    try:
        recommendation = service.recommend(invoice.id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nRecommendation: {recommendation.title}")
    click.echo(f"  {recommendation.description}")
    for reason in recommendation.reasoning:
        click.echo(f"  - {reason}")

    echo_warnings(list(b.warnings))


def register_commands(cli):
    """Register reconciliation commands with main CLI."""
    cli.add_command(reconcile_invoices)
    cli.add_command(show_invoice)
