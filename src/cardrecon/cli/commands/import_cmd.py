"""Credit card statement import command."""

import click
from cardrecon.cli.error_handling import handle_domain_error
from cardrecon.cli.user_resolution import resolve_user_or_exit
from cardrecon.domain.cc_import import CreditCardImportService, read_statement_csv
from cardrecon.domain.errors import DomainError
from cardrecon.domain.user import UserService
from cardrecon.utils.date_parser import parse_billing_month


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--user", required=True, help="User name or ID")
@click.option("--cycle", help="Billing cycle for every line (YYYY-MM); defaults to each purchase month")
@click.option("--no-reconcile", is_flag=True, help="Do not reconcile the imported cycles")
@click.pass_context
def import_statement(ctx, csv_file: str, user: str, cycle: str | None, no_reconcile: bool):
    """Import a credit card statement CSV with date, title and amount columns.

    Amounts are read as printed on the statement: purchases positive,
    refunds negative. "Pagamento recebido" lines are skipped.
    """
    db = ctx.obj["db"]
    service = CreditCardImportService(db, ctx.obj["config"])
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    billing_cycle = None
    if cycle is not None:
        try:
            billing_cycle = parse_billing_month(cycle)
        except ValueError as e:
            click.echo(f"Error: Invalid billing cycle: {e}", err=True)
            ctx.exit(1)

    try:
        lines, errors = read_statement_csv(csv_file)
        result = service.import_transactions(
            user_id, lines, billing_cycle=billing_cycle, reconcile=not no_reconcile
        )
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nImport complete:")
    click.echo(f"  Imported: {result.imported_count} transactions")
    click.echo(f"  Skipped: {result.skipped_payment_count} payment lines")
    if errors:
        click.echo(f"  Errors: {len(errors)}")
        for error in errors:
            click.echo(f"    {error}", err=True)
    click.echo(f"  Billing cycles: {', '.join(result.billing_cycles)}")

    reconciliation = result.reconciliation
    for linked in reconciliation.auto_linked:
        click.echo(
            f"  Linked {linked.billing_cycle} to bill {linked.bill_id} ({linked.confidence.value} confidence)"
        )
    for pending in reconciliation.requires_selection:
        click.echo(f"  {pending.billing_cycle}: {len(pending.candidates)} candidate bill(s), selection required")


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)
