"""Add transaction commands."""

import click
from cardrecon.cli.error_handling import handle_domain_error
from cardrecon.cli.user_resolution import resolve_user_or_exit
from cardrecon.domain.errors import DomainError
from cardrecon.domain.transaction import TransactionService
from cardrecon.domain.user import UserService
from cardrecon.utils.date_parser import parse_date, parse_billing_month
from cardrecon.utils.amount_parser import parse_amount


@click.group()
def add_group():
    """Add transactions manually."""
    pass


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@add_group.command("purchase")
@click.option("--user", required=True, help="User name or ID")
@click.option(
    "--date",
    required=True,
    help="Purchase date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--title", required=True, help="Title as printed on the card statement")
@click.option(
    "--amount",
    required=True,
    help="Amount as printed on the statement (purchases positive, refunds negative)",
)
@click.option("--cycle", help="Billing cycle (YYYY-MM or e.g. 'last month'); defaults to the purchase month")
@click.pass_context
def add_purchase(ctx, user: str, date: str, title: str, amount: str, cycle: str | None):
    """Add a credit card purchase to a billing cycle.

    Examples:
        cardrecon add purchase --user alice --date 2024-11-05 --title "Market" --amount 120.00
        cardrecon add purchase --user alice --date 2024-10-28 --title "Hospital - Parcela 1/3" --amount 300 --cycle 2024-11
    """
    db = ctx.obj["db"]
    service = TransactionService(db, ctx.obj["config"])
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    txn_date = _parse_date_or_exit(ctx, date)
    txn_amount = _parse_amount_or_exit(ctx, amount)

    billing_cycle = None
    if cycle is not None:
        try:
            billing_cycle = parse_billing_month(cycle)
        except ValueError as e:
            click.echo(f"Error: Invalid billing cycle: {e}", err=True)
            ctx.exit(1)

    try:
        # Statement purchases are positive; stored as outflows
        transaction_id = service.create_credit_card_transaction(
            user_id=user_id,
            date=txn_date,
            title=title,
            amount=-txn_amount,
            billing_cycle=billing_cycle,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    txn = service.get_credit_card_transaction(user_id, transaction_id)
    click.echo(f"Created credit card transaction {transaction_id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.amount:,.2f}")
    click.echo(f"  Billing cycle: {txn.billing_cycle}")
    if txn.installment_label:
        click.echo(f"  Installment: {txn.installment_label}")


@add_group.command("bank")
@click.option("--user", required=True, help="User name or ID")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option(
    "--amount", required=True, help="Transaction amount (e.g., 123.45 or -123.45)"
)
@click.option("--description", help="Transaction description")
@click.option(
    "--bill-payment/--not-bill-payment",
    default=None,
    help="Mark explicitly as (not) a credit card bill payment instead of detecting it",
)
@click.pass_context
def add_bank(ctx, user: str, date: str, amount: str, description: str | None, bill_payment: bool | None):
    """Add a bank account transaction.

    Bill payments are detected from the description and immediately
    matched against pending billing cycles.

    Examples:
        cardrecon add bank --user alice --date 2024-12-10 --amount -1000.00 --description "Pagamento de fatura"
        cardrecon add bank --user alice --date 2024-12-10 --amount -80.00 --description "Pharmacy"
    """
    db = ctx.obj["db"]
    service = TransactionService(db, ctx.obj["config"])
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    txn_date = _parse_date_or_exit(ctx, date)
    txn_amount = _parse_amount_or_exit(ctx, amount)

    try:
        created = service.create_transaction(
            user_id=user_id,
            date=txn_date,
            amount=txn_amount,
            description=description,
            is_credit_card_payment=bill_payment,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {created.transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {txn_amount:,.2f}")
    if description:
        click.echo(f"  Description: {description}")
    if created.is_credit_card_payment:
        click.echo("  Detected as credit card bill payment")
        outcome = created.reconciliation
        if outcome is not None and outcome.triggered:
            click.echo(
                f"  Linked billing cycle {outcome.linked_cycle} "
                f"({outcome.transactions_linked} transaction(s), {outcome.confidence.value} confidence)"
            )
        else:
            click.echo("  No billing cycle linked automatically; see 'reconcile status'")


def register_commands(cli):
    """Register add commands with main CLI."""
    cli.add_command(add_group, name="add")
