"""Transaction listing commands."""

import click
from cardrecon.cli.error_handling import handle_domain_error
from cardrecon.cli.user_resolution import resolve_user_or_exit
from cardrecon.domain.errors import DomainError
from cardrecon.domain.transaction import TransactionService
from cardrecon.domain.user import UserService
from cardrecon.utils.date_parser import parse_date, parse_billing_month


@click.group()
def transaction_group():
    """Inspect transactions."""
    pass


@transaction_group.command("list")
@click.option("--user", required=True, help="User name or ID")
@click.option("--start-date", help="Start date for bank transactions (YYYY-MM-DD or 'yesterday')")
@click.option("--end-date", help="End date for bank transactions (YYYY-MM-DD or 'today')")
@click.option("--cycle", help="Show credit card transactions of this billing cycle instead")
@click.option("--card", is_flag=True, help="Show credit card transactions instead of bank transactions")
@click.option("--pending", is_flag=True, help="With --card/--cycle, only transactions not linked to a bill")
@click.pass_context
def list_transactions(
    ctx,
    user: str,
    start_date: str | None,
    end_date: str | None,
    cycle: str | None,
    card: bool,
    pending: bool,
):
    """View bank or credit card transactions.

    Bank transactions linked to a billing cycle show the original bill
    amount next to their expanded (zero) amount.
    """
    db = ctx.obj["db"]
    service = TransactionService(db, ctx.obj["config"])
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    if cycle is not None or card:
        billing_cycle = None
        if cycle is not None:
            try:
                billing_cycle = parse_billing_month(cycle)
            except ValueError as e:
                click.echo(f"Error: Invalid billing cycle: {e}", err=True)
                ctx.exit(1)
        try:
            purchases = service.list_credit_card_transactions(
                user_id, billing_cycle=billing_cycle, pending_only=pending
            )
        except DomainError as e:
            handle_domain_error(ctx, e)

        if not purchases:
            click.echo("No credit card transactions found.")
            return

        click.echo(f"\nFound {len(purchases)} credit card transaction(s):")
        click.echo("-" * 100)
        click.echo(f"{'ID':>5} | {'Date':10} | {'Cycle':7} | {'Amount':>12} | {'Bill':>5} | Title")
        click.echo("-" * 100)
        for txn in purchases:
            bill = str(txn.credit_card_payment_id) if txn.is_linked else "-"
            title = txn.title
            if txn.installment_label and txn.installment_label not in title:
                title = f"{title} ({txn.installment_label})"
            click.echo(
                f"{txn.id:5d} | {txn.date} | {txn.billing_cycle} | {txn.amount:12,.2f} | {bill:>5} | {title}"
            )
        return

    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    transactions = service.list_transactions(user_id, start_date=start, end_date=end)
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':>5} | {'Date':10} | {'Amount':>12} | {'Bill':4} | Description")
    click.echo("-" * 100)
    for txn in transactions:
        amount_str = f"{txn.amount:12,.2f}"
        if txn.original_amount is not None:
            amount_str = f"{amount_str} (was {txn.original_amount:,.2f})"
        flag = "yes" if txn.is_credit_card_payment else ""
        click.echo(f"{txn.id:5d} | {txn.date} | {amount_str} | {flag:4} | {txn.description or ''}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
