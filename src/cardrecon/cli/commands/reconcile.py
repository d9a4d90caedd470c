"""Billing cycle reconciliation commands."""

import click
from cardrecon.cli.error_handling import handle_domain_error
from cardrecon.cli.user_resolution import resolve_user_or_exit
from cardrecon.domain.errors import DomainError
from cardrecon.domain.manual_link import ManualLinkService
from cardrecon.domain.reconciliation import ReconciliationService
from cardrecon.domain.user import UserService
from cardrecon.utils.date_parser import parse_billing_month


@click.group()
def reconcile_group():
    """Reconcile credit card billing cycles with bill payments."""
    pass


def _parse_cycle_or_exit(ctx, cycle: str) -> str:
    try:
        return parse_billing_month(cycle)
    except ValueError as e:
        click.echo(f"Error: Invalid billing cycle: {e}", err=True)
        ctx.exit(1)


@reconcile_group.command("status")
@click.option("--user", required=True, help="User name or ID")
@click.pass_context
def status(ctx, user: str):
    """Show pending billing cycles with candidate bills, and linked cycles.

    Nothing is linked by this command.
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db, ctx.obj["config"])
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    state = service.get_pending_reconciliations(user_id)
    summary = state.summary

    click.echo(
        f"\nPending: {summary.pending_cycle_count} cycle(s), "
        f"{summary.pending_transaction_count} transaction(s), total {summary.pending_total_amount:,.2f}"
    )
    click.echo(f"Linked: {summary.linked_cycle_count} cycle(s), {summary.mismatched_cycle_count} with mismatch")

    if state.pending_cycles:
        click.echo("\nPending cycles:")
        click.echo("-" * 80)
        for pending in state.pending_cycles:
            cycle = pending.cycle
            click.echo(
                f"{cycle.billing_cycle} | {cycle.transaction_count:3d} txn | "
                f"{cycle.total_amount:12,.2f} | {cycle.oldest_date} .. {cycle.newest_date} | {pending.status.value}"
            )
            for match in pending.candidates:
                click.echo(
                    f"    bill {match.bill_id:4d} | {match.date} | {match.amount:12,.2f} | "
                    f"diff {match.amount_difference:,.2f} ({match.difference_percent}%) | "
                    f"{match.confidence.value} | {match.description or ''}"
                )

    if state.linked_cycles:
        click.echo("\nLinked cycles:")
        click.echo("-" * 80)
        for linked in state.linked_cycles:
            marker = " MISMATCH" if linked.has_mismatch else ""
            click.echo(
                f"{linked.billing_cycle} | bill {linked.bill.id:4d} | bill {linked.bill.effective_amount:12,.2f} | "
                f"cycle {linked.total_amount:12,.2f} | diff {linked.amount_difference:,.2f}{marker}"
            )


@reconcile_group.command("run")
@click.option("--user", required=True, help="User name or ID")
@click.option("--cycle", help="Only reconcile this billing cycle (YYYY-MM)")
@click.pass_context
def run(ctx, user: str, cycle: str | None):
    """Link every pending cycle that has exactly one confident bill match."""
    db = ctx.obj["db"]
    service = ReconciliationService(db, ctx.obj["config"])
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    billing_cycle = _parse_cycle_or_exit(ctx, cycle) if cycle is not None else None
    try:
        result = service.reconcile(user_id, billing_cycle)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nAuto-linked: {len(result.auto_linked)}")
    for linked in result.auto_linked:
        click.echo(
            f"  {linked.billing_cycle} -> bill {linked.bill_id} "
            f"({linked.transactions_linked} transaction(s), {linked.confidence.value}, diff {linked.amount_difference:,.2f})"
        )
    click.echo(f"Requires selection: {len(result.requires_selection)}")
    for pending in result.requires_selection:
        bills = ", ".join(f"{m.bill_id} ({m.confidence.value})" for m in pending.candidates)
        click.echo(f"  {pending.billing_cycle}: {bills}")
    click.echo(f"No match: {len(result.no_match)}")
    for key in result.no_match:
        click.echo(f"  {key}")


@reconcile_group.command("link")
@click.argument("cycle", metavar="BILLING_CYCLE")
@click.argument("bill_id", type=int)
@click.option("--user", required=True, help="User name or ID")
@click.option("--force", is_flag=True, help="Link even if the amount difference exceeds tolerance")
@click.pass_context
def link(ctx, cycle: str, bill_id: int, user: str, force: bool):
    """Link a billing cycle to a chosen bill payment.

    Examples:
        cardrecon reconcile link 2024-11 42 --user alice
        cardrecon reconcile link 2024-11 42 --user alice --force
    """
    db = ctx.obj["db"]
    service = ManualLinkService(db, ctx.obj["config"])
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    billing_cycle = _parse_cycle_or_exit(ctx, cycle)
    try:
        result = service.link(user_id, billing_cycle, bill_id, force=force)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Linked {result.transactions_linked} transaction(s) of {result.billing_cycle} to bill {result.bill_id}"
    )
    click.echo(f"  Amount difference: {result.amount_difference:,.2f}")
    if result.has_mismatch:
        click.echo("  Warning: difference exceeds tolerance")


@reconcile_group.command("unlink")
@click.argument("bill_id", type=int)
@click.option("--user", required=True, help="User name or ID")
@click.pass_context
def unlink(ctx, bill_id: int, user: str):
    """Unlink a bill payment from its billing cycle and restore its amount."""
    db = ctx.obj["db"]
    service = ManualLinkService(db, ctx.obj["config"])
    user_id = resolve_user_or_exit(ctx, UserService(db), user)

    try:
        result = service.unlink(user_id, bill_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if result.affected_transaction_count == 0:
        click.echo(f"Bill {bill_id} was not linked (amount {result.restored_amount:,.2f})")
        return
    click.echo(
        f"Unlinked {result.affected_transaction_count} transaction(s) from bill {bill_id}, "
        f"restored amount {result.restored_amount:,.2f}"
    )


def register_commands(cli):
    """Register reconcile commands with main CLI."""
    cli.add_command(reconcile_group, name="reconcile")
