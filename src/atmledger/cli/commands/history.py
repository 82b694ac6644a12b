"""Ledger history, activity and integrity commands."""

import click
from atmledger.cli.account_resolution import resolve_account_or_exit
from atmledger.cli.date_filters import resolve_cli_date_range
from atmledger.cli.error_handling import domain_errors
from atmledger.domain.accounts import AccountStore
from atmledger.domain.activity import ActivityLog
from atmledger.domain.entities import LedgerEntryType
from atmledger.domain.ledger import LedgerLog
from atmledger.utils.date_parser import PERIODS

ENTRY_LABELS = {
    LedgerEntryType.DEPOSIT: "Money Deposit",
    LedgerEntryType.WITHDRAW: "Cash Withdrawal",
    LedgerEntryType.TRANSFER_IN: "Transfer Received",
    LedgerEntryType.TRANSFER_OUT: "Transfer Sent",
}


@click.command("history")
@click.argument("account", metavar="ACCOUNT")
@click.option(
    "--type",
    "entry_type",
    type=click.Choice([t.value for t in LedgerEntryType]),
    help="Only show one entry type",
)
@click.option("--from", "start_date", help="Start date (YYYY-MM-DD or 'today', 'yesterday')")
@click.option("--to", "end_date", help="End date (YYYY-MM-DD), inclusive")
@click.option("--period", type=click.Choice(PERIODS), help="Named date range")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--per-page", type=int, default=10, show_default=True)
@click.pass_context
def history(ctx, account: str, entry_type, start_date, end_date, period, page: int, per_page: int):
    """Show ledger entries for ACCOUNT, newest first."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountStore(db), account)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    with domain_errors(ctx):
        result = LedgerLog(db).history(
            account_id,
            entry_type=LedgerEntryType(entry_type) if entry_type else None,
            start_date=start,
            end_date=end,
            page=page,
            per_page=per_page,
        )

    if not result.entries:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'ID':>5} | {'Date':19s} | {'Type':17s} | {'Amount':>12s} | {'Balance':>12s}")
    click.echo("-" * 78)
    for entry in result.entries:
        sign = "+" if entry.amount > 0 else "-"
        click.echo(
            f"{entry.id:5d} | {entry.created_at:%Y-%m-%d %H:%M:%S} | "
            f"{ENTRY_LABELS[entry.entry_type]:17s} | "
            f"{sign}${abs(entry.amount):>11,.2f} | ${entry.balance_after:>11,.2f}"
        )
    click.echo(f"\nPage {result.page} of {result.total_pages} ({result.total} entries)")


@click.command("activity")
@click.argument("account", metavar="ACCOUNT")
@click.option("--limit", type=int, default=5, show_default=True)
@click.pass_context
def activity(ctx, account: str, limit: int):
    """Show recent security activity for ACCOUNT."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountStore(db), account)

    entries = ActivityLog(db).recent(account_id, limit=limit)
    if not entries:
        click.echo("No activity recorded.")
        return

    for entry in entries:
        click.echo(
            f"{entry.created_at:%Y-%m-%d %H:%M:%S} | {entry.activity_type.value:16s} | "
            f"{entry.description or ''}"
        )


@click.command("verify")
@click.argument("account", required=False, metavar="[ACCOUNT]")
@click.pass_context
def verify(ctx, account: str | None):
    """Replay the ledger and compare it with stored balances.

    Checks every account when ACCOUNT is omitted.
    """
    db = ctx.obj["db"]
    store = AccountStore(db)
    ledger = LedgerLog(db)

    if account is not None:
        account_ids = [resolve_account_or_exit(ctx, store, account)]
    else:
        account_ids = [acc.id for acc in store.list_accounts()]

    with domain_errors(ctx):
        for account_id in account_ids:
            balance = ledger.verify(account_id)
            click.echo(f"Account {account_id}: OK (${balance:,.2f})")


def register_commands(cli):
    """Register history commands with main CLI."""
    cli.add_command(history)
    cli.add_command(activity)
    cli.add_command(verify)
