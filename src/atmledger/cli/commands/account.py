"""Account management commands."""

from datetime import timedelta

import click
from atmledger.cli.account_resolution import resolve_account_or_exit
from atmledger.cli.error_handling import domain_errors
from atmledger.domain.accounts import AccountStore
from atmledger.domain.activity import ActivityLog
from atmledger.domain.entities import Account, Role
from atmledger.domain.lockout import LockoutGuard
from atmledger.domain.rate_limit import RateLimiter
from atmledger.utils.clock import utcnow


def _status(account: Account) -> str:
    if account.is_locked(utcnow()):
        return f"locked until {account.lock_until:%Y-%m-%d %H:%M:%S} UTC"
    return "active"


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("register")
@click.argument("name", metavar="NAME")
@click.argument("email", metavar="EMAIL")
@click.option("--pin", prompt=True, hide_input=True, confirmation_prompt=True, help="4-6 digit PIN")
@click.option("--admin", is_flag=True, help="Create an administrator account")
@click.pass_context
def register_account(ctx, name: str, email: str, pin: str, admin: bool):
    """Register a new account with a zero balance.

    Examples:
        atmledger account register "Jane Doe" jane@example.com --pin 1234
        atmledger account register "Root Admin" admin@example.com --admin
    """
    db = ctx.obj["db"]
    store = AccountStore(db, activity=ActivityLog(db))

    with domain_errors(ctx):
        account = store.register(
            name=name, email=email, pin=pin, role=Role.ADMINISTRATOR if admin else Role.STANDARD
        )
    click.echo(f"Registered account '{account.name}' <{account.email}> (ID: {account.id})")
    if admin:
        click.echo("Role: administrator")


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show balance and authentication state.

    ACCOUNT can be an email or an account ID.
    """
    db = ctx.obj["db"]
    store = AccountStore(db)
    account_id = resolve_account_or_exit(ctx, store, account)
    acc = store.get(account_id)

    click.echo(f"ID:              {acc.id}")
    click.echo(f"Name:            {acc.name}")
    click.echo(f"Email:           {acc.email}")
    click.echo(f"Role:            {acc.role.value}")
    click.echo(f"Balance:         ${acc.balance:,.2f}")
    click.echo(f"Failed attempts: {acc.failed_attempts}")
    click.echo(f"Status:          {_status(acc)}")

    limiter = RateLimiter(db, ctx.obj["policy"])
    click.echo(f"Withdrawals left (24h): ${limiter.withdrawal_headroom(acc.id):,.2f}")
    click.echo(f"Transfers left (24h):   ${limiter.transfer_headroom(acc.id):,.2f}")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    store = AccountStore(db)

    accounts = store.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.email:30s} | {acc.role.value:13s} | "
            f"${acc.balance:>12,.2f} | {_status(acc)}"
        )


@account_group.command("lock")
@click.argument("account", metavar="ACCOUNT")
@click.option("--hours", type=float, help="Lock duration in hours (defaults to policy)")
@click.pass_context
def lock_account(ctx, account: str, hours: float | None):
    """Lock a standard account. Administrators cannot be locked.

    Examples:
        atmledger account lock jane@example.com
        atmledger account lock 3 --hours 2
    """
    db = ctx.obj["db"]
    guard = LockoutGuard(db, policy=ctx.obj["policy"])
    account_id = resolve_account_or_exit(ctx, guard.accounts, account)

    with domain_errors(ctx):
        acc = guard.admin_lock(account_id, timedelta(hours=hours) if hours else None)
    click.echo(f"Locked account '{acc.email}' until {acc.lock_until:%Y-%m-%d %H:%M:%S} UTC")


@account_group.command("unlock")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def unlock_account(ctx, account: str):
    """Unlock an account and clear its failed attempts."""
    db = ctx.obj["db"]
    guard = LockoutGuard(db, policy=ctx.obj["policy"])
    account_id = resolve_account_or_exit(ctx, guard.accounts, account)

    with domain_errors(ctx):
        acc = guard.admin_unlock(account_id)
    click.echo(f"Unlocked account '{acc.email}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
