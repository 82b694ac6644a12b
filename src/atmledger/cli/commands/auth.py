"""Authentication commands."""

import click
from atmledger.cli.account_resolution import resolve_account_or_exit
from atmledger.cli.error_handling import domain_errors
from atmledger.domain.lockout import LockoutGuard


@click.command("login")
@click.argument("email", metavar="EMAIL")
@click.option("--pin", prompt=True, hide_input=True, help="Account PIN")
@click.option("--ip", "ip_address", help="Client IP address to record")
@click.pass_context
def login(ctx, email: str, pin: str, ip_address: str | None):
    """Check EMAIL and PIN, applying the lockout policy.

    Five consecutive wrong PINs lock the account for the configured time.
    """
    guard = LockoutGuard(ctx.obj["db"], policy=ctx.obj["policy"])

    with domain_errors(ctx):
        account_id = guard.authenticate(email, pin, ip_address=ip_address, user_agent="atmledger-cli")
    click.echo(f"Authenticated (account ID: {account_id})")


@click.command("logout")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def logout(ctx, account: str):
    """Record a logout for ACCOUNT."""
    guard = LockoutGuard(ctx.obj["db"], policy=ctx.obj["policy"])
    account_id = resolve_account_or_exit(ctx, guard.accounts, account)

    with domain_errors(ctx):
        guard.logout(account_id)
    click.echo("Logged out")


@click.command("change-pin")
@click.argument("account", metavar="ACCOUNT")
@click.option("--current-pin", prompt=True, hide_input=True, help="Current PIN")
@click.option("--new-pin", prompt=True, hide_input=True, confirmation_prompt=True, help="New 4-6 digit PIN")
@click.pass_context
def change_pin(ctx, account: str, current_pin: str, new_pin: str):
    """Change the PIN of ACCOUNT (email or ID)."""
    guard = LockoutGuard(ctx.obj["db"], policy=ctx.obj["policy"])
    account_id = resolve_account_or_exit(ctx, guard.accounts, account)

    with domain_errors(ctx):
        guard.change_pin(account_id, current_pin, new_pin)
    click.echo("PIN changed successfully.")


def register_commands(cli):
    """Register authentication commands with main CLI."""
    cli.add_command(login)
    cli.add_command(logout)
    cli.add_command(change_pin)
