"""Deposit, withdraw and transfer commands."""

import click
from atmledger.cli.account_resolution import resolve_account_or_exit
from atmledger.cli.error_handling import domain_errors
from atmledger.domain.transfer import TransferEngine


def _engine(ctx) -> TransferEngine:
    return TransferEngine(ctx.obj["db"], policy=ctx.obj["policy"])


@click.command("deposit")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.pass_context
def deposit(ctx, account: str, amount: str):
    """Deposit AMOUNT into ACCOUNT (email or ID).

    Examples:
        atmledger deposit jane@example.com 200
        atmledger deposit 1 "$1,250.00"
    """
    engine = _engine(ctx)
    account_id = resolve_account_or_exit(ctx, engine.accounts, account)

    with domain_errors(ctx):
        result = engine.deposit(account_id, amount)
    click.echo(f"Successfully deposited ${result.amount:,.2f}")
    click.echo(f"  New balance: ${result.new_balance:,.2f}")


@click.command("withdraw")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.pass_context
def withdraw(ctx, account: str, amount: str):
    """Withdraw AMOUNT from ACCOUNT (email or ID).

    Withdrawals are capped per trailing 24 hours.
    """
    engine = _engine(ctx)
    account_id = resolve_account_or_exit(ctx, engine.accounts, account)

    with domain_errors(ctx):
        result = engine.withdraw(account_id, amount)
    click.echo(f"Successfully withdrew ${result.amount:,.2f}")
    click.echo(f"  New balance: ${result.new_balance:,.2f}")


@click.command("transfer")
@click.argument("sender", metavar="SENDER")
@click.argument("recipient_email", metavar="RECIPIENT_EMAIL")
@click.argument("amount", metavar="AMOUNT")
@click.pass_context
def transfer(ctx, sender: str, recipient_email: str, amount: str):
    """Transfer AMOUNT from SENDER (email or ID) to RECIPIENT_EMAIL.

    Examples:
        atmledger transfer jane@example.com john@example.com 50
    """
    engine = _engine(ctx)
    sender_id = resolve_account_or_exit(ctx, engine.accounts, sender)

    with domain_errors(ctx):
        result = engine.transfer(sender_id, recipient_email, amount)
    click.echo(f"Successfully transferred ${result.amount:,.2f} to account {result.recipient_id}")
    click.echo(f"  New balance: ${result.sender_new_balance:,.2f}")


def register_commands(cli):
    """Register money movement commands with main CLI."""
    cli.add_command(deposit)
    cli.add_command(withdraw)
    cli.add_command(transfer)
