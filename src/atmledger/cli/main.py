"""Main CLI entry point."""

import logging

import click
from atmledger.database.factories import create_sqlite_database
from atmledger.domain.errors import ValidationError
from atmledger.domain.policy import LedgerPolicy

# Import and register all commands at module level
from atmledger.cli.commands import account, auth, history, money


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides ATMLEDGER_DB_PATH environment variable)",
    envvar="ATMLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="ATMLEDGER_LOG_LEVEL",
    help="Operational log verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """atmledger - Account ledger and transfer engine.

    Register accounts, move money between them and inspect the audit
    trail. Limits are read from ATMLEDGER_* environment variables.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["policy"] = LedgerPolicy.from_env()
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
money.register_commands(cli)
auth.register_commands(cli)
history.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
