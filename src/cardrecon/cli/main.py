"""Main CLI entry point."""

import logging

import click
from cardrecon.database.factories import create_sqlite_database
from cardrecon.domain.errors import DomainError
from cardrecon.domain.matching_config import MatchingConfig

# Import and register all commands at module level
from cardrecon.cli.commands import (
    user,
    add,
    import_cmd,
    transaction,
    reconcile,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CARDRECON_DB_PATH environment variable)",
    envvar="CARDRECON_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Cardrecon - Credit card bill reconciliation.

    Group credit card purchases into billing cycles and link each cycle to
    the bank transaction that paid its bill, so card spending is not
    counted twice.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
        logging.getLogger("cardrecon").setLevel(logging.DEBUG)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["config"] = MatchingConfig.from_environment()
        except DomainError as e:
            raise click.ClickException(f"Invalid matching configuration: {e}")
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
add.register_commands(cli)
import_cmd.register_commands(cli)
transaction.register_commands(cli)
reconcile.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
