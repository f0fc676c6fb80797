from __future__ import annotations

import asyncio
from datetime import date, datetime
import json
from pathlib import Path

from dotenv import load_dotenv
import typer

from bnpere.adapters.store.sql import SqlDocumentStore
from bnpere.core.config import load_sync_config_from_env
from bnpere.core.logging import configure_logging
from bnpere.ledger.balance_ledger import BalanceLedger
from bnpere.sync.factory import create_orchestrator

# Load environment variables from .env
load_dotenv()

app = typer.Typer(
    help="bnpere — employee savings sync job.",
    no_args_is_help=True,
)


def _parse_day(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}") from e


@app.command("sync")
def sync_cmd(
    day: str | None = typer.Option(
        None, "--date", help="Day to record balances for (YYYY-MM-DD, default today)"
    ),
    export_path: Path | None = typer.Option(
        None,
        "--export-path",
        help="Export file for standalone mode (overrides BNPERE_EXPORT_PATH)",
    ),
) -> None:
    """Fetch accounts and operations, then update balance histories."""
    today = _parse_day(day)
    try:
        config = load_sync_config_from_env(export_path=export_path)
    except ValueError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2) from e

    configure_logging(config.log_level)
    store = SqlDocumentStore(config.database_url)
    store.initialize()

    orchestrator = create_orchestrator(config, store)
    result = asyncio.run(orchestrator.run(today=today))

    if result.success:
        typer.echo(
            f"Sync done: {len(result.accounts)} accounts, "
            f"{len(result.transactions)} transactions, "
            f"{len(result.histories)} balance histories"
        )
        return

    failed_at = result.failed_at.value if result.failed_at else "start"
    typer.echo(
        f"Sync failed after {failed_at} ({result.error_kind}): {result.error}",
        err=True,
    )
    raise typer.Exit(code=1)


@app.command("history")
def history_cmd(
    account_id: str = typer.Option(..., help="Storage id of the account"),
    year: int | None = typer.Option(None, help="Calendar year (default current)"),
    database_url: str = typer.Option(
        "sqlite:///bnpere.db", envvar="BNPERE_DATABASE_URL", help="Database URL"
    ),
) -> None:
    """Print the balance history of an account for a year."""
    store = SqlDocumentStore(database_url)
    store.initialize()
    ledger = BalanceLedger(store)
    history = asyncio.run(
        ledger.get_balance_history(year or date.today().year, account_id)
    )
    typer.echo(json.dumps(dict(sorted(history["balances"].items())), indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
