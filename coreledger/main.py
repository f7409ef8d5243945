from __future__ import annotations

import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator, NoReturn, Optional

import typer

from coreledger.config import get_settings
from coreledger.domain.models import Unit
from coreledger.errors import DecodeError, InitializationError, LedgerError, RestoreError
from coreledger.ledger import Ledger
from coreledger.reporter import print_clients, print_deal, print_deals, print_restore_report
from coreledger.utils.logging import configure_logging

app = typer.Typer(help="Core Ledger: clients, deals, backup and restore.")
clients_app = typer.Typer(help="Manage clients.")
deals_app = typer.Typer(help="Manage deals.")
app.add_typer(clients_app, name="clients")
app.add_typer(deals_app, name="deals")

RESTORE_WARNING = (
    "Do you want to restore from this backup? This will overwrite all current data."
)


def _abort(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@contextmanager
def _open_ledger() -> Generator[Ledger, None, None]:
    """Build, initialize, and always close a ledger; LedgerErrors become one message."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    ledger = Ledger.from_settings(settings)
    try:
        try:
            ledger.initialize()
        except InitializationError as exc:
            _abort(f"Could not open the ledger: {exc}")
        yield ledger
    except LedgerError as exc:
        _abort(str(exc))
    finally:
        ledger.close()


@app.command()
def info() -> None:
    """
    Show effective configuration values and record counts.
    """
    settings = get_settings()
    with _open_ledger() as ledger:
        clients = ledger.repository.count_clients()
        deals = ledger.repository.count_deals()
    typer.echo(
        f"DB={settings.db_path} | backups={settings.backup_dir} | "
        f"atomic_restore={settings.restore_atomic} | clients={clients} deals={deals}"
    )


@app.command()
def init() -> None:
    """
    Create the store and its tables if they do not exist yet.
    """
    with _open_ledger() as ledger:
        typer.echo(f"Database initialized at {ledger.store.path}.")


@clients_app.command("list")
def list_clients() -> None:
    """List clients by name."""
    with _open_ledger() as ledger:
        print_clients(ledger.repository.list_clients())


@clients_app.command("add")
def add_client(
    name: str = typer.Option(..., "--name", "-n", help="Display name."),
    phone: str = typer.Option(..., "--phone", "-p", help="Phone number."),
    company: str = typer.Option("", "--company", "-c", help="Company name (optional)."),
) -> None:
    """Add a client."""
    name, phone, company = name.strip(), phone.strip(), company.strip()
    if not name or not phone:
        _abort("Name and Phone Number are required.")
    with _open_ledger() as ledger:
        client = ledger.repository.add_client(name, company, phone)
    typer.echo(f"Added client {client.name} ({client.id}).")


@deals_app.command("list")
def list_deals(
    search: str = typer.Option("", "--search", "-s", help="Match party name or quality."),
    on: Optional[datetime] = typer.Option(
        None, "--on", formats=["%Y-%m-%d"], help="Only deals on this day (UTC)."
    ),
) -> None:
    """List deals, newest first."""
    with _open_ledger() as ledger:
        deals = ledger.search_deals(search, on.date() if on else None)
        print_deals(deals)


@deals_app.command("show")
def show_deal(deal_id: str = typer.Argument(..., help="Deal id.")) -> None:
    """Show one deal."""
    with _open_ledger() as ledger:
        deal = ledger.repository.get_deal(deal_id)
        if deal is None:
            _abort(f"No deal with id {deal_id}.")
        print_deal(deal)


@deals_app.command("add")
def add_deal(
    party_id: str = typer.Option(..., "--party", help="Client id."),
    quality: str = typer.Option(..., "--quality", "-q", help="Quality / fabric."),
    quantity: float = typer.Option(..., "--quantity", help="Quantity (positive)."),
    rate: float = typer.Option(..., "--rate", help="Rate per unit (positive)."),
    unit: Unit = typer.Option(Unit.METERS, "--unit", "-u", help="Unit of quantity."),
    notes: str = typer.Option("", "--notes", help="Free text."),
    date: Optional[datetime] = typer.Option(
        None,
        "--date",
        formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"],
        help="Deal date (UTC); defaults to now.",
    ),
) -> None:
    """Record a deal with an existing client."""
    quality, notes = quality.strip(), notes.strip()
    if not quality:
        _abort("Please fill all required fields.")
    with _open_ledger() as ledger:
        if party_id not in {client.id for client in ledger.repository.list_clients()}:
            _abort(f"No client with id {party_id}.")
        deal = ledger.repository.add_deal(
            {
                "party_id": party_id,
                "date": date or datetime.now().astimezone(),
                "quality": quality,
                "quantity": quantity,
                "unit": unit,
                "rate": rate,
                "notes": notes,
            }
        )
    typer.echo(f"New deal has been saved ({deal.id}).")


@deals_app.command("delete")
def delete_deal(
    deal_id: str = typer.Argument(..., help="Deal id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete a deal."""
    with _open_ledger() as ledger:
        deal = ledger.repository.get_deal(deal_id)
        if deal is None:
            typer.echo(f"No deal with id {deal_id}; nothing deleted.")
            return
        if not yes:
            typer.confirm(
                f"Are you sure you want to delete the deal with {deal.party_name or 'Unknown'}?",
                abort=True,
            )
        ledger.repository.delete_deal(deal_id)
    typer.echo(f"Deal {deal_id} deleted.")


@app.command("export")
def export_backup(
    out: Optional[Path] = typer.Option(
        None, "--out", "-o", help="Directory for the backup file (default from settings)."
    ),
) -> None:
    """
    Write every client and deal to a timestamped JSON backup file.
    """
    settings = get_settings()
    with _open_ledger() as ledger:
        path = ledger.export_to_directory(out or settings.backup_dir)
    typer.echo(str(path))


@app.command("import")
def import_backup(
    path: Path = typer.Argument(..., help="Backup file to restore."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """
    Replace all clients and deals with the content of a backup file.
    """
    if not yes:
        typer.confirm(RESTORE_WARNING, abort=True)
    with _open_ledger() as ledger:
        try:
            report = ledger.import_from_file(path)
        except (DecodeError, RestoreError) as exc:
            _abort(f"Failed to import backup file: {exc}")
        print_restore_report(report)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
