from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from coreledger.backup.restore import RestoreReport
from coreledger.domain.models import Client, Deal


def _console(console: Optional[Console]) -> Console:
    return console or Console()


def print_clients(clients: Sequence[Client], console: Optional[Console] = None) -> None:
    """Render clients as a rich table, in the order given."""
    console = _console(console)

    if not clients:
        console.print("[yellow]No clients yet.[/yellow]")
        return

    table = Table(title="Clients", box=box.ROUNDED, caption=f"{len(clients)} client(s)")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Company")
    table.add_column("Phone", style="magenta", no_wrap=True)
    table.add_column("Id", style="dim", no_wrap=True)

    for client in clients:
        table.add_row(client.name, client.company_name, client.phone_number, client.id)

    console.print(table)


def print_deals(deals: Sequence[Deal], console: Optional[Console] = None) -> None:
    """
    Render deals as a rich table.

    Deals whose client no longer exists show "Unknown" as the party.
    """
    console = _console(console)

    if not deals:
        console.print("[yellow]No deals found.[/yellow]")
        return

    table = Table(title="Ledger", box=box.ROUNDED, caption="Newest first")
    table.add_column("Date", style="green", no_wrap=True)
    table.add_column("Party", style="cyan")
    table.add_column("Quality")
    table.add_column("Quantity", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Amount", justify="right", style="bold green")
    table.add_column("Id", style="dim", no_wrap=True)

    for deal in deals:
        table.add_row(
            f"{deal.date:%Y-%m-%d}",
            deal.party_name or "[red]Unknown[/red]",
            deal.quality,
            f"{deal.quantity:g} {deal.unit.value}",
            f"{deal.rate:,.2f}",
            f"{deal.amount:,.2f}",
            deal.id,
        )

    console.print(table)


def print_deal(deal: Deal, console: Optional[Console] = None) -> None:
    """Render a single deal as label/value lines."""
    console = _console(console)
    console.print(f"[bold]Party:[/bold] {deal.party_name or 'Unknown'}")
    console.print(f"[bold]Date:[/bold] {deal.date:%Y-%m-%d %H:%M} UTC")
    console.print(f"[bold]Quality:[/bold] {deal.quality}")
    console.print(f"[bold]Quantity:[/bold] {deal.quantity:g} {deal.unit.value}")
    console.print(f"[bold]Rate:[/bold] {deal.rate:,.2f}")
    console.print(f"[bold]Amount:[/bold] {deal.amount:,.2f}")
    if deal.notes:
        console.print(f"[bold]Notes:[/bold] {deal.notes}")
    console.print(f"[dim]Id: {deal.id}[/dim]")


def print_restore_report(report: RestoreReport, console: Optional[Console] = None) -> None:
    """Summarize a restore, listing any deals that were skipped."""
    console = _console(console)
    console.print(f"[green]{report.message}[/green]")
    if not report.failed_deals:
        return

    table = Table(
        title=f"{len(report.failed_deals)} deal(s) skipped",
        box=box.ROUNDED,
        caption=f"{report.deals_restored} of {report.deals_found} deals restored",
    )
    table.add_column("#", justify="right")
    table.add_column("Id", no_wrap=True)
    table.add_column("Reason", style="red")
    for failure in report.failed_deals:
        table.add_row(str(failure.index + 1), failure.deal_id or "-", failure.reason)
    console.print(table)


__all__ = ["print_clients", "print_deals", "print_deal", "print_restore_report"]
