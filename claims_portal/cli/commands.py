"""Claims Portal CLI commands for database setup and claim review."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from claims_portal.config import get_settings
from claims_portal.database import Database
from claims_portal.exceptions import ClaimsError
from claims_portal.logging_config import setup_logging
from claims_portal.modules.claims import ClaimQueryService, ClaimReviewService, ClaimView
from claims_portal.modules.claims.seed import seed_sample_claims
from claims_portal.modules.storage import LocalBlobStore

app = typer.Typer(help="Claims Portal CLI", no_args_is_help=True)
console = Console()

STATUS_STYLES = {"pending": "yellow", "approved": "green", "rejected": "red"}


def _async_run(coro):
    """Run an async coroutine."""
    return asyncio.run(coro)


async def _with_services(action):
    """Open the database, run ``action(database, blobs)`` and close the database again."""
    settings = get_settings()
    database = Database.from_settings(settings)
    blobs = LocalBlobStore.from_settings(settings)
    try:
        return await action(database, blobs)
    finally:
        await database.close()


def _fail(exc: ClaimsError) -> None:
    console.print(f"[red]✗ {exc.message}[/red]")
    raise typer.Exit(code=1)


def _print_claim(claim: ClaimView) -> None:
    style = STATUS_STYLES.get(claim.status, "white")
    console.print(f"\n[bold]Claim #{claim.id}[/bold]  [{style}]{claim.status}[/{style}]")
    console.print(f"  Employee:    {claim.employee_name} ({claim.employee_id})")
    console.print(f"  Title:       {claim.title}")
    console.print(f"  Date:        {claim.date.isoformat()}")
    console.print(f"  Amount:      {claim.amount:,.2f}")
    console.print(f"  Category:    {claim.category}")
    console.print(f"  Description: {claim.description}")
    if claim.response:
        console.print(f"  Response:    {claim.response}")
    for att in claim.attachments:
        console.print(f"  [dim]📎 {att.name} ({att.size} bytes) {att.url}[/dim]")


@app.command("init-db")
def init_db(
    seed: Optional[bool] = typer.Option(None, "--seed/--no-seed", help="Load demo claims into an empty database"),
) -> None:
    """Create the claims tables."""
    setup_logging()
    settings = get_settings()
    do_seed = settings.seed_sample_data if seed is None else seed

    async def _init(database: Database, blobs: LocalBlobStore) -> int:
        await database.init_schema()
        if not do_seed:
            return 0
        async with database.session() as session:
            return await seed_sample_claims(session)

    inserted = _async_run(_with_services(_init))
    console.print("[green]✓[/green] Database ready")
    if inserted:
        console.print(f"[green]✓[/green] Seeded {inserted} sample claims")


@app.command("list")
def list_claims(
    employee: Optional[str] = typer.Option(None, "--employee", "-e", help="Only claims of this employee (ATS0123)"),
) -> None:
    """List claims, newest first."""

    async def _list(database: Database, blobs: LocalBlobStore) -> list[ClaimView]:
        service = ClaimQueryService(database, blobs)
        if employee:
            return await service.get_by_employee(employee)
        return await service.get_all()

    try:
        claims = _async_run(_with_services(_list))
    except ClaimsError as exc:
        _fail(exc)

    if not claims:
        console.print("[yellow]No claims found.[/yellow]")
        return

    table = Table(title="Claims")
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Employee")
    table.add_column("Title")
    table.add_column("Amount", justify="right")
    table.add_column("Status")
    table.add_column("Files", justify="right")
    for c in claims:
        style = STATUS_STYLES.get(c.status, "white")
        table.add_row(
            str(c.id),
            c.date.isoformat(),
            f"{c.employee_name} ({c.employee_id})",
            c.title,
            f"{c.amount:,.2f}",
            f"[{style}]{c.status}[/{style}]",
            str(len(c.attachments)),
        )
    console.print(table)


@app.command()
def show(claim_id: int = typer.Argument(..., help="Claim ID")) -> None:
    """Show one claim with its attachments."""

    async def _show(database: Database, blobs: LocalBlobStore) -> ClaimView:
        return await ClaimQueryService(database, blobs).get_by_id(claim_id)

    try:
        claim = _async_run(_with_services(_show))
    except ClaimsError as exc:
        _fail(exc)
    _print_claim(claim)


@app.command()
def review(
    claim_id: int = typer.Argument(..., help="Claim ID"),
    status: str = typer.Argument(..., help="pending, approved or rejected"),
    response: str = typer.Option("", "--response", "-r", help="Message for the employee"),
) -> None:
    """Approve or reject a claim."""

    async def _review(database: Database, blobs: LocalBlobStore) -> ClaimView:
        return await ClaimReviewService(database, blobs).review(claim_id, status, response)

    try:
        claim = _async_run(_with_services(_review))
    except ClaimsError as exc:
        _fail(exc)
    console.print(f"[green]✓[/green] Claim #{claim.id} is now {claim.status}")
    _print_claim(claim)


if __name__ == "__main__":
    app()
