"""ePathway scraper CLI.

Usage:
    python cli/main.py --help

Commands:
    scrape    crawl the portal once and store new applications
    db init   create the database
    db list   print the stored applications
"""

from __future__ import annotations

import sqlite3
import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from epathway.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from typing import Optional

import httpx
import typer

from epathway.config import settings
from epathway.db import get_connection, init_db
from epathway.db.applications import list_applications
from epathway.db.models import DuplicatePolicy
from epathway.scraper import ScraperError, scrape_applications

app = typer.Typer(
    name="epathway",
    help="ePathway development-application scraper.",
    no_args_is_help=True,
)

db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


@db_app.command("list")
def db_list() -> None:
    """List the stored applications."""
    conn = get_connection()
    init_db(conn)
    try:
        applications = list_applications(conn)
    finally:
        conn.close()
    if not applications:
        typer.echo("[db list] No applications stored.")
        return
    for a in applications:
        typer.echo(f"  {a.application_number}  {a.date_received}  {a.address!r}  {a.description!r}")


@app.command("scrape")
def scrape(
    policy: Optional[DuplicatePolicy] = typer.Option(
        None, help="Already-stored applications: ignore | replace."
    ),
    base_url: Optional[str] = typer.Option(None, help="Portal base URL."),
) -> None:
    """Crawl the portal's last-month date search and store the applications."""
    conn = get_connection()
    try:
        chosen = policy or DuplicatePolicy(settings.duplicate_policy)
        init_db(conn)
        typer.echo(f"[scrape] Crawling {base_url or settings.base_url} (duplicates: {chosen.value})")
        summary = scrape_applications(conn, policy=chosen, base_url=base_url)
    except (ScraperError, httpx.HTTPError, sqlite3.Error, ValueError) as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        conn.close()

    typer.echo(
        f"[scrape] {summary.pages_processed} page(s), {summary.records_found} application(s): "
        f"{summary.records_inserted} new, {summary.records_skipped} already stored."
    )


if __name__ == "__main__":
    app()
