"""Insert and query operations for the ``data`` table."""

from __future__ import annotations

import sqlite3
from typing import Optional

from epathway.db.models import DevelopmentApplication, DuplicatePolicy

_INSERT_VERBS = {
    DuplicatePolicy.IGNORE: "INSERT OR IGNORE",
    DuplicatePolicy.REPLACE: "INSERT OR REPLACE",
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_application(row: sqlite3.Row) -> DevelopmentApplication:
    return DevelopmentApplication(
        application_number=row["council_reference"],
        address=row["address"],
        description=row["description"],
        info_url=row["info_url"],
        comment_url=row["comment_url"],
        date_scraped=row["date_scraped"],
        date_received=row["date_received"],
    )


def _exists(conn: sqlite3.Connection, application_number: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM data WHERE council_reference = ?", (application_number,)
    ).fetchone()
    return row is not None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def save_application(
    conn: sqlite3.Connection,
    application: DevelopmentApplication,
    policy: DuplicatePolicy = DuplicatePolicy.IGNORE,
) -> bool:
    """Store *application* keyed on its council reference.

    Under ``DuplicatePolicy.IGNORE`` an existing row is left untouched; under
    ``DuplicatePolicy.REPLACE`` its other columns are overwritten.  Either way
    at most one row exists per council reference.

    Returns:
        ``True`` if no row existed for the reference before this call.
    """
    policy = DuplicatePolicy(policy)
    existed = _exists(conn, application.application_number)

    with conn:
        conn.execute(
            f"""
            {_INSERT_VERBS[policy]} INTO data
                (council_reference, address, description, info_url,
                 comment_url, date_scraped, date_received)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,  # noqa: S608
            (
                application.application_number,
                application.address,
                application.description,
                application.info_url,
                application.comment_url,
                application.date_scraped,
                application.date_received,
            ),
        )

    return not existed


def get_application(
    conn: sqlite3.Connection, application_number: str
) -> Optional[DevelopmentApplication]:
    """Fetch a single application by council reference.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM data WHERE council_reference = ?", (application_number,)
    ).fetchone()
    return _row_to_application(row) if row else None


def list_applications(conn: sqlite3.Connection) -> list[DevelopmentApplication]:
    """Return every stored application ordered by council reference."""
    rows = conn.execute(
        "SELECT * FROM data ORDER BY council_reference"
    ).fetchall()
    return [_row_to_application(r) for r in rows]


def count_applications(conn: sqlite3.Connection) -> int:
    row = conn.execute("SELECT COUNT(*) FROM data").fetchone()
    return row[0]
