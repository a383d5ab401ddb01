"""Database initialisation.

``init_db(conn)`` is idempotent and safe to call on an existing database.
"""

from __future__ import annotations

import sqlite3

from epathway.config import settings

# Columns carried by the first version of the ``data`` table.  A table that
# still has them is dropped and recreated from schema.sql.
_RETIRED_COLUMNS = {"on_notice_from", "on_notice_to"}


def _read_schema() -> str:
    return settings.schema_path.read_text(encoding="utf-8")


def _drop_retired_table(conn: sqlite3.Connection) -> bool:
    """Drop a ``data`` table still using the retired on-notice columns.

    Returns ``True`` if the table was dropped.
    """
    columns = {row["name"] for row in conn.execute("PRAGMA table_info('data')")}
    if columns & _RETIRED_COLUMNS:
        with conn:
            conn.execute("DROP TABLE data")
        print("[db] Dropped legacy data table with on-notice columns.")
        return True
    return False


def init_db(conn: sqlite3.Connection) -> None:
    """Create the ``data`` table, replacing a legacy one first.

    Every DDL statement in schema.sql uses ``IF NOT EXISTS`` so calling this
    multiple times on the same database is safe.
    """
    _drop_retired_table(conn)
    conn.executescript(_read_schema())
