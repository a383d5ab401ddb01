"""Tests for the database layer.

All tests use an in-memory SQLite database so they are:
- Fast (no disk I/O)
- Isolated (each fixture gets a fresh DB)
- Side-effect free (nothing written to ~/.epathway_data)
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from epathway.db.applications import (
    count_applications,
    get_application,
    list_applications,
    save_application,
)
from epathway.db.connection import get_connection
from epathway.db.migrations import init_db
from epathway.db.models import DevelopmentApplication, DuplicatePolicy
from epathway.scraper.sink import SqliteApplicationSink


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")  # type: ignore[arg-type]
    init_db(connection)
    yield connection
    connection.close()


def _application(number: str = "123/2024", **overrides: str) -> DevelopmentApplication:
    fields = dict(
        application_number=number,
        address="1 Smith St",
        description="Carport",
        info_url="https://epathway.example.gov.au/ePathway/Production/Web/default.aspx",
        comment_url="mailto:planning@example.gov.au",
        date_scraped="2024-03-20",
        date_received="2024-03-08",
    )
    fields.update(overrides)
    return DevelopmentApplication(**fields)


# ---------------------------------------------------------------------------
# connection / init
# ---------------------------------------------------------------------------

class TestInitDb:
    def test_data_table_columns(self, conn: sqlite3.Connection) -> None:
        columns = [row["name"] for row in conn.execute("PRAGMA table_info('data')")]
        assert columns == [
            "council_reference",
            "address",
            "description",
            "info_url",
            "comment_url",
            "date_scraped",
            "date_received",
        ]

    def test_init_db_is_idempotent(self, conn: sqlite3.Connection) -> None:
        save_application(conn, _application())
        init_db(conn)
        assert count_applications(conn) == 1

    def test_legacy_on_notice_table_is_replaced(self) -> None:
        connection = get_connection(db_path=":memory:")  # type: ignore[arg-type]
        connection.execute(
            "CREATE TABLE data (council_reference TEXT PRIMARY KEY, address TEXT, "
            "description TEXT, info_url TEXT, comment_url TEXT, date_scraped TEXT, "
            "date_received TEXT, on_notice_from TEXT, on_notice_to TEXT)"
        )
        init_db(connection)

        columns = {row["name"] for row in connection.execute("PRAGMA table_info('data')")}
        assert "on_notice_from" not in columns
        assert "on_notice_to" not in columns
        connection.close()

    def test_on_disk_database(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr("epathway.config.settings.workspace_dir", tmp_path / "ws")
        connection = get_connection()
        init_db(connection)
        save_application(connection, _application())
        connection.close()

        assert (tmp_path / "ws" / "data.sqlite").exists()


# ---------------------------------------------------------------------------
# save_application
# ---------------------------------------------------------------------------

class TestSaveApplication:
    def test_new_row_reports_inserted(self, conn: sqlite3.Connection) -> None:
        assert save_application(conn, _application()) is True
        assert get_application(conn, "123/2024") == _application()

    def test_ignore_keeps_first_copy(self, conn: sqlite3.Connection) -> None:
        save_application(conn, _application())
        inserted = save_application(conn, _application(description="Changed"))

        assert inserted is False
        assert count_applications(conn) == 1
        assert get_application(conn, "123/2024").description == "Carport"

    def test_replace_overwrites_other_columns(self, conn: sqlite3.Connection) -> None:
        save_application(conn, _application())
        inserted = save_application(
            conn,
            _application(description="Changed", date_scraped="2024-04-01"),
            DuplicatePolicy.REPLACE,
        )

        assert inserted is False
        assert count_applications(conn) == 1
        stored = get_application(conn, "123/2024")
        assert stored.description == "Changed"
        assert stored.date_scraped == "2024-04-01"

    def test_replace_of_new_row_reports_inserted(self, conn: sqlite3.Connection) -> None:
        assert save_application(conn, _application(), DuplicatePolicy.REPLACE) is True

    def test_policy_accepts_plain_string(self, conn: sqlite3.Connection) -> None:
        save_application(conn, _application())
        save_application(conn, _application(address="2 Smith St"), "replace")  # type: ignore[arg-type]
        assert get_application(conn, "123/2024").address == "2 Smith St"

    def test_unknown_policy_rejected(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(ValueError):
            save_application(conn, _application(), "merge")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# queries
# ---------------------------------------------------------------------------

class TestQueries:
    def test_get_missing_returns_none(self, conn: sqlite3.Connection) -> None:
        assert get_application(conn, "999/2024") is None

    def test_list_ordered_by_reference(self, conn: sqlite3.Connection) -> None:
        for number in ("300/2024", "100/2024", "200/2024"):
            save_application(conn, _application(number))
        assert [a.application_number for a in list_applications(conn)] == [
            "100/2024",
            "200/2024",
            "300/2024",
        ]

    def test_count_empty(self, conn: sqlite3.Connection) -> None:
        assert count_applications(conn) == 0


# ---------------------------------------------------------------------------
# SqliteApplicationSink
# ---------------------------------------------------------------------------

class TestSqliteSink:
    def test_inserted_then_skipped(self, conn: sqlite3.Connection, capsys) -> None:
        sink = SqliteApplicationSink(conn)
        assert sink.save(_application()) is True
        assert sink.save(_application()) is False

        out = capsys.readouterr().out
        assert '[STORE] Inserted: application "123/2024"' in out
        assert '[STORE] Skipped: application "123/2024"' in out

    def test_replace_logs_update(self, conn: sqlite3.Connection, capsys) -> None:
        sink = SqliteApplicationSink(conn, DuplicatePolicy.REPLACE)
        sink.save(_application())
        sink.save(_application(description="Changed"))

        assert '[STORE] Updated: application "123/2024"' in capsys.readouterr().out
        assert get_application(conn, "123/2024").description == "Changed"
