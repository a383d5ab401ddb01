"""Destinations for scraped applications."""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod

from epathway.db.applications import save_application
from epathway.db.models import DevelopmentApplication, DuplicatePolicy


class ApplicationSink(ABC):
    """Somewhere the crawler can hand applications to, one at a time."""

    @abstractmethod
    def save(self, application: DevelopmentApplication) -> bool:
        """Persist *application*.  Return ``True`` if it was not stored before."""


class SqliteApplicationSink(ApplicationSink):
    """Writes applications to the ``data`` table under a fixed duplicate policy."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        policy: DuplicatePolicy = DuplicatePolicy.IGNORE,
    ) -> None:
        self.conn = conn
        self.policy = DuplicatePolicy(policy)

    def save(self, application: DevelopmentApplication) -> bool:
        inserted = save_application(self.conn, application, self.policy)
        summary = (
            f'application "{application.application_number}" with address '
            f'"{application.address}" and description "{application.description}"'
        )
        if inserted:
            print(f"[STORE] Inserted: {summary}.")
        elif self.policy is DuplicatePolicy.REPLACE:
            print(f"[STORE] Updated: {summary}.")
        else:
            print(f"[STORE] Skipped: {summary} because it was already present.")
        return inserted
