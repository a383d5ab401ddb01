"""Database layer package.

Public re-exports so callers can write::

    from epathway.db import get_connection, init_db
    from epathway.db import applications
"""

from epathway.db.connection import get_connection
from epathway.db.migrations import init_db
from epathway.db import applications

__all__ = ["get_connection", "init_db", "applications"]
