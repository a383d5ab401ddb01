"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DuplicatePolicy(str, Enum):
    """What to do when a council reference is already stored."""

    IGNORE = "ignore"
    REPLACE = "replace"


@dataclass
class DevelopmentApplication:
    application_number: str
    address: str
    description: str
    info_url: str
    comment_url: str
    date_scraped: str
    date_received: str
