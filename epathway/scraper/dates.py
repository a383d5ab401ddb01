"""Date and text normalisation helpers."""

from __future__ import annotations

import calendar
import re
from datetime import date
from typing import Optional

# Day of month may drop its leading zero, month may not ("8/03/2024").
_RECEIVED_DATE = re.compile(r"^(\d{1,2})/(\d{2})/(\d{4})$")
_WHITESPACE = re.compile(r"\s+")


def normalise_whitespace(text: str) -> str:
    """Collapse runs of whitespace (including ``&nbsp;``) into single spaces."""
    return _WHITESPACE.sub(" ", (text or "").replace("\xa0", " ")).strip()


def parse_received_date(text: str) -> Optional[date]:
    """Parse a ``D/MM/YYYY`` lodgement date.

    Returns ``None`` for anything else, including impossible dates such as
    ``31/02/2024``.
    """
    match = _RECEIVED_DATE.match((text or "").strip())
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def one_month_before(day: date) -> date:
    """Return the same day one calendar month earlier, clamped to month end."""
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def format_form_date(day: date) -> str:
    """Format *day* the way the portal's date text boxes expect (``DD/MM/YYYY``)."""
    return day.strftime("%d/%m/%Y")


def format_iso_date(day: date) -> str:
    return day.strftime("%Y-%m-%d")
