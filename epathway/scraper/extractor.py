"""Record extraction: turns one results page into development applications."""

from __future__ import annotations

import re
from datetime import date
from typing import List, Optional, Sequence

from epathway.db.models import DevelopmentApplication
from epathway.scraper.dates import format_iso_date, parse_received_date
from epathway.scraper.html import HtmlDocument

# Council references contain "<digits>/<digits>", e.g. "123/2024" or "DA 211/1234/24".
_APPLICATION_NUMBER = re.compile(r"\d+/\d+")

_MIN_CELLS = 4


def parse_row(
    cells: Sequence[str],
    info_url: str,
    comment_url: str,
    scrape_date: date,
) -> Optional[DevelopmentApplication]:
    """Build an application from one row's cell texts.

    Columns are positional: reference, date received, description, address.
    Returns ``None`` for rows that are too short, whose reference does not
    contain ``<digits>/<digits>`` or whose date does not parse.  Those are
    the headings and paging rows of the results table.
    """
    if len(cells) < _MIN_CELLS:
        return None

    application_number, received_text, description, address = cells[:_MIN_CELLS]
    if not _APPLICATION_NUMBER.search(application_number):
        return None
    received = parse_received_date(received_text)
    if received is None:
        return None

    return DevelopmentApplication(
        application_number=application_number,
        address=address,
        description=description,
        info_url=info_url,
        comment_url=comment_url,
        date_scraped=format_iso_date(scrape_date),
        date_received=format_iso_date(received),
    )


def extract_applications(
    doc: HtmlDocument,
    info_url: str,
    comment_url: str,
    scrape_date: date,
) -> List[DevelopmentApplication]:
    """Return every well-formed application row on *doc*, in page order."""
    applications: List[DevelopmentApplication] = []
    for cells in doc.table_rows():
        application = parse_row(cells, info_url, comment_url, scrape_date)
        if application is not None:
            applications.append(application)
    return applications
