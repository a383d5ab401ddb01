"""Thin query adapter over BeautifulSoup.

The crawler only ever needs "select elements", "text of an element" and
"attribute of an element", so that is all :class:`HtmlDocument` exposes.
Everything above this module works against fixture strings without a network.
"""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from epathway.scraper.dates import normalise_whitespace


class HtmlDocument:
    """A parsed HTML page."""

    def __init__(self, html: str) -> None:
        self.html = html
        self._soup = BeautifulSoup(html, "html.parser")

    def select(self, selector: str) -> List[Tag]:
        """Return every element matching the CSS *selector*."""
        return self._soup.select(selector)

    def text(self, selector: str) -> str:
        """Return the whitespace-normalised text of the first match, or ``""``."""
        element = self._soup.select_one(selector)
        if element is None:
            return ""
        return normalise_whitespace(element.get_text())

    def attribute(self, selector: str, name: str) -> Optional[str]:
        """Return attribute *name* of the first match, or ``None``."""
        element = self._soup.select_one(selector)
        if element is None:
            return None
        value = element.get(name)
        return value if isinstance(value, str) else None

    def script_texts(self) -> List[str]:
        """Return the source of every inline ``<script>`` block."""
        return [str(script.string or "") for script in self._soup.find_all("script")]

    def table_rows(self) -> List[List[str]]:
        """Return the text of each ``<tr>``'s direct ``<td>`` cells.

        Nested tables produce their own rows as well; header cells (``<th>``)
        are not included.
        """
        rows: List[List[str]] = []
        for tr in self._soup.find_all("tr"):
            cells = tr.find_all("td", recursive=False)
            rows.append([normalise_whitespace(td.get_text(" ")) for td in cells])
        return rows
