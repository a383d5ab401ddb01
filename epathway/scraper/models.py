"""Data models for the crawl state machine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

# Upper bound on results pages processed in one run, whatever the portal says.
MAX_PAGES = 100


@dataclass
class RawPage:
    """The raw HTTP response for a single request."""

    url: str
    html: str
    status_code: int


@dataclass(frozen=True)
class SessionTokens:
    """The ``__EVENTVALIDATION`` / ``__VIEWSTATE`` pair every postback echoes."""

    event_validation: str
    view_state: str

    def as_form(self) -> dict[str, str]:
        return {
            "__EVENTVALIDATION": self.event_validation,
            "__VIEWSTATE": self.view_state,
        }


@dataclass(frozen=True)
class PortalUrls:
    """The four fixed pages of an ePathway General Enquiry site."""

    default: str
    enquiry_lists: str
    enquiry_search: str
    summary_view: str

    @classmethod
    def from_base(cls, base_url: str) -> PortalUrls:
        """Build the page URLs from a base such as ``https://host/ePathway/Production``."""
        web = base_url.rstrip("/") + "/Web"
        return cls(
            default=f"{web}/default.aspx",
            enquiry_lists=f"{web}/GeneralEnquiry/EnquiryLists.aspx",
            enquiry_search=f"{web}/GeneralEnquiry/EnquirySearch.aspx",
            summary_view=f"{web}/GeneralEnquiry/EnquirySummaryView.aspx",
        )


@dataclass
class CrawlSession:
    """State owned by a single crawl run: the cookie-carrying client and the
    most recently extracted token pair."""

    client: httpx.Client
    urls: PortalUrls
    tokens: Optional[SessionTokens] = None


@dataclass
class PagingCursor:
    """Position in the results walk.

    ``page_count`` is estimated once from the first results page and never
    revised.  ``pages_processed`` is counted separately so the hard ceiling
    holds even when the estimate is wrong.
    """

    page_count: int
    page_number: int = 1
    pages_processed: int = 0
    ceiling: int = MAX_PAGES

    def has_next(self) -> bool:
        if self.pages_processed >= self.ceiling:
            return False
        return self.page_number + 1 <= self.page_count


@dataclass
class CrawlSummary:
    pages_processed: int = 0
    page_count: int = 0
    records_found: int = 0
    records_inserted: int = 0
    records_skipped: int = 0
