"""Crawl state machine for an ePathway General Enquiry portal.

The portal is an ASP.NET WebForms application, so every step depends on the
hidden fields of the previous response:

    Start
      → TokenNegotiated   GET default.aspx, then default.aspx?js=<token>
      → ViewSelected      GET EnquiryLists.aspx, POST the "Date" tab click
      → SearchSubmitted   POST the date-range search (results page 1)
      → PageFetched(n)    POST EnquirySummaryView.aspx?PageNumber=n
      → Done

Requests are strictly sequential: the token pair from one response is
consumed by the next postback, so a page is fully delivered to the sink
before the following page is requested.
"""

from __future__ import annotations

import re
import sqlite3
from datetime import date
from typing import Mapping, Optional, Tuple

import httpx

from epathway.config import settings
from epathway.db.models import DuplicatePolicy
from epathway.scraper.dates import format_form_date, one_month_before
from epathway.scraper.extractor import extract_applications
from epathway.scraper.fetcher import create_client, get_page, post_form
from epathway.scraper.html import HtmlDocument
from epathway.scraper.models import (
    MAX_PAGES,
    CrawlSession,
    CrawlSummary,
    PagingCursor,
    PortalUrls,
    RawPage,
    SessionTokens,
)
from epathway.scraper.sink import ApplicationSink, SqliteApplicationSink
from epathway.scraper.tokens import (
    extract_js_token,
    extract_session_tokens,
    require_session_tokens,
)

# ---------------------------------------------------------------------------
# Server-defined form fields
# ---------------------------------------------------------------------------
_SEARCH_CONTROL = "ctl00$MainBodyContent$mGeneralEnquirySearchControl"
_DATE_TAB = f"{_SEARCH_CONTROL}$mTabControl$ctl14"

TAB_MENU_TARGET = f"{_SEARCH_CONTROL}$mTabControl$tabControlMenu"
DATE_TAB_ARGUMENT = "2"
ENQUIRY_LIST_FIELD = f"{_SEARCH_CONTROL}$mEnquiryListsDropDownList"
ENQUIRY_LIST_VALUE = "10"
SEARCH_BUTTON_FIELD = f"{_SEARCH_CONTROL}$mSearchButton"
DATE_RANGE_FIELD = f"{_DATE_TAB}$DateSearchRadioGroup"
LAST_30_DAYS = "mLast30RadioButton"
DATE_FROM_FIELD = f"{_DATE_TAB}$mFromDatePicker$dateTextBox"
DATE_TO_FIELD = f"{_DATE_TAB}$mToDatePicker$dateTextBox"
PAGE_BUTTON_TARGET = "ctl00$MainBodyContent$mPagingControl$pageButton_{page}"

PAGE_NUMBER_LABEL = "#ctl00_MainBodyContent_mPagingControl_pageNumberLabel"
OTHER_PAGE_LINKS = "a.otherpagenumber"

_TRAILING_NUMBER = re.compile(r"(\d+)\s*$")


def estimate_page_count(doc: HtmlDocument) -> int:
    """Estimate the number of results pages from the first one.

    Reads the trailing number of the paging label ("Page 1 of 7"); failing
    that, counts the links to other pages.  Falls back to 1.
    """
    match = _TRAILING_NUMBER.search(doc.text(PAGE_NUMBER_LABEL))
    if match:
        return max(1, int(match.group(1)))
    other_pages = doc.select(OTHER_PAGE_LINKS)
    if other_pages:
        return len(other_pages) + 1
    return 1


class PortalCrawler:
    """Walks the portal's "last 30 days" date search and feeds a sink.

    Args:
        client: Cookie-carrying HTTP client, used for every request of the run.
        sink: Receives each well-formed application as soon as it is parsed.
        base_url: Portal base, e.g. ``https://host/ePathway/Production``.
        comment_url: Stored with every application.
        run_date: The "to" date of the search and the scrape date of the rows.
    """

    def __init__(
        self,
        client: httpx.Client,
        sink: ApplicationSink,
        base_url: Optional[str] = None,
        comment_url: Optional[str] = None,
        run_date: Optional[date] = None,
        max_pages: int = MAX_PAGES,
    ) -> None:
        self.session = CrawlSession(
            client=client,
            urls=PortalUrls.from_base(base_url or settings.base_url),
        )
        self.sink = sink
        self.comment_url = comment_url or settings.comment_url
        self.run_date = run_date or date.today()
        # A caller may lower the ceiling, never raise it.
        self.max_pages = max(1, min(max_pages, MAX_PAGES))

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------
    def _document(
        self, raw: RawPage, url: str, params: Optional[Mapping[str, str]]
    ) -> HtmlDocument:
        requested = str(httpx.URL(url, params=params))
        if raw.url != requested:
            print(f"[CRAWL] Redirected to {raw.url} (HTTP {raw.status_code}).")
        return HtmlDocument(raw.html)

    def _get(self, url: str, params: Optional[Mapping[str, str]] = None) -> HtmlDocument:
        print(f"[CRAWL] Retrieving page: {httpx.URL(url, params=params)}")
        raw = get_page(self.session.client, url, params=params)
        return self._document(raw, url, params)

    def _post_back(
        self,
        url: str,
        tokens: SessionTokens,
        fields: Mapping[str, str],
        params: Optional[Mapping[str, str]] = None,
    ) -> Tuple[HtmlDocument, Optional[SessionTokens]]:
        """Submit *fields* plus *tokens*; return the response and its token pair."""
        form = {**fields, **tokens.as_form()}
        raw = post_form(self.session.client, url, form, params=params)
        doc = self._document(raw, url, params)
        return doc, extract_session_tokens(doc)

    def _tokens_for(self, step: str, previous: HtmlDocument) -> SessionTokens:
        """Return the pair extracted from *previous*, the latest response."""
        if self.session.tokens is None:
            # Raises with the names of the missing fields.
            return require_session_tokens(previous, step)
        return self.session.tokens

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------
    def negotiate_client_token(self) -> Optional[str]:
        """Start → TokenNegotiated.

        Re-requesting the landing page with its ``js=`` token tells the server
        the client runs JavaScript, which it remembers for the session.
        """
        urls = self.session.urls
        landing = self._get(urls.default)
        token = extract_js_token(landing)
        if token is None:
            print("[CRAWL] No js= token on the landing page; continuing without it.")
            return None
        self._get(urls.default, params={"js": token})
        return token

    def select_date_tab(self) -> HtmlDocument:
        """TokenNegotiated → ViewSelected: click the "Date" search tab."""
        urls = self.session.urls
        lists_page = self._get(urls.enquiry_lists)
        tokens = require_session_tokens(lists_page, "enquiry lists")

        print('[CRAWL] Switching to the "Date" tab.')
        doc, self.session.tokens = self._post_back(
            urls.enquiry_search,
            tokens,
            {"__EVENTARGUMENT": DATE_TAB_ARGUMENT, "__EVENTTARGET": TAB_MENU_TARGET},
        )
        return doc

    def submit_search(self, previous: HtmlDocument) -> HtmlDocument:
        """ViewSelected → SearchSubmitted.  Returns results page 1."""
        tokens = self._tokens_for("date tab", previous)
        date_from = format_form_date(one_month_before(self.run_date))
        date_to = format_form_date(self.run_date)

        print(f"[CRAWL] Searching for applications in the date range {date_from} to {date_to}.")
        doc, self.session.tokens = self._post_back(
            self.session.urls.enquiry_search,
            tokens,
            {
                ENQUIRY_LIST_FIELD: ENQUIRY_LIST_VALUE,
                SEARCH_BUTTON_FIELD: "Search",
                DATE_RANGE_FIELD: LAST_30_DAYS,
                DATE_FROM_FIELD: date_from,
                DATE_TO_FIELD: date_to,
            },
        )
        return doc

    def fetch_page(self, page_number: int, previous: HtmlDocument) -> HtmlDocument:
        """PageFetched(n-1) → PageFetched(n)."""
        tokens = self._tokens_for(f"page {page_number - 1}", previous)
        doc, self.session.tokens = self._post_back(
            self.session.urls.summary_view,
            tokens,
            {
                "__EVENTARGUMENT": "",
                "__EVENTTARGET": PAGE_BUTTON_TARGET.format(page=page_number),
            },
            params={"PageNumber": str(page_number)},
        )
        return doc

    def process_page(self, doc: HtmlDocument, summary: CrawlSummary) -> None:
        """Hand every application on *doc* to the sink, in page order."""
        applications = extract_applications(
            doc,
            info_url=self.session.urls.default,
            comment_url=self.comment_url,
            scrape_date=self.run_date,
        )
        summary.records_found += len(applications)
        for application in applications:
            if self.sink.save(application):
                summary.records_inserted += 1
            else:
                summary.records_skipped += 1

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------
    def crawl(self) -> CrawlSummary:
        """Run the whole state machine once.

        Raises:
            MissingTokenError: A postback was due but the last response had
                no session tokens.
            httpx.HTTPError: Any transport failure or error status.
        """
        self.negotiate_client_token()
        tab = self.select_date_tab()
        doc = self.submit_search(tab)

        cursor = PagingCursor(page_count=estimate_page_count(doc), ceiling=self.max_pages)
        summary = CrawlSummary(page_count=cursor.page_count)

        while True:
            print(f"[CRAWL] Parsing page {cursor.page_number} of {cursor.page_count}.")
            self.process_page(doc, summary)
            cursor.pages_processed += 1

            if not cursor.has_next():
                break

            cursor.page_number += 1
            print(
                f"[CRAWL] Retrieving the next page of applications "
                f"(page {cursor.page_number} of {cursor.page_count})."
            )
            doc = self.fetch_page(cursor.page_number, doc)

        if cursor.pages_processed >= cursor.ceiling and cursor.page_number < cursor.page_count:
            print(f"[CRAWL] Stopped at the {cursor.ceiling}-page limit.")

        summary.pages_processed = cursor.pages_processed
        return summary


def scrape_applications(
    conn: sqlite3.Connection,
    policy: DuplicatePolicy = DuplicatePolicy.IGNORE,
    base_url: Optional[str] = None,
    run_date: Optional[date] = None,
) -> CrawlSummary:
    """Crawl the portal once and store the results through *conn*.

    Args:
        conn: Open, initialised DB connection.
        policy: How an already-stored council reference is treated this run.
        base_url: Portal base URL.  Defaults to ``settings.base_url``.
        run_date: Defaults to today.

    Returns:
        Counts of pages and records processed.
    """
    sink = SqliteApplicationSink(conn, policy)
    with create_client() as client:
        crawler = PortalCrawler(client, sink, base_url=base_url, run_date=run_date)
        summary = crawler.crawl()
    print("[CRAWL] Complete.")
    return summary
