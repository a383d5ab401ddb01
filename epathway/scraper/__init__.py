"""Scraper package: portal crawl, token and record extraction."""

from epathway.scraper.crawler import PortalCrawler, scrape_applications
from epathway.scraper.errors import MissingTokenError, ScraperError
from epathway.scraper.extractor import extract_applications
from epathway.scraper.sink import ApplicationSink, SqliteApplicationSink

__all__ = [
    "PortalCrawler",
    "scrape_applications",
    "extract_applications",
    "ApplicationSink",
    "SqliteApplicationSink",
    "ScraperError",
    "MissingTokenError",
]
