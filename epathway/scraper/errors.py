"""Exceptions raised while crawling the portal."""

from __future__ import annotations


class ScraperError(Exception):
    """Base class for crawl failures that abort the run."""


class MissingTokenError(ScraperError):
    """A response lacked the hidden fields the next postback must echo back."""

    def __init__(self, step: str, missing: list[str]) -> None:
        self.step = step
        self.missing = missing
        super().__init__(
            f"{step}: response is missing {', '.join(missing)}; "
            "refusing to send a postback without session tokens"
        )
