"""HTTP helpers: one cookie-carrying client per run, GETs and form postbacks."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from epathway.config import settings
from epathway.scraper.models import RawPage

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; ePathway-Scraper/1.0)"
    )
}


def create_client(timeout: Optional[float] = None) -> httpx.Client:
    """Return a client that keeps cookies for its lifetime and follows redirects."""
    return httpx.Client(
        headers=_DEFAULT_HEADERS,
        timeout=settings.request_timeout if timeout is None else timeout,
        follow_redirects=True,
    )


def get_page(
    client: httpx.Client,
    url: str,
    params: Optional[Mapping[str, Any]] = None,
) -> RawPage:
    """GET *url* and return a :class:`RawPage`.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx/5xx status code.
        httpx.TransportError: If the request could not be completed.
    """
    response = client.get(url, params=params)
    response.raise_for_status()
    return RawPage(url=str(response.url), html=response.text, status_code=response.status_code)


def post_form(
    client: httpx.Client,
    url: str,
    form: Mapping[str, str],
    params: Optional[Mapping[str, Any]] = None,
) -> RawPage:
    """POST *form* url-encoded to *url* and return the (post-redirect) page.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx/5xx status code.
        httpx.TransportError: If the request could not be completed.
    """
    response = client.post(url, data=dict(form), params=params)
    response.raise_for_status()
    return RawPage(url=str(response.url), html=response.text, status_code=response.status_code)
