"""Hidden-field and client-capability token extraction."""

from __future__ import annotations

import re
from typing import Optional

from epathway.scraper.errors import MissingTokenError
from epathway.scraper.html import HtmlDocument
from epathway.scraper.models import SessionTokens

EVENT_VALIDATION_FIELD = "__EVENTVALIDATION"
VIEW_STATE_FIELD = "__VIEWSTATE"

# default.aspx embeds a redirect such as ``location.href = '...EnquiryLists.aspx?js=abc123'``.
# Either quote style may close the token.
_JS_TOKEN = re.compile(r"\.aspx\?js=([^'\"]+)['\"]")


def _hidden_value(doc: HtmlDocument, name: str) -> Optional[str]:
    return doc.attribute(f"input[name='{name}']", "value")


def extract_session_tokens(doc: HtmlDocument) -> Optional[SessionTokens]:
    """Return the page's token pair, or ``None`` if either field is absent."""
    event_validation = _hidden_value(doc, EVENT_VALIDATION_FIELD)
    view_state = _hidden_value(doc, VIEW_STATE_FIELD)
    if event_validation is None or view_state is None:
        return None
    return SessionTokens(event_validation=event_validation, view_state=view_state)


def require_session_tokens(doc: HtmlDocument, step: str) -> SessionTokens:
    """Like :func:`extract_session_tokens` but raise when a field is missing.

    Raises:
        MissingTokenError: naming *step* and the absent field(s).
    """
    tokens = extract_session_tokens(doc)
    if tokens is None:
        missing = [
            name
            for name in (EVENT_VALIDATION_FIELD, VIEW_STATE_FIELD)
            if _hidden_value(doc, name) is None
        ]
        raise MissingTokenError(step, missing)
    return tokens


def extract_js_token(doc: HtmlDocument) -> Optional[str]:
    """Return the ``js=`` token from the first script that carries one."""
    for script in doc.script_texts():
        match = _JS_TOKEN.search(script)
        if match:
            return match.group(1)
    return None
