"""Secret redaction for anything that ends up in a log line or an error message."""

import re
from urllib.parse import urlsplit, urlunsplit

REDACTED = "*************"

_URL_QUERY_RE = re.compile(r"(https?://[^\s?#'\"<>]*)[?#][^\s'\"<>)]*")


def strip_query(url: str) -> str:
    """Drop the query string (and fragment) from a URL."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def scrub(text: str, *secrets: str | None) -> str:
    """
    Make a diagnostic string safe to show.

    Query strings are removed from every embedded URL, then any remaining
    occurrence of a known secret is replaced with the redaction placeholder.
    """
    text = _URL_QUERY_RE.sub(r"\1", str(text))
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text
