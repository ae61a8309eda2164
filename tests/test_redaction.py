"""Tests for secret redaction helpers."""

from gemini_rest.errors import TransportError
from gemini_rest.redaction import REDACTED, scrub, strip_query


def test_strip_query():
    url = "https://generativelanguage.googleapis.com/v1/models/gemini-pro:generateContent?key=my-api-key#frag"

    assert strip_query(url) == "https://generativelanguage.googleapis.com/v1/models/gemini-pro:generateContent"


def test_scrub_removes_query_strings_and_known_secrets():
    text = (
        "error sending request for url (https://example.com/v1/models?key=abc&alt=sse): "
        "Authorization: Bearer ya29.token"
    )

    scrubbed = scrub(text, "ya29.token", None, "")

    assert scrubbed == (
        "error sending request for url (https://example.com/v1/models): "
        f"Authorization: Bearer {REDACTED}"
    )


def test_scrub_leaves_plain_text_alone():
    assert scrub("connection refused") == "connection refused"


def test_error_rendering():
    error = TransportError("timed out")

    assert error.message == "timed out"
    assert str(error) == "GoogleAPIError - code: None error: timed out"
