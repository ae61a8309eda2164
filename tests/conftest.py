"""Shared fixtures and fakes for the test suite."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest


API_KEY = "my-api-key"


def fragment(text: str) -> dict:
    """A minimal streamed fragment carrying ``text``."""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
                "index": 0,
                "safetyRatings": [
                    {"category": "HARM_CATEGORY_HARASSMENT", "probability": "NEGLIGIBLE"}
                ],
            }
        ]
    }


def array_body(elements: list) -> bytes:
    """Serialize elements the way streamGenerateContent frames them."""
    return ("[" + "\r\n,\r\n".join(json.dumps(e) for e in elements) + "]").encode()


async def chunked(data: bytes, size: int = 7):
    """Yield ``data`` in fixed-size chunks."""
    for i in range(0, len(data), size):
        yield data[i:i + size]


class FakeResponse:
    """Stand-in for a curl_cffi response."""

    def __init__(self, status_code: int = 200, content: bytes = b"", chunk_size: int = 7):
        self.status_code = status_code
        self.content = content
        self.chunk_size = chunk_size
        self.aclose = AsyncMock()

    def aiter_content(self):
        return chunked(self.content, self.chunk_size)


@pytest.fixture
def fake_session():
    """A session whose request() returns whatever response the test assigns."""
    session = MagicMock()
    session.request = AsyncMock(return_value=FakeResponse())
    session.close = AsyncMock()
    return session
