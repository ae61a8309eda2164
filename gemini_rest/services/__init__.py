"""Services for the client."""

from .credentials import GoogleAuthTokenProvider, StaticTokenProvider, TokenProvider
from .dispatcher import dispatch, error_from_status
from .session import create_session
from .stream import JsonArrayFramer, StreamedGeminiResponse
from .urls import public_url, vertex_url

__all__ = [
    "GoogleAuthTokenProvider",
    "StaticTokenProvider",
    "TokenProvider",
    "dispatch",
    "error_from_status",
    "create_session",
    "JsonArrayFramer",
    "StreamedGeminiResponse",
    "public_url",
    "vertex_url",
]
