"""Typed async client for the Gemini REST API (public and Vertex AI endpoints)."""

__version__ = "0.1.0"

from loguru import logger

from gemini_rest.client import Client, PostResult
from gemini_rest.errors import (
    CredentialError,
    DeserializationError,
    GoogleAPIError,
    HTTPStatusError,
    StreamConsumedError,
    StreamDecodeError,
    TransportError,
    UnsupportedOperationError,
)
from gemini_rest.log import configure_logging
from gemini_rest.models import Content, GeminiResponse, Model, Part, Request, ResponseType, Role
from gemini_rest.services.stream import StreamedGeminiResponse

# Silent unless the application opts in with configure_logging()
logger.disable("gemini_rest")

__all__ = [
    "__version__",
    "Client",
    "PostResult",
    "StreamedGeminiResponse",
    "configure_logging",
    "Content",
    "GeminiResponse",
    "Model",
    "Part",
    "Request",
    "ResponseType",
    "Role",
    "CredentialError",
    "DeserializationError",
    "GoogleAPIError",
    "HTTPStatusError",
    "StreamConsumedError",
    "StreamDecodeError",
    "TransportError",
    "UnsupportedOperationError",
]
