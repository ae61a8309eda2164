"""Turns a finished HTTP exchange into the typed result of the requested operation."""

from collections.abc import AsyncIterable, Awaitable, Callable
from http import HTTPStatus

from loguru import logger
from pydantic import BaseModel, ValidationError

from gemini_rest.errors import DeserializationError, HTTPStatusError, UnsupportedOperationError
from gemini_rest.models.enums import ResponseType
from gemini_rest.models.response import (
    GeminiResponse,
    ModelInformation,
    ModelInformationList,
    TokenCount,
)
from gemini_rest.services.stream import StreamedGeminiResponse


# Target schema of every operation answered with a single JSON document
RESPONSE_MODELS: dict[ResponseType, type[BaseModel]] = {
    ResponseType.GENERATE_CONTENT: GeminiResponse,
    ResponseType.COUNT_TOKENS: TokenCount,
    ResponseType.GET_MODEL: ModelInformation,
    ResponseType.GET_MODEL_LIST: ModelInformationList,
}

STATUS_EXPLANATIONS = {
    400: "Bad Request: the request was malformed or had invalid arguments",
    401: "Unauthorized: the API key or bearer token was missing or invalid",
    403: "Forbidden: the credentials lack permission for this resource",
    404: "Not Found: the model or endpoint does not exist",
    429: "Too Many Requests: quota or rate limit exceeded",
    500: "Internal Server Error: the service failed to process the request",
    503: "Service Unavailable: the service is temporarily overloaded or down",
}

Body = bytes | AsyncIterable[bytes]
DispatchResult = (
    GeminiResponse
    | StreamedGeminiResponse
    | TokenCount
    | ModelInformation
    | ModelInformationList
)


def error_from_status(code: int) -> HTTPStatusError:
    """Build the error for a non-2xx status."""
    explanation = STATUS_EXPLANATIONS.get(code)
    if explanation is None:
        try:
            reason = HTTPStatus(code).phrase
        except ValueError:
            reason = "Unknown Status"
        explanation = f"Unexpected HTTP status {code} ({reason})"
    return HTTPStatusError(f"HTTP Error: {code}: {explanation}", code)


def parse_body(body: bytes, target: type[BaseModel]) -> BaseModel:
    """
    Parse a complete JSON body into ``target``.

    Raises:
        DeserializationError: Naming the target type and wrapping the parse error
    """
    try:
        return target.model_validate_json(body)
    except ValidationError as e:
        logger.error(f"Response body does not match {target.__name__}")
        raise DeserializationError(target.__name__, e) from e


async def dispatch(
    status_code: int,
    body: Body,
    response_type: ResponseType,
    *,
    on_close: Callable[[], Awaitable[None]] | None = None,
    max_fragment_size: int | None = None,
    secrets: tuple[str, ...] = (),
) -> DispatchResult:
    """
    Produce the typed result for an HTTP response.

    Args:
        status_code: HTTP status of the response
        body: Whole body, or an async iterable of body chunks
        response_type: Operation that was requested
        on_close: Releases the underlying response; called once the body is
            no longer needed (immediately, or when a stream finishes)
        max_fragment_size: Bound for one streamed array element
        secrets: Values to redact from diagnostics

    Returns:
        GeminiResponse, StreamedGeminiResponse, TokenCount, ModelInformation
        or ModelInformationList depending on ``response_type``

    Raises:
        HTTPStatusError: For a non-2xx status
        DeserializationError: When a single-document body does not match
        UnsupportedOperationError: For an unknown response type
    """
    streaming = response_type == ResponseType.STREAM_GENERATE_CONTENT

    if not 200 <= status_code < 300:
        await _close(on_close)
        error = error_from_status(status_code)
        logger.error(f"API request failed - {error.message}")
        raise error

    if streaming:
        chunks = _single_chunk(body) if isinstance(body, (bytes, bytearray)) else body
        return StreamedGeminiResponse(
            chunks,
            on_close=on_close,
            max_fragment_size=max_fragment_size,
            secrets=secrets,
        )

    target = RESPONSE_MODELS.get(response_type)
    if target is None:
        await _close(on_close)
        raise UnsupportedOperationError(f"Unsupported response type: {response_type}")

    try:
        if not isinstance(body, (bytes, bytearray)):
            body = b"".join([chunk async for chunk in body])
    finally:
        await _close(on_close)

    return parse_body(body, target)


async def _single_chunk(body: bytes):
    yield body


async def _close(on_close: Callable[[], Awaitable[None]] | None) -> None:
    if on_close is not None:
        await on_close()
