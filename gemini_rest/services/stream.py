"""
Streamed response decoding.

streamGenerateContent answers with one JSON array whose elements arrive as
the model produces them:

    [{"candidates": [...]}
    ,
    {"candidates": [...]}
    ]

JsonArrayFramer cuts the byte stream into array elements without ever
holding more than the element currently being read. StreamedGeminiResponse
turns those elements into GeminiResponse fragments, one pass, on demand.
"""

import asyncio
import json
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from typing import Any

from curl_cffi.requests.exceptions import RequestException
from loguru import logger
from pydantic import ValidationError

from gemini_rest.config import settings
from gemini_rest.errors import (
    DeserializationError,
    GoogleAPIError,
    StreamConsumedError,
    StreamDecodeError,
    TransportError,
)
from gemini_rest.models.response import GeminiResponse
from gemini_rest.redaction import scrub


_WHITESPACE = frozenset(b" \t\r\n")
_OPEN = frozenset(b"{[")
_CLOSE = frozenset(b"}]")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_COMMA = ord(",")
_LBRACKET = ord("[")
_RBRACKET = ord("]")

# Framer states
_BEFORE_ARRAY = 0
_FIRST_ELEMENT = 1
_NEXT_ELEMENT = 2
_IN_ELEMENT = 3
_AFTER_ELEMENT = 4
_DONE = 5


class JsonArrayFramer:
    """
    Incremental framer for the elements of a top-level JSON array.

    Feed it chunks split at arbitrary byte positions; it returns each array
    element as raw bytes once the element is complete. Only structural
    characters are interpreted, so multi-byte UTF-8 sequences pass through
    untouched. Elements are not parsed here.
    """

    def __init__(self, max_element_size: int | None = None):
        self.max_element_size = max_element_size or settings.max_fragment_size
        self._state = _BEFORE_ARRAY
        self._buffer = bytearray()
        self._depth = 0
        self._in_string = False
        self._escape = False
        self._scalar = False

    @property
    def done(self) -> bool:
        return self._state == _DONE

    def feed(self, data: bytes) -> list[bytes]:
        """Consume a chunk and return the elements it completed, in order."""
        elements: list[bytes] = []
        start = 0  # start of the element bytes within this chunk
        i = 0
        n = len(data)

        while i < n:
            c = data[i]
            state = self._state

            if state == _IN_ELEMENT:
                if self._in_string:
                    if self._escape:
                        self._escape = False
                    elif c == _BACKSLASH:
                        self._escape = True
                    elif c == _QUOTE:
                        self._in_string = False
                        if self._depth == 0:
                            elements.append(self._finish(data[start:i + 1]))
                elif self._scalar:
                    if c in _WHITESPACE or c == _COMMA or c == _RBRACKET:
                        elements.append(self._finish(data[start:i]))
                        # reprocess the delimiter as the byte after the element
                        continue
                elif c == _QUOTE:
                    self._in_string = True
                elif c in _OPEN:
                    self._depth += 1
                elif c in _CLOSE:
                    self._depth -= 1
                    if self._depth == 0:
                        elements.append(self._finish(data[start:i + 1]))
                i += 1
                continue

            if c in _WHITESPACE:
                i += 1
                continue

            if state == _BEFORE_ARRAY:
                if c != _LBRACKET:
                    raise StreamDecodeError(
                        f"Expected a JSON array, found {chr(c)!r} at the start of the body"
                    )
                self._state = _FIRST_ELEMENT
            elif state == _AFTER_ELEMENT:
                if c == _COMMA:
                    self._state = _NEXT_ELEMENT
                elif c == _RBRACKET:
                    self._state = _DONE
                else:
                    raise StreamDecodeError(
                        f"Expected ',' or ']' between array elements, found {chr(c)!r}"
                    )
            elif state == _DONE:
                raise StreamDecodeError("Unexpected data after the end of the JSON array")
            elif state == _FIRST_ELEMENT and c == _RBRACKET:
                self._state = _DONE
            elif c == _RBRACKET or c == _COMMA:
                raise StreamDecodeError(f"Expected an array element, found {chr(c)!r}")
            else:
                self._begin(c)
                start = i
            i += 1

        if self._state == _IN_ELEMENT:
            self._buffer += data[start:]
            self._check_size(0)

        return elements

    def close(self) -> None:
        """Signal end of input. Raises if the array was not complete."""
        if self._state != _DONE:
            raise StreamDecodeError("Response body ended before the JSON array was closed")

    def _begin(self, c: int) -> None:
        self._state = _IN_ELEMENT
        self._buffer.clear()
        self._depth = 1 if c in _OPEN else 0
        self._in_string = c == _QUOTE
        self._escape = False
        self._scalar = c not in _OPEN and c != _QUOTE

    def _finish(self, tail: bytes) -> bytes:
        self._check_size(len(tail))
        element = bytes(self._buffer) + tail
        self._buffer.clear()
        self._state = _AFTER_ELEMENT
        self._scalar = False
        return element

    def _check_size(self, extra: int) -> None:
        if len(self._buffer) + extra > self.max_element_size:
            raise StreamDecodeError(
                f"Streamed array element exceeds {self.max_element_size} bytes"
            )


FragmentAction = Callable[[GeminiResponse], Awaitable[Any]]

# Strong references to releases scheduled from __del__ until they finish.
_pending_releases: set[asyncio.Task] = set()


async def _close_dropped(on_close: Callable[[], Awaitable[None]]) -> None:
    await on_close()


class StreamedGeminiResponse:
    """
    Lazy, forward-only sequence of GeminiResponse fragments.

    Iterate it once with ``async for``, or read untyped values with
    json_values(). The first wire, framing or schema error ends the sequence.
    The underlying HTTP response is released on exhaustion, on error, on
    aclose() and when leaving ``async with``. A stream garbage-collected
    before any of those schedules the release on the running event loop.
    """

    def __init__(
        self,
        chunks: AsyncIterable[bytes],
        on_close: Callable[[], Awaitable[None]] | None = None,
        max_fragment_size: int | None = None,
        secrets: tuple[str, ...] = (),
    ):
        self._chunks = chunks.__aiter__()
        self._on_close = on_close
        self._framer = JsonArrayFramer(max_fragment_size or settings.max_fragment_size)
        self._secrets = secrets
        self._values: AsyncIterator[Any] | None = None
        self._released = False
        self.fragments_read = 0

    async def __aenter__(self) -> "StreamedGeminiResponse":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __aiter__(self) -> "StreamedGeminiResponse":
        return self

    async def __anext__(self) -> GeminiResponse:
        if self._values is None:
            if self._released:
                raise StopAsyncIteration
            self.json_values()

        value = await self._values.__anext__()
        try:
            fragment = GeminiResponse.model_validate(value)
        except ValidationError as e:
            logger.error(f"Streamed fragment {self.fragments_read + 1} does not match GeminiResponse")
            await self._values.aclose()
            raise DeserializationError("GeminiResponse", e) from e

        self.fragments_read += 1
        return fragment

    def json_values(self) -> AsyncIterator[Any]:
        """
        Iterate the raw JSON value of every array element.

        Raises:
            StreamConsumedError: If the stream was already being consumed
        """
        if self._values is not None or self._released:
            raise StreamConsumedError("Streamed response can only be consumed once")
        self._values = self._decode()
        return self._values

    async def for_each_async(self, action: FragmentAction, limit: int | None = None) -> int:
        """
        Run ``action`` on every fragment without waiting for the previous one.

        Fragments are read and validated in arrival order; each valid fragment
        starts a task for ``action``. At most ``limit`` actions run at once
        (default settings.stream_concurrency, None for unbounded). After the
        first decode error no further actions start; running actions are
        awaited and the error is raised. Otherwise the first exception raised by
        ``action`` propagates once every started action has finished.

        Returns:
            Number of fragments the action was invoked for
        """
        limit = limit if limit is not None else settings.stream_concurrency
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be at least 1 or None for unbounded, got {limit}")
        semaphore = asyncio.Semaphore(limit) if limit is not None else None
        tasks: list[asyncio.Task] = []
        stream_error: Exception | None = None

        async def run(fragment: GeminiResponse) -> None:
            try:
                await action(fragment)
            finally:
                if semaphore is not None:
                    semaphore.release()

        try:
            async for fragment in self:
                if semaphore is not None:
                    await semaphore.acquire()
                tasks.append(asyncio.create_task(run(fragment)))
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        except Exception as e:
            stream_error = e

        results = await asyncio.gather(*tasks, return_exceptions=True)

        if stream_error is not None:
            raise stream_error
        for result in results:
            if isinstance(result, BaseException):
                raise result

        return len(tasks)

    async def aclose(self) -> None:
        """Stop consuming and release the HTTP response. Safe to call repeatedly."""
        if self._values is not None:
            await self._values.aclose()
        await self._release()

    def __del__(self) -> None:
        if getattr(self, "_released", True) or self._on_close is None:
            return
        self._released = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Streamed response dropped outside an event loop; HTTP response not released")
            return
        task = loop.create_task(_close_dropped(self._on_close))
        _pending_releases.add(task)
        task.add_done_callback(_pending_releases.discard)

    async def _decode(self) -> AsyncIterator[Any]:
        try:
            async with aclosing(self._elements()) as elements:
                async for element in elements:
                    try:
                        value = json.loads(element)
                    except (json.JSONDecodeError, UnicodeDecodeError) as e:
                        raise StreamDecodeError(f"Invalid JSON in streamed array element: {e}") from e
                    yield value
        finally:
            await self._release()

    async def _elements(self) -> AsyncIterator[bytes]:
        while True:
            try:
                chunk = await self._chunks.__anext__()
            except StopAsyncIteration:
                self._framer.close()
                return
            except GoogleAPIError:
                raise
            except (RequestException, OSError) as e:
                message = scrub(str(e), *self._secrets)
                logger.error(f"Failed to read streamed response: {message}")
                raise TransportError(f"Failed to get JSON stream from request: {message}") from e

            for element in self._framer.feed(chunk):
                yield element

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._on_close is not None:
            await self._on_close()
