"""
Error types raised by the client.

Every failure reaches the caller as one of these exceptions. Messages are
scrubbed of secrets before the exception is built.
"""


class GoogleAPIError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return f"GoogleAPIError - code: {self.code} error: {self.message}"


class TransportError(GoogleAPIError):
    """Raised when the HTTP exchange itself fails (connect, TLS, timeout, read)."""
    pass


class HTTPStatusError(GoogleAPIError):
    """Raised when the service answers with a non-2xx status."""

    def __init__(self, message: str, code: int):
        super().__init__(message, code)


class DeserializationError(GoogleAPIError):
    """Raised when a response body does not match the expected schema."""

    def __init__(self, target: str, cause: Exception | str):
        super().__init__(f"Failed to deserialize API response into {target}: {cause}")
        self.target = target
        self.cause = cause


class StreamDecodeError(GoogleAPIError):
    """Raised when a streamed body is not a well-formed JSON array."""
    pass


class StreamConsumedError(GoogleAPIError):
    """Raised when a streamed response is iterated a second time."""
    pass


class UnsupportedOperationError(GoogleAPIError):
    """Raised for an operation the current addressing mode does not implement."""
    pass


class CredentialError(GoogleAPIError):
    """Raised when no bearer token could be obtained for Vertex AI."""
    pass
