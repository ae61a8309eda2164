"""Bearer token providers for the Vertex AI endpoint."""

import asyncio
from typing import Protocol, Sequence

import google.auth
import google.auth.transport.requests
from google.auth.exceptions import GoogleAuthError
from loguru import logger

from gemini_rest.errors import CredentialError
from gemini_rest.redaction import REDACTED


class TokenProvider(Protocol):
    """Anything that can hand out a bearer token for a list of scopes."""

    async def token(self, scopes: Sequence[str]) -> str: ...


class GoogleAuthTokenProvider:
    """Token provider backed by application default credentials (google-auth)."""

    def __init__(self):
        self._credentials = None
        self._scopes: tuple[str, ...] | None = None
        self._lock = asyncio.Lock()

    async def token(self, scopes: Sequence[str]) -> str:
        """
        Get a bearer token for the given scopes.

        google-auth is blocking, so credential discovery and refresh run in a
        worker thread. The credentials object is kept and only refreshed by
        google-auth when its token is no longer valid.

        Raises:
            CredentialError: If no credentials are configured or refresh fails
        """
        async with self._lock:
            try:
                return await asyncio.to_thread(self._token_sync, tuple(scopes))
            except (GoogleAuthError, OSError) as e:
                logger.error(f"Failed to generate authentication token: {e}")
                raise CredentialError(
                    f"Failed to generate authentication token: {e}"
                ) from e

    def _token_sync(self, scopes: tuple[str, ...]) -> str:
        if self._credentials is None or self._scopes != scopes:
            self._credentials, _ = google.auth.default(scopes=list(scopes))
            self._scopes = scopes
            logger.debug("Loaded application default credentials")

        if not self._credentials.valid:
            self._credentials.refresh(google.auth.transport.requests.Request())

        return self._credentials.token

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scopes={self._scopes!r})"


class StaticTokenProvider:
    """Token provider returning a fixed token, for callers that manage tokens themselves."""

    def __init__(self, token: str):
        self._token = token

    async def token(self, scopes: Sequence[str]) -> str:
        return self._token

    def __repr__(self) -> str:
        return f"{type(self).__name__}(token={REDACTED})"
