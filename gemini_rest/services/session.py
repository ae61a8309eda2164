"""HTTP session management."""

from curl_cffi.requests import AsyncSession

from gemini_rest import __version__
from gemini_rest.config import settings


USER_AGENT = f"gemini-rest/{__version__}"


def create_session(timeout: float | None = None, proxy: str | None = None) -> AsyncSession:
    """
    Create an async session with the request timeout fixed at construction.

    Args:
        timeout: Timeout in seconds for a whole request, defaults to settings.timeout
        proxy: Proxy URL, defaults to settings.proxy
    """
    return AsyncSession(
        timeout=timeout if timeout is not None else settings.timeout,
        proxy=proxy or settings.proxy,
        headers={"User-Agent": USER_AGENT},
    )
