"""Client for the Gemini REST API, public or Vertex AI."""

from curl_cffi.requests import AsyncSession
from curl_cffi.requests.exceptions import RequestException
from loguru import logger
from pydantic import SecretStr

from gemini_rest.config import settings
from gemini_rest.errors import CredentialError, TransportError, UnsupportedOperationError
from gemini_rest.models.enums import DEFAULT_MODEL, Model, ResponseType
from gemini_rest.models.request import Request
from gemini_rest.models.response import (
    GeminiResponse,
    ModelInformation,
    ModelInformationList,
    TokenCount,
)
from gemini_rest.redaction import REDACTED, scrub, strip_query
from gemini_rest.services.credentials import GoogleAuthTokenProvider, TokenProvider
from gemini_rest.services.dispatcher import DispatchResult, dispatch
from gemini_rest.services.session import create_session
from gemini_rest.services.stream import StreamedGeminiResponse
from gemini_rest.services.urls import public_url, vertex_url


POST_RESPONSE_TYPES = (
    ResponseType.GENERATE_CONTENT,
    ResponseType.STREAM_GENERATE_CONTENT,
    ResponseType.COUNT_TOKENS,
)


class PostResult:
    """Result of Client.post: a full response, a stream, or a token count."""

    def __init__(self, value: GeminiResponse | StreamedGeminiResponse | TokenCount):
        self.value = value

    def rest(self) -> GeminiResponse | None:
        return self.value if isinstance(self.value, GeminiResponse) else None

    def streamed(self) -> StreamedGeminiResponse | None:
        return self.value if isinstance(self.value, StreamedGeminiResponse) else None

    def count(self) -> TokenCount | None:
        return self.value if isinstance(self.value, TokenCount) else None

    def __repr__(self) -> str:
        return f"PostResult({type(self.value).__name__})"


class Client:
    """
    Gemini API client.

    Public models authenticate with an API key sent as a query parameter.
    Vertex AI models are addressed by region and project and authenticate with
    a bearer token from ``token_provider`` (application default credentials
    unless given). Neither secret ever appears in repr() or in error messages.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: Model | str = DEFAULT_MODEL,
        response_type: ResponseType = ResponseType.GENERATE_CONTENT,
        region: str | None = None,
        project_id: str | None = None,
        token_provider: TokenProvider | None = None,
        session: AsyncSession | None = None,
        timeout: float | None = None,
        beta: bool | None = None,
        max_fragment_size: int | None = None,
    ):
        self.model = model
        self.response_type = response_type
        self.beta = settings.beta if beta is None else beta
        self.timeout = timeout if timeout is not None else settings.timeout
        self.max_fragment_size = max_fragment_size or settings.max_fragment_size

        if api_key is not None and (region or project_id):
            raise ValueError(
                "Ambiguous credentials: pass either api_key for the public API, or region and "
                "project_id for Vertex AI, not both"
            )

        if api_key is None and not (region and project_id):
            if settings.api_key is not None:
                api_key = settings.api_key.get_secret_value()
            else:
                region = region or settings.region
                project_id = project_id or settings.project_id

        if api_key is not None:
            self._api_key: SecretStr | None = SecretStr(api_key)
            self.region = None
            self.project_id = None
        elif region and project_id:
            self._api_key = None
            self.region = region
            self.project_id = project_id
        else:
            raise ValueError(
                "Missing credentials: pass api_key for the public API, or region and "
                "project_id for Vertex AI (or set GEMINI_API_KEY / GEMINI_REGION and GEMINI_PROJECT_ID)"
            )

        self.token_provider = token_provider or (
            GoogleAuthTokenProvider() if self.is_vertex else None
        )
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_response_type(cls, response_type: ResponseType, api_key: str, **kwargs) -> "Client":
        """Public API client for the default model and a given response type."""
        return cls(api_key, response_type=response_type, **kwargs)

    @classmethod
    def from_model(cls, model: Model | str, api_key: str, **kwargs) -> "Client":
        """Public API client for a given model."""
        return cls(api_key, model=model, **kwargs)

    @classmethod
    def from_model_response_type(
        cls, model: Model | str, api_key: str, response_type: ResponseType, **kwargs
    ) -> "Client":
        """Public API client for a given model and response type."""
        return cls(api_key, model=model, response_type=response_type, **kwargs)

    @classmethod
    def vertex(
        cls,
        region: str,
        project_id: str,
        *,
        model: Model | str = DEFAULT_MODEL,
        response_type: ResponseType = ResponseType.STREAM_GENERATE_CONTENT,
        **kwargs,
    ) -> "Client":
        """Vertex AI client; streamGenerateContent unless told otherwise."""
        return cls(
            model=model,
            response_type=response_type,
            region=region,
            project_id=project_id,
            **kwargs,
        )

    @property
    def is_vertex(self) -> bool:
        return self._api_key is None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            self._session = create_session(self.timeout)
        return self._session

    @property
    def url(self) -> str:
        """URL of the configured operation. Contains the API key; do not log it."""
        return self.url_for(self.response_type)

    def url_for(self, response_type: ResponseType) -> str:
        if self.is_vertex:
            return vertex_url(self.model, self.region, self.project_id, response_type)
        return public_url(
            self.model,
            self._api_key.get_secret_value(),
            response_type,
            base_url=self._public_base(),
        )

    async def post(self, request: Request, timeout: float | None = None) -> PostResult:
        """
        Send ``request`` using the configured response type.

        Raises:
            UnsupportedOperationError: If the response type is not a POST operation
        """
        if self.response_type not in POST_RESPONSE_TYPES:
            raise UnsupportedOperationError(f"Unsupported response type: {self.response_type}")
        result = await self._send("POST", self.response_type, request, timeout)
        return PostResult(result)

    async def generate_content(
        self, request: Request, timeout: float | None = None
    ) -> GeminiResponse:
        """Single-shot generation."""
        return await self._send("POST", ResponseType.GENERATE_CONTENT, request, timeout)

    async def stream_generate_content(
        self, request: Request, timeout: float | None = None
    ) -> StreamedGeminiResponse:
        """Streamed generation. Iterate the result once, or use it with ``async with``."""
        return await self._send("POST", ResponseType.STREAM_GENERATE_CONTENT, request, timeout)

    async def count_tokens(self, request: Request, timeout: float | None = None) -> TokenCount:
        """Count the tokens of a request (public API only)."""
        return await self._send("POST", ResponseType.COUNT_TOKENS, request, timeout)

    async def get_model(self, timeout: float | None = None) -> ModelInformation:
        """Get information about the configured model (public API only)."""
        return await self._send("GET", ResponseType.GET_MODEL, None, timeout)

    async def get_model_list(self, timeout: float | None = None) -> ModelInformationList:
        """List available models (public API only)."""
        return await self._send("GET", ResponseType.GET_MODEL_LIST, None, timeout)

    async def aclose(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _send(
        self,
        method: str,
        response_type: ResponseType,
        request: Request | None,
        timeout: float | None,
    ) -> DispatchResult:
        url = self.url_for(response_type)
        token = await self._auth_token()
        secrets = self._secrets(token)

        headers = {"Content-Type": "application/json"}
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"

        kwargs = {"headers": headers}
        if request is not None:
            kwargs["json"] = request.to_payload(beta=self.beta)
        if timeout is not None:
            kwargs["timeout"] = timeout

        streaming = response_type == ResponseType.STREAM_GENERATE_CONTENT
        if streaming:
            kwargs["stream"] = True

        logger.debug(f"{method} {strip_query(url)} ({response_type})")
        try:
            response = await self.session.request(method, url, **kwargs)
        except RequestException as e:
            message = scrub(str(e), *secrets)
            logger.error(f"Request to {strip_query(url)} failed: {message}")
            raise TransportError(message) from e

        if streaming:
            body = response.aiter_content()
            on_close = response.aclose
        else:
            body = response.content
            on_close = None

        return await dispatch(
            response.status_code,
            body,
            response_type,
            on_close=on_close,
            max_fragment_size=self.max_fragment_size,
            secrets=secrets,
        )

    async def _auth_token(self) -> str | None:
        """Bearer token for Vertex AI, None for the public API."""
        if not self.is_vertex:
            return None
        try:
            return await self.token_provider.token([settings.auth_scope])
        except CredentialError:
            raise
        except Exception as e:
            raise CredentialError(f"Failed to generate authentication token: {e}") from e

    def _secrets(self, token: str | None) -> tuple[str, ...]:
        secrets = [token] if token else []
        if self._api_key is not None:
            secrets.append(self._api_key.get_secret_value())
        return tuple(secrets)

    def _public_base(self) -> str:
        return settings.public_beta_base_api if self.beta else settings.public_base_api

    def __repr__(self) -> str:
        if self.is_vertex:
            try:
                url = self.url_for(self.response_type)
            except UnsupportedOperationError:
                url = None
        else:
            url = public_url(self.model, REDACTED, self.response_type, base_url=self._public_base())
        return (
            f"GenerativeAiClient(url={url!r}, model={str(self.model)!r}, "
            f"region={self.region!r}, project_id={self.project_id!r}, "
            f"response_type={str(self.response_type)!r})"
        )

    __str__ = __repr__
