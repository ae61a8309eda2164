"""Tests for the Client: addressing modes, request issuing and secret handling."""

import io
import json
from unittest.mock import AsyncMock, patch

import pytest
from curl_cffi.requests.exceptions import RequestException
from google.auth.exceptions import DefaultCredentialsError
from loguru import logger

from gemini_rest import Client, configure_logging
from gemini_rest.config import settings
from gemini_rest.errors import (
    CredentialError,
    HTTPStatusError,
    TransportError,
    UnsupportedOperationError,
)
from gemini_rest.models import (
    Content,
    GeminiResponse,
    GenerationConfig,
    Model,
    Part,
    Request,
    ResponseType,
)
from gemini_rest.redaction import REDACTED
from gemini_rest.services.credentials import GoogleAuthTokenProvider, StaticTokenProvider

from conftest import API_KEY, FakeResponse, array_body, fragment


PUBLIC_URL = "https://generativelanguage.googleapis.com/v1/models/gemini-pro:generateContent?key=my-api-key"
VERTEX_STREAM_URL = (
    "https://us-central1-aiplatform.googleapis.com/v1/projects/my-project/locations/"
    "us-central1/publishers/google/models/gemini-pro:streamGenerateContent"
)


@pytest.fixture
def request_body():
    return Request(contents=[Content(role="user", parts=[Part(text="Give me a recipe for banana bread.")])])


@pytest.fixture(autouse=True)
def v1_settings(monkeypatch):
    """Pin endpoint settings so the environment cannot change URLs."""
    monkeypatch.setattr(settings, "beta", False)
    monkeypatch.setattr(settings, "public_base_api", "https://generativelanguage.googleapis.com/v1")
    monkeypatch.setattr(settings, "vertex_base_api", "https://{region}-aiplatform.googleapis.com/v1")


class TestConstruction:
    def test_public_client_url(self):
        client = Client(API_KEY)

        assert client.url == PUBLIC_URL
        assert not client.is_vertex
        assert client.model == Model.GEMINI_PRO

    def test_named_constructors(self):
        client = Client.from_model_response_type(Model.GEMINI_1_5_PRO, API_KEY, ResponseType.COUNT_TOKENS)

        assert client.url.endswith("/models/gemini-1.5-pro:countTokens?key=my-api-key")
        assert Client.from_response_type(ResponseType.GET_MODEL_LIST, API_KEY).url.endswith("/v1/models?key=my-api-key")
        assert Client.from_model(Model.GEMINI_PRO_VISION, API_KEY).response_type == ResponseType.GENERATE_CONTENT

    def test_vertex_client_defaults_to_streaming(self):
        client = Client.vertex("us-central1", "my-project", token_provider=StaticTokenProvider("tok"))

        assert client.is_vertex
        assert client.region == "us-central1"
        assert client.project_id == "my-project"
        assert client.response_type == ResponseType.STREAM_GENERATE_CONTENT
        assert client.url == VERTEX_STREAM_URL

    def test_vertex_client_uses_application_default_credentials(self):
        client = Client.vertex("us-central1", "my-project")

        assert isinstance(client.token_provider, GoogleAuthTokenProvider)

    def test_beta_client_uses_v1beta(self):
        client = Client(API_KEY, beta=True)

        assert client.url.startswith("https://generativelanguage.googleapis.com/v1beta/models/")

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.setattr(settings, "api_key", None)
        monkeypatch.setattr(settings, "region", None)
        monkeypatch.setattr(settings, "project_id", None)

        with pytest.raises(ValueError, match="Missing credentials"):
            Client()

    @pytest.mark.parametrize(
        "vertex_kwargs",
        [
            {"region": "us-central1", "project_id": "my-project"},
            {"region": "us-central1"},
            {"project_id": "my-project"},
        ],
    )
    def test_api_key_with_vertex_location_is_rejected(self, vertex_kwargs):
        with pytest.raises(ValueError, match="Ambiguous credentials"):
            Client(API_KEY, **vertex_kwargs)


class TestRedaction:
    def test_public_client_text_hides_api_key(self):
        client = Client(API_KEY)

        for text in (repr(client), str(client), f"{client}"):
            assert API_KEY not in text
            assert REDACTED in text

    def test_vertex_client_text_hides_token(self):
        client = Client.vertex("us-central1", "my-project", token_provider=StaticTokenProvider("secret-token"))

        assert "secret-token" not in repr(client)
        assert "secret-token" not in repr(client.token_provider)
        assert "my-project" in repr(client)

    def test_vertex_client_with_unsupported_type_still_renders(self):
        client = Client.vertex(
            "us-central1",
            "my-project",
            response_type=ResponseType.COUNT_TOKENS,
            token_provider=StaticTokenProvider("t"),
        )

        assert "url=None" in repr(client)


class TestPost:
    @pytest.mark.asyncio
    async def test_generate_content(self, fake_session, request_body):
        fake_session.request.return_value = FakeResponse(200, json.dumps(fragment("Mash bananas.")).encode())
        client = Client(API_KEY, session=fake_session)

        result = await client.post(request_body)

        assert result.rest().text == "Mash bananas."
        assert result.streamed() is None
        assert result.count() is None
        fake_session.request.assert_awaited_once()
        method, url = fake_session.request.await_args.args
        kwargs = fake_session.request.await_args.kwargs
        assert (method, url) == ("POST", PUBLIC_URL)
        assert kwargs["json"] == {
            "contents": [{"role": "user", "parts": [{"text": "Give me a recipe for banana bread."}]}]
        }
        assert "Authorization" not in kwargs["headers"]
        assert "stream" not in kwargs

    @pytest.mark.asyncio
    async def test_per_call_timeout_is_forwarded(self, fake_session, request_body):
        fake_session.request.return_value = FakeResponse(200, b'{"totalTokens": 9}')
        client = Client(API_KEY, response_type=ResponseType.COUNT_TOKENS, session=fake_session)

        result = await client.post(request_body, timeout=5)

        assert result.count().totalTokens == 9
        assert fake_session.request.await_args.kwargs["timeout"] == 5

    @pytest.mark.asyncio
    async def test_vertex_stream_with_bearer_token(self, fake_session, request_body):
        response = FakeResponse(200, array_body([fragment("Banana "), fragment("bread")]), chunk_size=5)
        fake_session.request.return_value = response
        client = Client.vertex(
            "us-central1", "my-project", session=fake_session, token_provider=StaticTokenProvider("tok-123")
        )

        result = await client.post(request_body)
        stream = result.streamed()
        texts = [f.text async for f in stream]

        assert texts == ["Banana ", "bread"]
        args = fake_session.request.await_args
        assert args.args == ("POST", VERTEX_STREAM_URL)
        assert args.kwargs["headers"]["Authorization"] == "Bearer tok-123"
        assert args.kwargs["stream"] is True
        response.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stream_consumed_with_for_each_async(self, fake_session, request_body):
        fake_session.request.return_value = FakeResponse(200, array_body([fragment(str(i)) for i in range(4)]))
        client = Client(API_KEY, response_type=ResponseType.STREAM_GENERATE_CONTENT, session=fake_session)
        action = AsyncMock()

        stream = await client.stream_generate_content(request_body)
        count = await stream.for_each_async(action)

        assert count == 4
        assert action.await_count == 4
        assert all(isinstance(c.args[0], GeminiResponse) for c in action.await_args_list)

    @pytest.mark.asyncio
    async def test_streaming_error_status_releases_response(self, fake_session, request_body):
        response = FakeResponse(403, b'{"error": {"code": 403}}')
        fake_session.request.return_value = response
        client = Client(API_KEY, response_type=ResponseType.STREAM_GENERATE_CONTENT, session=fake_session)

        with pytest.raises(HTTPStatusError) as exc_info:
            await client.post(request_body)

        assert exc_info.value.code == 403
        response.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unauthorized(self, fake_session, request_body):
        fake_session.request.return_value = FakeResponse(401, b"")
        client = Client(API_KEY, session=fake_session)

        with pytest.raises(HTTPStatusError) as exc_info:
            await client.generate_content(request_body)

        assert exc_info.value.code == 401
        assert "Unauthorized" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_vertex_count_tokens_unsupported(self, fake_session, request_body):
        client = Client.vertex(
            "us-central1",
            "my-project",
            response_type=ResponseType.COUNT_TOKENS,
            session=fake_session,
            token_provider=StaticTokenProvider("t"),
        )

        with pytest.raises(UnsupportedOperationError):
            await client.post(request_body)
        fake_session.request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_post_rejects_get_operations(self, fake_session, request_body):
        client = Client(API_KEY, response_type=ResponseType.GET_MODEL, session=fake_session)

        with pytest.raises(UnsupportedOperationError):
            await client.post(request_body)

    @pytest.mark.asyncio
    async def test_beta_fields_follow_client_version(self, fake_session):
        fake_session.request.return_value = FakeResponse(200, json.dumps(fragment("[]")).encode())
        request = Request(
            contents=[Content(parts=[Part(text="List 5 cookie recipes")])],
            generationConfig=GenerationConfig(responseMimeType="application/json"),
        )

        await Client(API_KEY, session=fake_session).generate_content(request)
        v1_payload = fake_session.request.await_args.kwargs["json"]
        await Client(API_KEY, session=fake_session, beta=True).generate_content(request)
        beta_payload = fake_session.request.await_args.kwargs["json"]

        assert "generationConfig" not in v1_payload or "responseMimeType" not in v1_payload["generationConfig"]
        assert beta_payload["generationConfig"] == {"responseMimeType": "application/json"}


class TestModelInfo:
    @pytest.mark.asyncio
    async def test_get_model_list(self, fake_session):
        fake_session.request.return_value = FakeResponse(
            200, b'{"models": [{"name": "models/gemini-pro"}, {"name": "models/gemini-pro-vision"}]}'
        )
        client = Client(API_KEY, session=fake_session)

        models = await client.get_model_list()

        assert [m.name for m in models.models] == ["models/gemini-pro", "models/gemini-pro-vision"]
        assert fake_session.request.await_args.args == (
            "GET",
            "https://generativelanguage.googleapis.com/v1/models?key=my-api-key",
        )
        assert "json" not in fake_session.request.await_args.kwargs

    @pytest.mark.asyncio
    async def test_get_model(self, fake_session):
        fake_session.request.return_value = FakeResponse(
            200, b'{"name": "models/gemini-pro", "inputTokenLimit": 30720}'
        )
        client = Client(API_KEY, session=fake_session)

        model = await client.get_model()

        assert model.inputTokenLimit == 30720
        assert fake_session.request.await_args.args[1].endswith("/v1/models/gemini-pro?key=my-api-key")


class TestFailures:
    @pytest.mark.asyncio
    async def test_transport_error_strips_api_key(self, fake_session, request_body):
        fake_session.request.side_effect = RequestException(
            f"Failed to perform, curl: (28) Operation timed out. See {PUBLIC_URL} for details"
        )
        client = Client(API_KEY, session=fake_session)

        with pytest.raises(TransportError) as exc_info:
            await client.post(request_body)

        assert API_KEY not in str(exc_info.value)
        assert "gemini-pro:generateContent" in str(exc_info.value)
        assert exc_info.value.code is None

    @pytest.mark.asyncio
    async def test_transport_error_log_is_scrubbed(self, fake_session, request_body):
        sink = io.StringIO()
        handler_id = configure_logging("DEBUG", sink=sink)
        fake_session.request.side_effect = RequestException(f"could not resolve {PUBLIC_URL} key={API_KEY}")
        client = Client(API_KEY, session=fake_session)

        try:
            with pytest.raises(TransportError):
                await client.post(request_body)
        finally:
            logger.remove(handler_id)
            logger.disable("gemini_rest")

        assert "Request to https://generativelanguage.googleapis.com" in sink.getvalue()
        assert API_KEY not in sink.getvalue()

    @pytest.mark.asyncio
    async def test_credential_provider_failure(self, fake_session, request_body):
        with patch("google.auth.default", side_effect=DefaultCredentialsError("no ADC configured")):
            client = Client.vertex("us-central1", "my-project", session=fake_session)

            with pytest.raises(CredentialError, match="no ADC configured"):
                await client.post(request_body)

        fake_session.request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_provider_failure_is_a_credential_error(self, fake_session, request_body):
        provider = AsyncMock()
        provider.token.side_effect = RuntimeError("token service down")
        client = Client.vertex("us-central1", "my-project", session=fake_session, token_provider=provider)

        with pytest.raises(CredentialError):
            await client.post(request_body)


class TestSession:
    @pytest.mark.asyncio
    async def test_owned_session_is_created_and_closed(self):
        with patch("gemini_rest.client.create_session") as create:
            create.return_value.close = AsyncMock()
            async with Client(API_KEY, timeout=12) as client:
                session = client.session

            create.assert_called_once_with(12)
            session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_injected_session_is_left_open(self, fake_session):
        async with Client(API_KEY, session=fake_session):
            pass

        fake_session.close.assert_not_awaited()
