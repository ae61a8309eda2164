"""Tests for public and Vertex AI URL construction."""

import pytest

from gemini_rest.errors import UnsupportedOperationError
from gemini_rest.models import DEFAULT_MODEL, Model, ResponseType
from gemini_rest.services.urls import public_url, vertex_url


PUBLIC_BASE = "https://generativelanguage.googleapis.com/v1"


def test_public_generate_content_url():
    url = public_url(DEFAULT_MODEL, "my-api-key", ResponseType.GENERATE_CONTENT, base_url=PUBLIC_BASE)

    assert url == "https://generativelanguage.googleapis.com/v1/models/gemini-pro:generateContent?key=my-api-key"


@pytest.mark.parametrize(
    "response_type,expected",
    [
        (ResponseType.STREAM_GENERATE_CONTENT, "/models/gemini-1.5-flash:streamGenerateContent?key=k"),
        (ResponseType.COUNT_TOKENS, "/models/gemini-1.5-flash:countTokens?key=k"),
        (ResponseType.GET_MODEL, "/models/gemini-1.5-flash?key=k"),
        (ResponseType.GET_MODEL_LIST, "/models?key=k"),
    ],
)
def test_public_url_per_operation(response_type, expected):
    url = public_url(Model.GEMINI_1_5_FLASH, "k", response_type, base_url=PUBLIC_BASE)

    assert url == PUBLIC_BASE + expected


def test_public_url_accepts_custom_model_id():
    url = public_url("tunedModels/my-model", "k", ResponseType.GENERATE_CONTENT, base_url=PUBLIC_BASE)

    assert url == PUBLIC_BASE + "/models/tunedModels/my-model:generateContent?key=k"


def test_vertex_stream_generate_content_url():
    url = vertex_url(
        DEFAULT_MODEL,
        "us-central1",
        "my-project",
        ResponseType.STREAM_GENERATE_CONTENT,
        base_url="https://{region}-aiplatform.googleapis.com/v1",
    )

    assert url == (
        "https://us-central1-aiplatform.googleapis.com/v1/projects/my-project/locations/"
        "us-central1/publishers/google/models/gemini-pro:streamGenerateContent"
    )


@pytest.mark.parametrize(
    "response_type",
    [ResponseType.COUNT_TOKENS, ResponseType.GET_MODEL, ResponseType.GET_MODEL_LIST],
)
def test_vertex_rejects_unsupported_operations(response_type):
    with pytest.raises(UnsupportedOperationError):
        vertex_url(DEFAULT_MODEL, "us-central1", "my-project", response_type)
