"""
URL construction for the two addressing modes.

Public models are addressed with an API key in the query string:
    {base}/models/{model}:{operation}?key={api_key}

Vertex AI models are addressed by project and region, authenticated with a
bearer token obtained separately:
    https://{region}-aiplatform.googleapis.com/v1/projects/{project_id}/locations/{region}/publishers/google/models/{model}:{operation}
"""

from gemini_rest.config import settings
from gemini_rest.errors import UnsupportedOperationError
from gemini_rest.models.enums import Model, ResponseType


VERTEX_RESPONSE_TYPES = (
    ResponseType.GENERATE_CONTENT,
    ResponseType.STREAM_GENERATE_CONTENT,
)


def public_url(
    model: Model | str,
    api_key: str,
    response_type: ResponseType,
    base_url: str | None = None,
) -> str:
    """Build the public endpoint URL for an operation."""
    base_url = base_url or settings.public_api_base

    if response_type.has_operation_suffix:
        return f"{base_url}/models/{model}:{response_type}?key={api_key}"
    if response_type == ResponseType.GET_MODEL:
        return f"{base_url}/models/{model}?key={api_key}"
    if response_type == ResponseType.GET_MODEL_LIST:
        return f"{base_url}/models?key={api_key}"
    raise UnsupportedOperationError(f"Unsupported response type: {response_type}")


def vertex_url(
    model: Model | str,
    region: str,
    project_id: str,
    response_type: ResponseType,
    base_url: str | None = None,
) -> str:
    """Build the Vertex AI endpoint URL for an operation."""
    if response_type not in VERTEX_RESPONSE_TYPES:
        raise UnsupportedOperationError(
            f"Unsupported response type for Vertex AI: {response_type}"
        )

    base_url = (base_url or settings.vertex_base_api).replace("{region}", region)
    return (
        f"{base_url}/projects/{project_id}/locations/{region}"
        f"/publishers/google/models/{model}:{response_type}"
    )
