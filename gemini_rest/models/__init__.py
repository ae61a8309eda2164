"""Data models for the client."""

from .enums import (
    DEFAULT_MODEL,
    FinishReason,
    HarmBlockThreshold,
    HarmCategory,
    HarmProbability,
    Model,
    ResponseType,
    Role,
)
from .request import (
    Content,
    FileData,
    FunctionDeclaration,
    GenerationConfig,
    InlineData,
    Offset,
    Part,
    Request,
    SafetySetting,
    Tool,
    VideoMetadata,
)
from .response import (
    Candidate,
    Citation,
    CitationMetadata,
    GeminiResponse,
    ModelInformation,
    ModelInformationList,
    PromptFeedback,
    SafetyRating,
    TokenCount,
    UsageMetadata,
)

__all__ = [
    "DEFAULT_MODEL",
    "FinishReason",
    "HarmBlockThreshold",
    "HarmCategory",
    "HarmProbability",
    "Model",
    "ResponseType",
    "Role",
    "Content",
    "FileData",
    "FunctionDeclaration",
    "GenerationConfig",
    "InlineData",
    "Offset",
    "Part",
    "Request",
    "SafetySetting",
    "Tool",
    "VideoMetadata",
    "Candidate",
    "Citation",
    "CitationMetadata",
    "GeminiResponse",
    "ModelInformation",
    "ModelInformationList",
    "PromptFeedback",
    "SafetyRating",
    "TokenCount",
    "UsageMetadata",
]
