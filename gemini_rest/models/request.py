"""Request models for the Gemini generateContent family of endpoints."""

from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import HarmBlockThreshold, HarmCategory, Role


class InlineData(BaseModel):
    """Inline data, e.g. an image."""

    model_config = ConfigDict(frozen=True)

    mimeType: str = Field(..., description="MIME type of the data")
    data: str = Field(..., description="Base64 encoded data")


class FileData(BaseModel):
    """Reference to a file stored elsewhere."""

    model_config = ConfigDict(frozen=True)

    mimeType: str = Field(..., description="MIME type of the file")
    fileUri: str = Field(..., description="URI of the file")


class Offset(BaseModel):
    """Offset into a video."""

    model_config = ConfigDict(frozen=True)

    seconds: int = Field(default=0, description="Whole seconds")
    nanos: int = Field(default=0, description="Nanosecond remainder")


class VideoMetadata(BaseModel):
    """Start and end offsets of a video clip."""

    model_config = ConfigDict(frozen=True)

    startOffset: Offset = Field(..., description="Start offset")
    endOffset: Offset = Field(..., description="End offset")


PART_VARIANTS = ("text", "inlineData", "fileData", "videoMetadata")


class Part(BaseModel):
    """Part of content. At most one of the variants is populated."""

    model_config = ConfigDict(frozen=True)

    text: str | None = Field(default=None, description="Text content")
    inlineData: InlineData | None = Field(default=None, description="Inline data")
    fileData: FileData | None = Field(default=None, description="File reference")
    videoMetadata: VideoMetadata | None = Field(
        default=None, description="Video clip metadata"
    )

    @model_validator(mode="after")
    def _single_variant(self) -> "Part":
        populated = [name for name in PART_VARIANTS if getattr(self, name) is not None]
        if len(populated) > 1:
            raise ValueError(
                f"Part must populate only one of {', '.join(PART_VARIANTS)}; got {', '.join(populated)}"
            )
        return self


class Content(BaseModel):
    """Content with role and parts."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(default=Role.USER, description="Role of the content")
    parts: list[Part] = Field(default_factory=list, description="Parts of the content")


class FunctionDeclaration(BaseModel):
    """A function the model may call."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Function name")
    description: str = Field(..., description="What the function does")
    parameters: dict[str, Any] = Field(
        default_factory=dict, description="OpenAPI object schema of the parameters"
    )


class Tool(BaseModel):
    """Tool configuration."""

    model_config = ConfigDict(frozen=True)

    functionDeclarations: list[FunctionDeclaration] = Field(
        default_factory=list, description="Function declarations"
    )


class SafetySetting(BaseModel):
    """Safety setting for content generation."""

    model_config = ConfigDict(frozen=True)

    category: HarmCategory = Field(..., description="Safety category")
    threshold: HarmBlockThreshold = Field(..., description="Blocking threshold")


class GenerationConfig(BaseModel):
    """Generation configuration. Unset values are left to the service defaults."""

    model_config = ConfigDict(frozen=True)

    temperature: float | None = Field(default=None, description="Sampling temperature")
    topP: float | None = Field(default=None, description="Nucleus sampling probability")
    topK: int | None = Field(default=None, description="Top-k sampling")
    candidateCount: int | None = Field(default=None, description="Number of candidates")
    maxOutputTokens: int | None = Field(default=None, description="Maximum output tokens")
    stopSequences: list[str] | None = Field(default=None, description="Stop sequences")
    responseMimeType: str | None = Field(
        default=None, description="Output MIME type (beta only)"
    )


# Fields only the v1beta endpoint understands, as paths into the payload
BETA_ONLY_FIELDS = (("systemInstruction",), ("generationConfig", "responseMimeType"))


class Request(BaseModel):
    """Request model for generateContent, streamGenerateContent and countTokens."""

    model_config = ConfigDict(frozen=True)

    contents: list[Content] = Field(..., description="Contents to generate from")
    tools: list[Tool] | None = Field(default=None, description="Tools configuration")
    safetySettings: list[SafetySetting] | None = Field(
        default=None, description="Safety settings"
    )
    generationConfig: GenerationConfig | None = Field(
        default=None, description="Generation configuration"
    )
    systemInstruction: Content | None = Field(
        default=None, description="System instruction (beta only)"
    )

    def to_payload(self, beta: bool = False) -> dict[str, Any]:
        """
        Serialize to the JSON body sent on the wire.

        Args:
            beta: Whether the target endpoint is v1beta

        Returns:
            JSON-compatible dict without null keys
        """
        payload = self.model_dump(mode="json", exclude_none=True)
        if beta:
            return payload

        for path in BETA_ONLY_FIELDS:
            parent = payload
            for key in path[:-1]:
                parent = parent.get(key, {})
            if path[-1] in parent:
                logger.warning(f"Dropping beta-only field {'.'.join(path)} from v1 request")
                del parent[path[-1]]
        return payload
