"""Response models for Gemini API responses."""

from pydantic import BaseModel, Field

from .enums import FinishReason, HarmCategory, HarmProbability
from .request import Content


class SafetyRating(BaseModel):
    """Harm probability for one category."""

    category: HarmCategory | str = Field(
        ..., union_mode="left_to_right", description="Safety category"
    )
    probability: HarmProbability | str = Field(
        ..., union_mode="left_to_right", description="Harm probability"
    )
    blocked: bool = Field(default=False, description="Whether content was blocked")


class Citation(BaseModel):
    """Source attribution for a span of generated content."""

    startIndex: int | None = Field(default=None, description="Start of the cited span")
    endIndex: int | None = Field(default=None, description="End of the cited span")
    uri: str | None = Field(default=None, description="Source URI")
    title: str | None = Field(default=None, description="Source title")
    license: str | None = Field(default=None, description="Source license")


class CitationMetadata(BaseModel):
    """Citations attached to a candidate."""

    citations: list[Citation] = Field(default_factory=list, description="Citations")


class Candidate(BaseModel):
    """Candidate response from the model."""

    content: Content | None = Field(default=None, description="Content of the candidate")
    finishReason: FinishReason | str | None = Field(
        default=None, description="Reason for finishing"
    )
    safetyRatings: list[SafetyRating] = Field(
        default_factory=list, description="Safety ratings"
    )
    index: int | None = Field(default=None, description="Index of the candidate")
    citationMetadata: CitationMetadata | None = Field(
        default=None, description="Citation metadata"
    )


class PromptFeedback(BaseModel):
    """Safety feedback about the prompt itself."""

    blockReason: str | None = Field(default=None, description="Why the prompt was blocked")
    safetyRatings: list[SafetyRating] = Field(
        default_factory=list, description="Safety ratings of the prompt"
    )


class UsageMetadata(BaseModel):
    """Usage metadata for the response."""

    promptTokenCount: int = Field(default=0, description="Prompt token count")
    candidatesTokenCount: int = Field(default=0, description="Candidates token count")
    totalTokenCount: int = Field(default=0, description="Total token count")


class GeminiResponse(BaseModel):
    """Response model for generateContent and for each streamed fragment."""

    candidates: list[Candidate] = Field(
        default_factory=list, description="Candidates from generation"
    )
    promptFeedback: PromptFeedback | None = Field(
        default=None, description="Prompt feedback"
    )
    usageMetadata: UsageMetadata | None = Field(default=None, description="Usage metadata")

    @property
    def text(self) -> str:
        """Concatenated text of the first candidate, empty if there is none."""
        if not self.candidates or self.candidates[0].content is None:
            return ""
        return "".join(part.text or "" for part in self.candidates[0].content.parts)


class TokenCount(BaseModel):
    """Response model for countTokens."""

    totalTokens: int = Field(..., description="Total number of tokens")


class ModelInformation(BaseModel):
    """Description of one model."""

    name: str = Field(..., description="Resource name, e.g. models/gemini-pro")
    version: str | None = Field(default=None, description="Model version")
    displayName: str | None = Field(default=None, description="Human readable name")
    description: str | None = Field(default=None, description="Model description")
    inputTokenLimit: int | None = Field(default=None, description="Maximum input tokens")
    outputTokenLimit: int | None = Field(default=None, description="Maximum output tokens")
    supportedGenerationMethods: list[str] = Field(
        default_factory=list, description="Supported methods"
    )
    temperature: float | None = Field(default=None, description="Default temperature")
    topP: float | None = Field(default=None, description="Default top P")
    topK: int | None = Field(default=None, description="Default top K")


class ModelInformationList(BaseModel):
    """Response model for the model list endpoint."""

    models: list[ModelInformation] = Field(default_factory=list, description="Models")
    nextPageToken: str | None = Field(default=None, description="Token of the next page")
