"""Enumerations shared by request and response models."""

from enum import Enum


class Model(str, Enum):
    """Known Gemini model ids. Any other string is accepted as a custom id."""

    GEMINI_PRO = "gemini-pro"
    GEMINI_PRO_VISION = "gemini-pro-vision"
    GEMINI_1_0_PRO = "gemini-1.0-pro"
    GEMINI_1_5_PRO = "gemini-1.5-pro"
    GEMINI_1_5_FLASH = "gemini-1.5-flash"

    def __str__(self) -> str:
        return self.value


DEFAULT_MODEL = Model.GEMINI_PRO


class Role(str, Enum):
    """Author of a piece of content."""

    USER = "user"
    MODEL = "model"

    def __str__(self) -> str:
        return self.value


class ResponseType(str, Enum):
    """Operation kind requested from the service."""

    GENERATE_CONTENT = "generateContent"
    STREAM_GENERATE_CONTENT = "streamGenerateContent"
    COUNT_TOKENS = "countTokens"
    GET_MODEL = "getModel"
    GET_MODEL_LIST = "listModels"

    def __str__(self) -> str:
        return self.value

    @property
    def has_operation_suffix(self) -> bool:
        return self in (
            ResponseType.GENERATE_CONTENT,
            ResponseType.STREAM_GENERATE_CONTENT,
            ResponseType.COUNT_TOKENS,
        )


class HarmCategory(str, Enum):
    """Safety category a threshold applies to."""

    HARM_CATEGORY_SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    HARM_CATEGORY_HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    HARM_CATEGORY_HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HARM_CATEGORY_DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"


class HarmProbability(str, Enum):
    """Harm probability level reported for a piece of content."""

    HARM_PROBABILITY_UNSPECIFIED = "HARM_PROBABILITY_UNSPECIFIED"
    NEGLIGIBLE = "NEGLIGIBLE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class HarmBlockThreshold(str, Enum):
    """Probability threshold at which content is blocked."""

    BLOCK_NONE = "BLOCK_NONE"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"


class FinishReason(str, Enum):
    """Why the model stopped generating tokens."""

    FINISH_REASON_UNSPECIFIED = "FINISH_REASON_UNSPECIFIED"
    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    SAFETY = "SAFETY"
    RECITATION = "RECITATION"
    OTHER = "OTHER"
