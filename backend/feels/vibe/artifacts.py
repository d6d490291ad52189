import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EMOTION = "neutral"
DEFAULT_MOOD = "vibing"
DEFAULT_CONFIDENCE = 0.5
DEFAULT_INTENSITY = 5
DEFAULT_CAPTION = "When you're feeling it! 💯"


def _number_or_none(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _text_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


class EmotionAnalysis(BaseModel):
    """
    Emotion read from a vibe. Whatever the model returns, missing fields take
    their defaults, `confidence` lands in [0, 1] and `intensity` in [1, 10].
    """

    emotion: str = DEFAULT_EMOTION
    confidence: float = DEFAULT_CONFIDENCE
    mood: str = DEFAULT_MOOD
    intensity: int = DEFAULT_INTENSITY

    @field_validator("emotion", mode="before")
    @classmethod
    def _emotion(cls, value: Any) -> str:
        return _text_or_default(value, DEFAULT_EMOTION)

    @field_validator("mood", mode="before")
    @classmethod
    def _mood(cls, value: Any) -> str:
        return _text_or_default(value, DEFAULT_MOOD)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        number = _number_or_none(value)
        if number is None:
            return DEFAULT_CONFIDENCE
        return max(0.0, min(1.0, number))

    @field_validator("intensity", mode="before")
    @classmethod
    def _clamp_intensity(cls, value: Any) -> int:
        number = _number_or_none(value)
        if number is None:
            return DEFAULT_INTENSITY
        return int(max(1, min(10, round(number))))


class MemeRequest(BaseModel):
    emotion: str = Field(min_length=1, max_length=100)
    mood: str = Field(min_length=1, max_length=100)
    user_text: str = Field(min_length=1, max_length=2000)
    style: str | None = Field(default=None, max_length=100)


class MemeContent(BaseModel):
    """Intermediate `{imagePrompt, caption}` pair returned by the chat model."""

    model_config = ConfigDict(populate_by_name=True)

    image_prompt: str = Field(default="", alias="imagePrompt")
    caption: str = DEFAULT_CAPTION

    @field_validator("image_prompt", mode="before")
    @classmethod
    def _prompt(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("caption", mode="before")
    @classmethod
    def _caption(cls, value: Any) -> str:
        return _text_or_default(value, DEFAULT_CAPTION)


class MemeResult(BaseModel):
    image_url: str
    caption: str
    prompt: str


class ModerationResult(BaseModel):
    safe: bool
    flagged: bool
    categories: list[str] = Field(default_factory=list)


class ImageModerationResult(BaseModel):
    safe: bool = True
    description: str = "Content analyzed"

    @field_validator("safe", mode="before")
    @classmethod
    def _safe_unless_rejected(cls, value: Any) -> bool:
        return value is not False

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value: Any) -> str:
        return _text_or_default(value, "Content analyzed")


class AudioAnalysis(BaseModel):
    transcription: str
    emotion: EmotionAnalysis
