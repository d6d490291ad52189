import logging

from feels.vibe.artifacts import (
    EmotionAnalysis,
    ImageModerationResult,
    MemeContent,
    MemeRequest,
    MemeResult,
    ModerationResult,
)
from feels.vibe.llm_client import LLMClient, image_data_url
from feels.vibe.prompts.emotion import (
    IMAGE_EMOTION_SYSTEM_PROMPT,
    IMAGE_EMOTION_USER_TEXT,
    TEXT_EMOTION_SYSTEM_PROMPT,
)
from feels.vibe.prompts.meme import IMAGE_STYLE_TEMPLATE, MEME_SYSTEM_PROMPT, MEME_USER_TEMPLATE
from feels.vibe.prompts.moderation import (
    IMAGE_MODERATION_SYSTEM_PROMPT,
    IMAGE_MODERATION_USER_TEXT,
)

logger = logging.getLogger(__name__)


class VibeServiceError(Exception):
    """Raised when an upstream model call fails or returns something unusable."""


def _image_parts(text: str, base64_image: str) -> list[dict]:
    return [
        {"type": "text", "text": text},
        {"type": "image_url", "image_url": {"url": image_data_url(base64_image)}},
    ]


class VibeService:
    """
    Turns a vibe (text, selfie or voice clip) into an emotion reading and a captioned image.

    Every method is a stateless request/response against the model API: no retries,
    no caching, no intermediate state.
    """

    def __init__(self, llm: LLMClient | None = None):
        self.llm = llm or LLMClient()

    async def analyze_text_emotion(self, text: str) -> EmotionAnalysis:
        try:
            result = await self.llm.complete_json(TEXT_EMOTION_SYSTEM_PROMPT, text)
            return EmotionAnalysis.model_validate(result)
        except Exception as e:
            logger.error("Text emotion analysis failed: %s", e)
            raise VibeServiceError(f"Failed to analyze emotion: {e}") from e

    async def analyze_image_emotion(self, base64_image: str) -> EmotionAnalysis:
        try:
            result = await self.llm.complete_json(
                IMAGE_EMOTION_SYSTEM_PROMPT,
                _image_parts(IMAGE_EMOTION_USER_TEXT, base64_image),
                max_tokens=300,
            )
            return EmotionAnalysis.model_validate(result)
        except Exception as e:
            logger.error("Image emotion analysis failed: %s", e)
            raise VibeServiceError(f"Failed to analyze image emotion: {e}") from e

    async def transcribe_audio(
        self,
        audio: bytes,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
    ) -> str:
        try:
            return await self.llm.transcribe(audio, filename, content_type)
        except Exception as e:
            logger.error("Audio transcription failed: %s", e)
            raise VibeServiceError(f"Failed to transcribe audio: {e}") from e

    async def generate_meme(self, request: MemeRequest) -> MemeResult:
        """Ask the chat model for an image prompt and caption, then render the image."""
        try:
            raw = await self.llm.complete_json(
                MEME_SYSTEM_PROMPT,
                MEME_USER_TEMPLATE.format(
                    emotion=request.emotion,
                    mood=request.mood,
                    user_text=request.user_text,
                    style=request.style or "meme",
                ),
            )
            content = MemeContent.model_validate(raw)
            image_url = await self.llm.generate_image(
                IMAGE_STYLE_TEMPLATE.format(image_prompt=content.image_prompt)
            )
        except Exception as e:
            logger.error("Meme generation failed: %s", e)
            raise VibeServiceError(f"Failed to generate meme: {e}") from e

        return MemeResult(
            image_url=image_url,
            caption=content.caption,
            prompt=content.image_prompt,
        )

    async def moderate_content(self, text: str) -> ModerationResult:
        try:
            flagged, categories = await self.llm.moderate(text)
        except Exception as e:
            logger.error("Content moderation failed: %s", e)
            raise VibeServiceError(f"Failed to moderate content: {e}") from e
        return ModerationResult(safe=not flagged, flagged=flagged, categories=categories)

    async def moderate_image(self, base64_image: str) -> ImageModerationResult:
        try:
            result = await self.llm.complete_json(
                IMAGE_MODERATION_SYSTEM_PROMPT,
                _image_parts(IMAGE_MODERATION_USER_TEXT, base64_image),
                max_tokens=200,
            )
            return ImageModerationResult.model_validate(result)
        except Exception as e:
            logger.error("Image moderation failed: %s", e)
            raise VibeServiceError(f"Failed to moderate image: {e}") from e


_vibe_service_instance = None


def get_vibe_service() -> VibeService:
    """Lazy process-wide service, also used as the FastAPI dependency."""
    global _vibe_service_instance
    if _vibe_service_instance is None:
        _vibe_service_instance = VibeService()
    return _vibe_service_instance
