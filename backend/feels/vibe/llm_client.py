import json
import logging
import re
from typing import Any

from openai import AsyncOpenAI

from feels.core.config import settings

logger = logging.getLogger(__name__)


def _extract_fenced_block(text: str) -> str | None:
    blocks = re.findall(r"```(?:json)?\s*(.*?)\s*```", text, re.DOTALL | re.IGNORECASE)
    return blocks[0].strip() if blocks else None


def _extract_balanced_object(text: str) -> str | None:
    """Best-effort extraction of the first balanced top-level JSON object."""
    start_idx = text.find("{")
    if start_idx == -1:
        return None

    depth = 0
    in_string = False
    escape = False
    for i in range(start_idx, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start_idx:i + 1]
    return None


def _json_candidates(raw_text: str) -> list[str]:
    text = (raw_text or "").strip()
    if not text:
        return []

    candidates: list[str] = []
    fenced = _extract_fenced_block(text)
    if fenced:
        candidates.append(fenced)
    candidates.append(text)
    balanced = _extract_balanced_object(text)
    if balanced:
        candidates.append(balanced)

    # Deduplicate while preserving order.
    seen = set()
    unique: list[str] = []
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        unique.append(candidate)
    return unique


def parse_json_object(raw_text: str) -> dict[str, Any]:
    """Parse a model reply into a dict. An empty reply is an empty object."""
    candidates = _json_candidates(raw_text)
    if not candidates:
        return {}
    errors: list[str] = []
    for candidate in candidates:
        try:
            parsed = json.loads(candidate, strict=False)
        except json.JSONDecodeError as e:
            errors.append(str(e))
            continue
        if isinstance(parsed, dict):
            return parsed
        errors.append(f"expected a JSON object, got {type(parsed).__name__}")
    raise ValueError("Unable to parse JSON response: " + " | ".join(errors[:3]))


def image_data_url(base64_image: str) -> str:
    return f"data:image/jpeg;base64,{base64_image}"


class LLMClient:
    """Thin async wrapper over the OpenAI API: chat (JSON mode), images, audio and moderation."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT
        self.client = AsyncOpenAI(
            base_url=base_url or settings.LLM_BASE_URL,
            api_key=api_key or settings.LLM_API_KEY,
        )

    async def complete_json(
        self,
        system_prompt: str,
        user_content: str | list[dict[str, Any]],
        *,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """
        Run a single chat completion in JSON mode and return the decoded object.
        `user_content` is either plain text or a list of content parts (text + image_url).
        """
        kwargs: dict[str, Any] = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        logger.info("Issuing JSON request to model %s...", self.model_name)
        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            response_format={"type": "json_object"},
            **kwargs,
        )

        if not getattr(response, "choices", None):
            logger.error("Received no choices from %s: %s", self.model_name, response)
            raise ValueError(f"Provider {self.model_name} returned no output")

        return parse_json_object(response.choices[0].message.content or "")

    async def generate_image(self, prompt: str) -> str:
        model = settings.MODEL_IMAGE
        logger.info("Issuing image generation request to model %s...", model)
        response = await self.client.images.generate(
            model=model,
            prompt=prompt,
            n=1,
            size="1024x1024",
            quality="hd",
        )
        data = response.data or []
        return (data[0].url or "") if data else ""

    async def transcribe(self, audio: bytes, filename: str, content_type: str) -> str:
        model = settings.MODEL_TRANSCRIBE
        logger.info("Issuing transcription request to model %s (%s bytes)...", model, len(audio))
        transcription = await self.client.audio.transcriptions.create(
            model=model,
            file=(filename, audio, content_type),
        )
        return transcription.text

    async def moderate(self, text: str) -> tuple[bool, list[str]]:
        """Return the flagged verdict and the names of the flagged categories."""
        response = await self.client.moderations.create(
            model=settings.MODEL_MODERATION,
            input=text,
        )
        result = response.results[0]
        categories = result.categories.model_dump(by_alias=True)
        flagged_categories = [name for name, flagged in categories.items() if flagged]
        return bool(result.flagged), flagged_categories
