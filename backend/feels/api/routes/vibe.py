import base64
import logging
from typing import Any

from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from feels.api.deps import CurrentUser, VibeServiceDep
from feels.core.config import settings
from feels.vibe.artifacts import AudioAnalysis, EmotionAnalysis, MemeRequest, MemeResult
from feels.vibe.service import VibeService, VibeServiceError

router = APIRouter()
logger = logging.getLogger(__name__)


class AnalyzeTextRequest(BaseModel):
    text: str | None = None


class GenerateMemeRequest(BaseModel):
    emotion: str | None = Field(default=None, max_length=100)
    mood: str | None = Field(default=None, max_length=100)
    user_text: str | None = Field(default=None, max_length=2000)
    style: str | None = Field(default=None, max_length=100)


async def read_upload(file: UploadFile | None, label: str) -> bytes:
    """Read an upload into memory, enforcing the size cap."""
    if file is None:
        raise HTTPException(status_code=400, detail=f"{label} is required")
    data = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    if not data:
        raise HTTPException(status_code=400, detail=f"{label} is required")
    if len(data) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"{label} exceeds the {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB upload limit",
        )
    return data


async def _moderate_text(vibe: VibeService, text: str, message: str) -> None:
    moderation = await vibe.moderate_content(text)
    if not moderation.safe:
        logger.info("Moderation flagged input: %s", moderation.categories)
        raise HTTPException(
            status_code=400,
            detail={"message": message, "flagged": moderation.categories},
        )


@router.post("/analyze-text", response_model=EmotionAnalysis)
async def analyze_text(
    body: AnalyzeTextRequest,
    vibe: VibeServiceDep,
    current_user: CurrentUser,
) -> Any:
    """
    Moderate the typed vibe, then read its emotion.
    """
    if not body.text or not body.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    try:
        await _moderate_text(vibe, body.text, "Content not appropriate")
        return await vibe.analyze_text_emotion(body.text)
    except VibeServiceError as e:
        logger.error("Error analyzing text emotion: %s", e)
        raise HTTPException(status_code=500, detail="Failed to analyze emotion")


@router.post("/analyze-image", response_model=EmotionAnalysis)
async def analyze_image(
    vibe: VibeServiceDep,
    current_user: CurrentUser,
    image: UploadFile | None = File(None),
) -> Any:
    """
    Moderate an uploaded selfie, then read its emotion.
    """
    data = await read_upload(image, "Image")
    base64_image = base64.b64encode(data).decode()
    try:
        moderation = await vibe.moderate_image(base64_image)
        if not moderation.safe:
            raise HTTPException(
                status_code=400,
                detail={
                    "message": "Image content not appropriate",
                    "description": moderation.description,
                },
            )
        return await vibe.analyze_image_emotion(base64_image)
    except VibeServiceError as e:
        logger.error("Error analyzing image emotion: %s", e)
        raise HTTPException(status_code=500, detail="Failed to analyze image emotion")


@router.post("/transcribe-audio", response_model=AudioAnalysis)
async def transcribe_audio(
    vibe: VibeServiceDep,
    current_user: CurrentUser,
    audio: UploadFile | None = File(None),
) -> Any:
    """
    Transcribe a voice vibe, moderate the transcript and read its emotion.
    """
    data = await read_upload(audio, "Audio file")
    try:
        transcription = await vibe.transcribe_audio(
            data,
            filename=audio.filename or "audio.webm",
            content_type=audio.content_type or "audio/webm",
        )
        await _moderate_text(vibe, transcription, "Audio content not appropriate")
        emotion = await vibe.analyze_text_emotion(transcription)
    except VibeServiceError as e:
        logger.error("Error transcribing audio: %s", e)
        raise HTTPException(status_code=500, detail="Failed to transcribe audio")
    return AudioAnalysis(transcription=transcription, emotion=emotion)


@router.post("/generate-meme", response_model=MemeResult)
async def generate_meme(
    body: GenerateMemeRequest,
    vibe: VibeServiceDep,
    current_user: CurrentUser,
) -> Any:
    """
    Turn an analyzed vibe into a captioned image.
    """
    if not body.emotion or not body.mood or not body.user_text:
        raise HTTPException(status_code=400, detail="Missing required fields")
    request = MemeRequest(
        emotion=body.emotion,
        mood=body.mood,
        user_text=body.user_text,
        style=body.style,
    )
    try:
        await _moderate_text(vibe, request.user_text, "Content not appropriate")
        return await vibe.generate_meme(request)
    except VibeServiceError as e:
        logger.error("Error generating meme: %s", e)
        raise HTTPException(status_code=500, detail="Failed to generate meme")
