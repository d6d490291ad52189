import uuid
from collections.abc import Callable, Generator
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from feels.api.deps import get_db
from feels.core.security import create_access_token
from feels.main import app
from feels.vibe.artifacts import (
    EmotionAnalysis,
    ImageModerationResult,
    MemeRequest,
    MemeResult,
    ModerationResult,
)
from feels.vibe.service import VibeServiceError, get_vibe_service


class FakeVibeService:
    """Records every call; results are plain attributes tests can overwrite."""

    def __init__(self):
        self.calls: list[str] = []
        self.text_moderation = ModerationResult(safe=True, flagged=False, categories=[])
        self.image_moderation = ImageModerationResult(safe=True, description="ok")
        self.emotion = EmotionAnalysis(
            emotion="funny", confidence=0.8, mood="coping", intensity=6
        )
        self.transcript = "I bombed my exam but I'm laughing about it 😂"
        self.meme = MemeResult(
            image_url="https://images.example.com/meme.png",
            caption="Exam? Never heard of her 😂 #coping",
            prompt="A student laughing at a failed exam paper",
        )
        self.fail_with: str | None = None

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with == name:
            raise VibeServiceError(f"{name} blew up")

    async def moderate_content(self, text: str) -> ModerationResult:
        self._record("moderate_content")
        return self.text_moderation

    async def moderate_image(self, base64_image: str) -> ImageModerationResult:
        self._record("moderate_image")
        return self.image_moderation

    async def analyze_text_emotion(self, text: str) -> EmotionAnalysis:
        self._record("analyze_text_emotion")
        return self.emotion

    async def analyze_image_emotion(self, base64_image: str) -> EmotionAnalysis:
        self._record("analyze_image_emotion")
        return self.emotion

    async def transcribe_audio(self, audio: bytes, filename: str = "audio.webm",
                               content_type: str = "audio/webm") -> str:
        self._record("transcribe_audio")
        return self.transcript

    async def generate_meme(self, request: MemeRequest) -> MemeResult:
        self._record("generate_meme")
        return self.meme


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture(name="vibe")
def vibe_fixture() -> FakeVibeService:
    return FakeVibeService()


@pytest.fixture(name="client")
def client_fixture(engine, vibe) -> Generator[TestClient, None, None]:
    def get_db_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = get_db_override
    app.dependency_overrides[get_vibe_service] = lambda: vibe
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(name="auth_headers")
def auth_headers_fixture() -> Callable[..., dict[str, str]]:
    def make(user_id: uuid.UUID | None = None, **claims: str) -> dict[str, str]:
        token = create_access_token(user_id or uuid.uuid4(), timedelta(minutes=30), claims)
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest.fixture(name="login")
def login_fixture(client, auth_headers) -> Callable[..., tuple[uuid.UUID, dict[str, str]]]:
    """Create a user through the auth seam; returns its id and request headers."""

    def make(**claims: str) -> tuple[uuid.UUID, dict[str, str]]:
        user_id = uuid.uuid4()
        headers = auth_headers(user_id, **claims)
        r = client.get("/api/auth/user", headers=headers)
        assert r.status_code == 200
        return user_id, headers

    return make
