from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "feels"
    API_V1_STR: str = "/api"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []
    FRONTEND_HOST: str = "http://localhost:5173"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./feels.db"

    # Tokens are minted by the identity provider; we only verify them.
    AUTH_SECRET_KEY: str = "changethis"
    AUTH_ALGORITHM: str = "HS256"

    LLM_API_KEY: str | None = None
    LLM_BASE_URL: str | None = None
    MODEL_DEFAULT: str = "gpt-4o"
    MODEL_IMAGE: str = "dall-e-3"
    MODEL_TRANSCRIBE: str = "whisper-1"
    MODEL_MODERATION: str = "omni-moderation-latest"

    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024
    STORY_TTL_HOURS: int = 24
    FEED_PAGE_SIZE: int = 20
    SEARCH_LIMIT: int = 20


settings = Settings()  # type: ignore
