import uuid
from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from sqlmodel import Session

from feels import crud
from feels.analytics import AnalyticsStore
from feels.core.db import engine
from feels.core.security import decode_access_token
from feels.models import TokenPayload, User, UserUpsert
from feels.vibe.service import VibeService, get_vibe_service


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]

bearer_scheme = HTTPBearer(auto_error=False)
TokenDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(session: SessionDep, credentials: TokenDep) -> User:
    """
    Resolve the caller from the identity provider's bearer token.
    The user row is created on first sight and later tokens only fill fields it is still missing.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
        token_data = TokenPayload(**payload)
        user_in = UserUpsert(
            id=uuid.UUID(token_data.sub or ""),
            **token_data.model_dump(exclude={"sub"}, exclude_none=True),
        )
    except (InvalidTokenError, ValidationError, ValueError):
        raise _unauthorized("Could not validate credentials")
    return crud.upsert_user(session=session, user_in=user_in)


CurrentUser = Annotated[User, Depends(get_current_user)]
VibeServiceDep = Annotated[VibeService, Depends(get_vibe_service)]


def get_analytics_store(session: SessionDep) -> AnalyticsStore:
    return AnalyticsStore(session)


AnalyticsDep = Annotated[AnalyticsStore, Depends(get_analytics_store)]
