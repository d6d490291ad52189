from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from feels.core.config import settings


def create_access_token(
    subject: str | Any, expires_delta: timedelta, claims: dict[str, Any] | None = None
) -> str:
    """Mint a token shaped like the identity provider's. Used by tests and local dev."""
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {**(claims or {}), "exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.AUTH_SECRET_KEY, algorithm=settings.AUTH_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.AUTH_SECRET_KEY, algorithms=[settings.AUTH_ALGORITHM])
