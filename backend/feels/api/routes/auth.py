from typing import Any

from fastapi import APIRouter

from feels.api.deps import CurrentUser
from feels.models import UserPublic

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/user", response_model=UserPublic)
def read_current_user(current_user: CurrentUser) -> Any:
    return current_user
