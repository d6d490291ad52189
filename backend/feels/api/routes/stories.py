from typing import Any

from fastapi import APIRouter, Depends
from sqlmodel import Session

from feels import crud
from feels.api.deps import CurrentUser, get_db
from feels.models import PostWithUser

router = APIRouter()


@router.get("/", response_model=list[PostWithUser])
def read_stories(
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    """
    Stories that have not expired yet, newest first.
    """
    return crud.get_stories(session=session)
