from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from feels import crud
from feels.api.deps import CurrentUser, get_db
from feels.core.config import settings
from feels.models import HashtagCount, PostWithUser, UserPublic

router = APIRouter()

SearchQuery = Annotated[str, Query(min_length=1, max_length=100)]


@router.get("/users", response_model=list[UserPublic])
def search_users(
    q: SearchQuery,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    return crud.search_users(session=session, query=q, limit=settings.SEARCH_LIMIT)


@router.get("/posts", response_model=list[PostWithUser])
def search_posts(
    q: SearchQuery,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    return crud.search_posts(session=session, query=q, limit=settings.SEARCH_LIMIT)


@router.get("/hashtags", response_model=list[HashtagCount])
def search_hashtags(
    q: SearchQuery,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    return crud.search_hashtags(session=session, query=q, limit=settings.SEARCH_LIMIT)
