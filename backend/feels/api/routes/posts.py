import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from feels import crud
from feels.api.deps import CurrentUser, get_db
from feels.core.config import settings
from feels.models import (
    CommentCreate,
    CommentPublic,
    CommentWithUser,
    FeedPost,
    Post,
    PostCreate,
    PostPublic,
    PostWithUser,
    Success,
)

router = APIRouter()

Limit = Annotated[int, Query(ge=1, le=100)]
Offset = Annotated[int, Query(ge=0)]


def _get_post_or_404(session: Session, post_id: uuid.UUID) -> Post:
    post = crud.get_post(session=session, post_id=post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/", response_model=PostPublic)
def create_post(
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    post_in: PostCreate,
) -> Any:
    """
    Share a vibe. Stories expire after the configured TTL.
    """
    return crud.create_post(session=session, post_in=post_in, user_id=current_user.id)


@router.get("/feed", response_model=list[FeedPost])
def read_feed(
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
    limit: Limit = settings.FEED_PAGE_SIZE,
    offset: Offset = 0,
) -> Any:
    return crud.get_feed_posts(
        session=session, viewer_id=current_user.id, limit=limit, offset=offset
    )


@router.get("/user/{user_id}", response_model=list[PostWithUser])
def read_user_posts(
    user_id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
    limit: Limit = settings.FEED_PAGE_SIZE,
    offset: Offset = 0,
) -> Any:
    return crud.get_user_posts(session=session, user_id=user_id, limit=limit, offset=offset)


@router.get("/{id}", response_model=FeedPost)
def read_post(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    post = crud.get_feed_post(session=session, post_id=id, viewer_id=current_user.id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.delete("/{id}", response_model=Success)
def delete_post(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    if not crud.delete_post(session=session, post_id=id, user_id=current_user.id):
        raise HTTPException(status_code=404, detail="Post not found or unauthorized")
    return Success(success=True)


@router.post("/{id}/like", response_model=Success)
def like_post(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    _get_post_or_404(session, id)
    return Success(success=crud.like_post(session=session, post_id=id, user_id=current_user.id))


@router.delete("/{id}/like", response_model=Success)
def unlike_post(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    _get_post_or_404(session, id)
    return Success(
        success=crud.unlike_post(session=session, post_id=id, user_id=current_user.id)
    )


@router.post("/{id}/comments", response_model=CommentPublic)
def create_comment(
    *,
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    comment_in: CommentCreate,
) -> Any:
    _get_post_or_404(session, id)
    return crud.create_comment(
        session=session, comment_in=comment_in, post_id=id, user_id=current_user.id
    )


@router.get("/{id}/comments", response_model=list[CommentWithUser])
def read_comments(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    _get_post_or_404(session, id)
    return crud.get_post_comments(session=session, post_id=id)
