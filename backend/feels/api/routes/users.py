import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from feels import crud
from feels.api.deps import CurrentUser, get_db
from feels.models import FollowStatus, Success, User, UserProfile, UserPublic, UserUpdateProfile

router = APIRouter()


def _profile(session: Session, user: User) -> UserProfile:
    stats = crud.get_user_stats(session=session, user_id=user.id)
    return UserProfile.model_validate({**user.model_dump(), "stats": stats.model_dump()})


def _get_user_or_404(session: Session, user_id: uuid.UUID) -> User:
    user = crud.get_user(session=session, user_id=user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/by-username/{username}", response_model=UserProfile)
def read_user_by_username(
    username: str,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    user = crud.get_user_by_username(session=session, username=username)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _profile(session, user)


@router.get("/{id}", response_model=UserProfile)
def read_user(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    """
    Get a user's profile together with their post/follower counts.
    """
    return _profile(session, _get_user_or_404(session, id))


@router.put("/{id}", response_model=UserPublic)
def update_user_profile(
    *,
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    user_in: UserUpdateProfile,
) -> Any:
    """
    Update your own username, bio and display name.
    """
    if id != current_user.id:
        raise HTTPException(status_code=403, detail="Not enough permissions")
    if user_in.username:
        existing = crud.get_user_by_username(session=session, username=user_in.username)
        if existing and existing.id != current_user.id:
            raise HTTPException(status_code=409, detail="Username already taken")
    return crud.update_user_profile(session=session, db_user=current_user, user_in=user_in)


@router.get("/{id}/followers", response_model=list[UserPublic])
def read_followers(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    _get_user_or_404(session, id)
    return crud.get_followers(session=session, user_id=id)


@router.get("/{id}/following", response_model=list[UserPublic])
def read_following(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    _get_user_or_404(session, id)
    return crud.get_following(session=session, user_id=id)


@router.get("/{id}/is-following", response_model=FollowStatus)
def read_is_following(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    following = crud.is_following(
        session=session, follower_id=current_user.id, following_id=id
    )
    return FollowStatus(following=following)


@router.post("/{id}/follow", response_model=Success)
def follow_user(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    if id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot follow yourself")
    _get_user_or_404(session, id)
    success = crud.follow_user(session=session, follower_id=current_user.id, following_id=id)
    return Success(success=success)


@router.delete("/{id}/follow", response_model=Success)
def unfollow_user(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    success = crud.unfollow_user(
        session=session, follower_id=current_user.id, following_id=id
    )
    return Success(success=success)
