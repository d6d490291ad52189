import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from feels import crud
from feels.api.deps import CurrentUser, get_db
from feels.models import (
    ConversationPreview,
    DirectMessageCreate,
    DirectMessagePublic,
    DirectMessageWithUsers,
    Success,
)

router = APIRouter()


@router.post("/messages", response_model=DirectMessagePublic)
def send_message(
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    message_in: DirectMessageCreate,
) -> Any:
    """
    Send a direct message (text and/or media) to another user.
    """
    if not (message_in.content and message_in.content.strip()) and not message_in.media_url:
        raise HTTPException(status_code=400, detail="Message content is required")
    if message_in.receiver_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot message yourself")
    if not crud.get_user(session=session, user_id=message_in.receiver_id):
        raise HTTPException(status_code=404, detail="User not found")
    return crud.create_message(session=session, message_in=message_in, sender_id=current_user.id)


@router.post("/messages/{id}/read", response_model=Success)
def mark_message_read(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    success = crud.mark_message_as_read(
        session=session, message_id=id, receiver_id=current_user.id
    )
    return Success(success=success)


@router.get("/conversations", response_model=list[ConversationPreview])
def read_conversations(
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    """
    One entry per counterpart with the latest message, most recent first.
    """
    return crud.get_conversations(session=session, user_id=current_user.id)


@router.get("/conversations/{user_id}", response_model=list[DirectMessageWithUsers])
def read_conversation(
    user_id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    return crud.get_conversation(
        session=session, user_id=current_user.id, other_user_id=user_id
    )
