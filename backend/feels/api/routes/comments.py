import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from feels import crud
from feels.api.deps import CurrentUser, get_db
from feels.models import Success

router = APIRouter()


@router.delete("/{id}", response_model=Success)
def delete_comment(
    id: uuid.UUID,
    session: Session = Depends(get_db),
    current_user: CurrentUser = None,
) -> Any:
    """
    Delete one of your own comments.
    """
    if not crud.delete_comment(session=session, comment_id=id, user_id=current_user.id):
        raise HTTPException(status_code=404, detail="Comment not found or unauthorized")
    return Success(success=True)
