"""Comment edit, delete and like endpoints.

Comments are listed and created under /videos/{id}/comments.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..deps import get_db
from ..services.guard import fetch_owned
from ..services.reactions import set_disposition
from ..services.targets import TargetKind, TargetRef

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.patch("/{comment_id}", response_model=schemas.Comment)
def update_comment(
    comment_id: int,
    payload: schemas.CommentUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Comment:
    """Edit a comment. Owner only."""
    comment = fetch_owned(db, TargetKind.COMMENT, comment_id, current_user)
    comment.content = payload.content
    db.commit()
    db.refresh(comment)
    return schemas.Comment.model_validate(comment)


@router.delete("/{comment_id}", response_model=schemas.Message)
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Message:
    """Delete a comment. Owner only."""
    comment = fetch_owned(db, TargetKind.COMMENT, comment_id, current_user)
    db.delete(comment)
    db.commit()
    return schemas.Message(message="Comment deleted successfully")


@router.post("/{comment_id}/like", response_model=schemas.Like)
def like_comment(
    comment_id: int,
    payload: schemas.LikeToggle,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Like:
    like = set_disposition(db, current_user, TargetRef.comment(comment_id), payload.toggle_like)
    return schemas.Like.model_validate(like)
