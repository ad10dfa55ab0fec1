"""Like ledger shared by videos, tweets and comments.

Per (user, target) pair there are three states: absent (no row), liked
(is_liked=True) and unliked (is_liked=False). set_disposition is the only
writer:

    absent  + like   -> liked (row created)
    absent  + unlike -> NothingToUndo, no row created
    present + any    -> is_liked rewritten in place

Like counts are computed on demand from the rows; nothing else is updated.
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..errors import AlreadyExists, InvalidInput, NothingToUndo
from .guard import fetch_target
from .targets import TargetRef

logger = logging.getLogger(__name__)


def _pair_filter(query, user_id: int, target: TargetRef):
    return query.filter(
        models.Like.user_id == user_id,
        models.Like.target_kind == target.kind.value,
        models.Like.target_id == target.id,
    )


def set_disposition(
    db: Session,
    user: models.User,
    target: TargetRef,
    desired: bool,
) -> models.Like:
    """
    Record whether ``user`` currently likes ``target``.

    Raises NotFound if the target does not exist, InvalidInput if ``desired``
    is not a bool, NothingToUndo when unliking a pair that was never liked and
    AlreadyExists when a concurrent request created the row first.
    """
    fetch_target(db, target.kind, target.id)

    if not isinstance(desired, bool):
        raise InvalidInput("toggleLike must be a boolean: true to like or false to remove the like")

    existing = _pair_filter(db.query(models.Like), user.id, target).first()
    if existing:
        existing.is_liked = desired
        db.commit()
        db.refresh(existing)
        return existing

    if not desired:
        raise NothingToUndo()

    like = models.Like(
        user_id=user.id,
        target_kind=target.kind.value,
        target_id=target.id,
        is_liked=True,
    )
    db.add(like)
    try:
        db.commit()
    except IntegrityError:
        # The unique constraint on (user, target) rejected a concurrent duplicate
        db.rollback()
        raise AlreadyExists("This like was already recorded by a concurrent request")
    db.refresh(like)

    logger.info(f"User {user.id} liked {target.kind.value} {target.id}")
    return like


def get_disposition(db: Session, user_id: int, target: TargetRef) -> bool | None:
    """Return True/False for liked/unliked, None if the pair has no row."""
    row = _pair_filter(db.query(models.Like.is_liked), user_id, target).first()
    return None if row is None else row.is_liked


def count_likes(db: Session, target: TargetRef) -> int:
    return (
        db.query(func.count(models.Like.id))
        .filter(
            models.Like.target_kind == target.kind.value,
            models.Like.target_id == target.id,
            models.Like.is_liked == True,
        )
        .scalar()
    )
