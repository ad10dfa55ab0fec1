"""Read-side views combining the follow graph and like ledger with profiles.

Nothing here writes except record_view. Figures are aggregated per request;
there is no cache to invalidate.
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from .. import models, schemas
from ..errors import ChannelNotFound
from ..utils.handles import normalize_handle
from . import subscriptions
from .reactions import count_likes, get_disposition
from .targets import TargetRef

logger = logging.getLogger(__name__)


def build_channel_view(
    db: Session,
    handle: str,
    viewer: models.User | None = None,
) -> schemas.ChannelView:
    """
    Channel profile for ``handle`` (case-insensitive).

    is_subscribed is True only when an authenticated viewer follows the channel.
    Email and password hash are never part of the view.
    """
    normalized = normalize_handle(handle)
    if not normalized:
        raise ChannelNotFound(handle)

    channel = db.query(models.User).filter(models.User.handle == normalized).first()
    if not channel:
        raise ChannelNotFound(normalized)

    return schemas.ChannelView(
        id=channel.id,
        handle=channel.handle,
        avatar_url=channel.avatar_url,
        cover_image_url=channel.cover_image_url,
        is_premium=channel.is_premium,
        subscribers_count=subscriptions.count_subscribers(db, channel.id),
        subscribed_to_count=subscriptions.count_subscribed_to(db, channel.id),
        is_subscribed=(
            viewer is not None and subscriptions.is_subscribed(db, viewer.id, channel.id)
        ),
    )


def build_history_view(db: Session, user: models.User) -> list[schemas.Video]:
    """
    The user's watch history, in stored order.

    Repeated ids are replayed as stored. Ids whose video has since been deleted
    are skipped. Each entry carries only the owner's handle and avatar.
    """
    history: list[int] = list(user.watch_history or [])
    if not history:
        return []

    videos = (
        db.query(models.Video)
        .options(joinedload(models.Video.owner))
        .filter(models.Video.id.in_(set(history)))
        .all()
    )
    by_id = {video.id: video for video in videos}

    return [
        schemas.Video.model_validate(by_id[video_id])
        for video_id in history
        if video_id in by_id
    ]


def build_video_view(
    db: Session,
    video: models.Video,
    viewer: models.User | None = None,
) -> schemas.VideoDetail:
    target = TargetRef.video(video.id)
    comments_count = (
        db.query(func.count(models.Comment.id))
        .filter(models.Comment.video_id == video.id)
        .scalar()
    )
    is_liked = viewer is not None and get_disposition(db, viewer.id, target) is True

    base = schemas.Video.model_validate(video)
    return schemas.VideoDetail(
        **base.model_dump(),
        likes_count=count_likes(db, target),
        comments_count=comments_count,
        is_liked=is_liked,
    )


def record_view(db: Session, video: models.Video, viewer: models.User | None = None) -> None:
    """Count a view and append the video to the viewer's history."""
    db.query(models.Video).filter(models.Video.id == video.id).update(
        {models.Video.views: models.Video.views + 1}, synchronize_session=False
    )
    if viewer is not None:
        # Re-read the history under a row lock so concurrent views of the same
        # viewer append in turn (SQLite ignores FOR UPDATE and serializes writers)
        viewer = (
            db.query(models.User)
            .populate_existing()
            .with_for_update()
            .filter(models.User.id == viewer.id)
            .one()
        )
        # Reassign so the JSON column is flagged dirty
        viewer.watch_history = [*(viewer.watch_history or []), video.id]
    db.commit()
    db.refresh(video)
