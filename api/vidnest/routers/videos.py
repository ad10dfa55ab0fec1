"""Video upload, browsing, editing, comments and likes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user, get_current_user_optional
from ..deps import get_db, get_media
from ..errors import InvalidInput
from ..media_vault import MediaVault, format_duration
from ..services.guard import fetch_owned, fetch_target
from ..services.engagement import build_video_view, record_view
from ..services.reactions import set_disposition
from ..services.targets import TargetKind, TargetRef
from ..uploads import save_upload

router = APIRouter(prefix="/videos", tags=["Videos"])
logger = logging.getLogger(__name__)


def _required_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInput(f"{field} is required")
    return text


@router.post("", response_model=schemas.Video, status_code=status.HTTP_201_CREATED)
async def upload_video(
    title: str = Form(...),
    description: str = Form(...),
    video: UploadFile = File(..., alias="videoFile"),
    thumbnail: UploadFile = File(...),
    db: Session = Depends(get_db),
    media: MediaVault = Depends(get_media),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Video:
    """
    Publish a video.

    Both the video file and a thumbnail image are required.
    """
    title = _required_text(title, "Title")
    description = _required_text(description, "Description")

    stored_video = await save_upload(media, video, "video")
    try:
        stored_thumbnail = await save_upload(media, thumbnail, "image")
    except Exception:
        media.delete(stored_video.url)
        raise

    row = models.Video(
        owner_id=current_user.id,
        video_url=stored_video.url,
        thumbnail_url=stored_thumbnail.url,
        title=title,
        description=description,
        duration=format_duration(stored_video.duration),
    )
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info(f"User {current_user.id} uploaded video {row.id}")
    return schemas.Video.model_validate(row)


@router.get("", response_model=list[schemas.Video])
def list_videos(
    owner: str | None = Query(None, description="Only videos from this channel handle"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> list[schemas.Video]:
    """List videos, newest first."""
    query = db.query(models.Video)
    if owner:
        query = query.join(models.User, models.User.id == models.Video.owner_id).filter(
            models.User.handle == owner.strip().lower()
        )
    videos = (
        query.order_by(models.Video.created_at.desc(), models.Video.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [schemas.Video.model_validate(v) for v in videos]


@router.get("/{video_id}", response_model=schemas.VideoDetail)
def get_video(
    video_id: int,
    db: Session = Depends(get_db),
    current_user: models.User | None = Depends(get_current_user_optional),
) -> schemas.VideoDetail:
    """
    Video detail with engagement figures.

    Each call counts as a view and, for a logged-in viewer, is appended to
    their watch history.
    """
    video = fetch_target(db, TargetKind.VIDEO, video_id)
    record_view(db, video, viewer=current_user)
    return build_video_view(db, video, viewer=current_user)


@router.patch("/{video_id}", response_model=schemas.Video)
async def update_video(
    video_id: int,
    request: Request,
    title: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    media: MediaVault = Depends(get_media),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Video:
    """
    Edit title, description or thumbnail. Owner only.

    A field that is sent must be non-blank; fields left out are unchanged.
    """
    video = fetch_owned(db, TargetKind.VIDEO, video_id, current_user)

    # Empty form values reach the parameters as None, so check what was sent
    form = await request.form()
    has_thumbnail = thumbnail is not None and bool(thumbnail.filename)
    if "title" not in form and "description" not in form and not has_thumbnail:
        raise InvalidInput("Provide a title, description or thumbnail to update")

    if "title" in form:
        video.title = _required_text(title, "Title")
    if "description" in form:
        video.description = _required_text(description, "Description")

    old_thumbnail = None
    if has_thumbnail:
        stored = await save_upload(media, thumbnail, "image")
        old_thumbnail = video.thumbnail_url
        video.thumbnail_url = stored.url

    db.commit()
    db.refresh(video)

    if old_thumbnail:
        media.delete(old_thumbnail)
    return schemas.Video.model_validate(video)


@router.delete("/{video_id}", response_model=schemas.Message)
def delete_video(
    video_id: int,
    db: Session = Depends(get_db),
    media: MediaVault = Depends(get_media),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Message:
    """Delete a video and its comments. Owner only."""
    video = fetch_owned(db, TargetKind.VIDEO, video_id, current_user)
    video_url, thumbnail_url = video.video_url, video.thumbnail_url

    db.delete(video)
    db.commit()

    media.delete(video_url)
    media.delete(thumbnail_url)
    logger.info(f"User {current_user.id} deleted video {video_id}")
    return schemas.Message(message="Video deleted successfully")


# ============================================================================
# COMMENTS
# ============================================================================


@router.get("/{video_id}/comments", response_model=list[schemas.Comment])
def list_comments(
    video_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> list[schemas.Comment]:
    """Comments on a video, oldest first."""
    fetch_target(db, TargetKind.VIDEO, video_id)
    comments = (
        db.query(models.Comment)
        .filter(models.Comment.video_id == video_id)
        .order_by(models.Comment.created_at.asc(), models.Comment.id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [schemas.Comment.model_validate(c) for c in comments]


@router.post(
    "/{video_id}/comments",
    response_model=schemas.Comment,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    video_id: int,
    payload: schemas.CommentCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Comment:
    """Comment on a video."""
    fetch_target(db, TargetKind.VIDEO, video_id)

    comment = models.Comment(video_id=video_id, owner_id=current_user.id, content=payload.content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return schemas.Comment.model_validate(comment)


# ============================================================================
# LIKES
# ============================================================================


@router.post("/{video_id}/like", response_model=schemas.Like)
def like_video(
    video_id: int,
    payload: schemas.LikeToggle,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Like:
    """Like (toggleLike=true) or remove a like from (toggleLike=false) a video."""
    like = set_disposition(db, current_user, TargetRef.video(video_id), payload.toggle_like)
    return schemas.Like.model_validate(like)
