"""Own account management, channel profiles and subscriptions."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import SessionManager, get_current_user, get_current_user_optional, get_session_manager
from ..deps import get_db, get_media
from ..errors import ChannelNotFound, InvalidCredentials, InvalidInput
from ..media_vault import MediaVault
from ..services import engagement, subscriptions
from ..services.passwords import hash_password, verify_password
from ..uploads import save_upload
from ..utils.handles import normalize_handle

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)


def _channel_by_handle(db: Session, handle: str) -> models.User:
    normalized = normalize_handle(handle)
    channel = db.query(models.User).filter(models.User.handle == normalized).first()
    if not channel:
        raise ChannelNotFound(normalized or handle)
    return channel


# ============================================================================
# OWN ACCOUNT
# ============================================================================


@router.get("/me", response_model=schemas.UserPrivate)
def get_me(current_user: models.User = Depends(get_current_user)) -> schemas.UserPrivate:
    """Return the logged-in user's own profile."""
    return schemas.UserPrivate.model_validate(current_user)


@router.delete("/me", response_model=schemas.Message)
def delete_me(
    response: Response,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
    sessions: SessionManager = Depends(get_session_manager),
) -> schemas.Message:
    """
    Permanently delete the logged-in account.

    Content, likes and subscriptions referencing the account are left in place.
    """
    user_id = current_user.id
    db.delete(current_user)
    db.commit()

    sessions.expire_cookie(response)
    logger.info(f"Deleted account {user_id}")
    return schemas.Message(message="Account deleted")


async def _replace_profile_image(
    db: Session,
    media: MediaVault,
    user: models.User,
    upload: UploadFile,
    column: str,
) -> models.User:
    stored = await save_upload(media, upload, "image")
    old_url = getattr(user, column)

    setattr(user, column, stored.url)
    db.commit()
    db.refresh(user)

    # Default placeholders live outside the vault and are skipped
    media.delete(old_url)
    return user


@router.patch("/me/avatar", response_model=schemas.UserPrivate)
async def update_avatar(
    avatar: UploadFile = File(...),
    db: Session = Depends(get_db),
    media: MediaVault = Depends(get_media),
    current_user: models.User = Depends(get_current_user),
) -> schemas.UserPrivate:
    """Replace the avatar image."""
    user = await _replace_profile_image(db, media, current_user, avatar, "avatar_url")
    return schemas.UserPrivate.model_validate(user)


@router.patch("/me/cover-image", response_model=schemas.UserPrivate)
async def update_cover_image(
    cover_image: UploadFile = File(..., alias="coverImage"),
    db: Session = Depends(get_db),
    media: MediaVault = Depends(get_media),
    current_user: models.User = Depends(get_current_user),
) -> schemas.UserPrivate:
    """Replace the channel cover image."""
    user = await _replace_profile_image(db, media, current_user, cover_image, "cover_image_url")
    return schemas.UserPrivate.model_validate(user)


@router.patch("/me/password", response_model=schemas.Message)
def change_password(
    payload: schemas.PasswordChange,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Message:
    """Change password after re-checking the current one."""
    if not verify_password(payload.current_password, current_user.password_hash):
        raise InvalidCredentials("Current password is incorrect")
    if payload.current_password == payload.new_password:
        raise InvalidInput("New password must be different from the current password")

    current_user.password_hash = hash_password(payload.new_password)
    db.commit()

    logger.info(f"User {current_user.id} changed password")
    return schemas.Message(message="Password changed successfully")


@router.get("/me/history", response_model=list[schemas.Video])
def get_watch_history(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[schemas.Video]:
    """Videos the user has watched, oldest first, repeats included."""
    return engagement.build_history_view(db, current_user)


@router.get("/me/subscriptions", response_model=list[schemas.OwnerSummary])
def get_my_subscriptions(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[schemas.OwnerSummary]:
    """Channels the user follows."""
    channels = subscriptions.list_subscriptions(db, current_user.id)
    return [schemas.OwnerSummary.model_validate(channel) for channel in channels]


# ============================================================================
# CHANNELS
# ============================================================================


@router.get("/{handle}", response_model=schemas.ChannelView)
def get_channel(
    handle: str,
    db: Session = Depends(get_db),
    current_user: models.User | None = Depends(get_current_user_optional),
) -> schemas.ChannelView:
    """
    Channel profile by handle.

    Works anonymously; is_subscribed reflects the viewer when logged in.
    """
    return engagement.build_channel_view(db, handle, viewer=current_user)


@router.post(
    "/{handle}/subscribe",
    response_model=schemas.Subscription,
    status_code=status.HTTP_201_CREATED,
)
def subscribe(
    handle: str,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Subscription:
    """Subscribe to a channel."""
    channel = _channel_by_handle(db, handle)
    edge = subscriptions.follow(db, current_user, channel)
    return schemas.Subscription.model_validate(edge)


@router.delete("/{handle}/subscribe", response_model=schemas.Subscription)
def unsubscribe(
    handle: str,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Subscription:
    """Unsubscribe from a channel."""
    channel = _channel_by_handle(db, handle)
    edge = subscriptions.unfollow(db, current_user, channel)
    return schemas.Subscription.model_validate(edge)
