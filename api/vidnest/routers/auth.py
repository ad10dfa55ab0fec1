"""Registration, login and logout."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import SessionManager, get_current_user, get_session_manager
from ..deps import get_db, get_media
from ..errors import HandleTaken, InvalidCredentials, InvalidInput
from ..media_vault import MediaVault
from ..services.passwords import hash_password, verify_password
from ..uploads import save_upload
from ..utils.handles import (
    is_identity_taken,
    normalize_email,
    normalize_handle,
    validate_email,
    validate_handle,
)

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/register",
    response_model=schemas.UserPrivate,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    response: Response,
    username: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    avatar: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    media: MediaVault = Depends(get_media),
    sessions: SessionManager = Depends(get_session_manager),
) -> schemas.UserPrivate:
    """
    Register a new account and log it in.

    The avatar is optional; without one the default placeholder is used.
    """
    handle = normalize_handle(username)
    email_normalized = normalize_email(email)
    if not password or not password.strip():
        raise InvalidInput("All fields are required")

    is_valid, error_msg = validate_handle(handle)
    if not is_valid:
        raise InvalidInput(error_msg)
    is_valid, error_msg = validate_email(email_normalized)
    if not is_valid:
        raise InvalidInput(error_msg)

    if is_identity_taken(db, handle, email_normalized):
        raise HandleTaken()

    avatar_url = None
    if avatar is not None and avatar.filename:
        avatar_url = (await save_upload(media, avatar, "image")).url

    user = models.User(
        handle=handle,
        email=email_normalized,
        password_hash=hash_password(password),
    )
    if avatar_url:
        user.avatar_url = avatar_url
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same handle/email
        db.rollback()
        media.delete(avatar_url)
        raise HandleTaken()
    db.refresh(user)

    sessions.set_cookie(response, sessions.issue(user.id))
    logger.info(f"Registered user {user.id} ({user.handle})")
    return schemas.UserPrivate.model_validate(user)


@router.post("/login", response_model=schemas.UserPrivate)
def login(
    payload: schemas.LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> schemas.UserPrivate:
    """Verify credentials and set the session cookie."""
    user = db.query(models.User).filter(models.User.email == normalize_email(payload.email)).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise InvalidCredentials()

    sessions.set_cookie(response, sessions.issue(user.id))
    return schemas.UserPrivate.model_validate(user)


@router.post("/logout", response_model=schemas.Message)
def logout(
    response: Response,
    current_user: models.User = Depends(get_current_user),
    sessions: SessionManager = Depends(get_session_manager),
) -> schemas.Message:
    """
    Log out by expiring the session cookie.

    The token itself is not revoked server-side; it stays valid until expiry.
    """
    sessions.expire_cookie(response)
    return schemas.Message(message="Logout successfully")
