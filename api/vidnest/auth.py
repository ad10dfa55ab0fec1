"""Session tokens and per-request authentication.

Sessions are stateless: a signed JWT carrying the user id and an expiry,
delivered in an HTTP-only cookie. The server keeps no session table, so a token
stays cryptographically valid until it expires even after logout; a deleted
account invalidates its tokens through the live user lookup.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from . import models
from .deps import get_db
from .errors import AccountNotFound, ExpiredToken, InvalidToken, Unauthenticated, VidnestError

logger = logging.getLogger(__name__)


class SessionManager:
    """Issues and verifies signed, time-bound session tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        ttl_seconds: int = 8 * 3600,
        cookie_name: str = "vidnest_token",
        secure_cookie: bool = False,
    ) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds
        self.cookie_name = cookie_name
        self.secure_cookie = secure_cookie

    def issue(self, user_id: int, expires_in_seconds: int | None = None) -> str:
        """Create a token for a user expiring after the session TTL."""
        if expires_in_seconds is None:
            expires_in_seconds = self.ttl_seconds

        now = datetime.now(timezone.utc)
        payload = {
            "user_id": str(user_id),
            "exp": now + timedelta(seconds=expires_in_seconds),
            "iat": now,
            "type": "access",
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def resolve(self, token: str) -> int:
        """
        Verify a token and return the user id it names.

        Raises ExpiredToken once the expiry has passed and InvalidToken for a bad
        signature, a malformed token or missing claims. Callers must still check
        that the account exists (see load_session_user).
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "user_id"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredToken()
        except jwt.InvalidTokenError:
            # A past expiry wins over any other defect, signature included
            if _has_past_expiry(token):
                raise ExpiredToken()
            raise InvalidToken()

        if payload.get("type") != "access":
            raise InvalidToken("Invalid token: wrong token type")

        try:
            return int(payload["user_id"])
        except (TypeError, ValueError):
            raise InvalidToken("Invalid user ID in token")

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.ttl_seconds,
            expires=self.ttl_seconds,
            httponly=True,
            secure=self.secure_cookie,
            samesite="lax",
        )

    def expire_cookie(self, response: Response) -> None:
        """Overwrite the session cookie with one that has already expired."""
        response.delete_cookie(
            key=self.cookie_name,
            httponly=True,
            secure=self.secure_cookie,
            samesite="lax",
        )


def _has_past_expiry(token: str) -> bool:
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.InvalidTokenError:
        return False
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return False
    return exp <= datetime.now(timezone.utc).timestamp()


def load_session_user(db: Session, sessions: SessionManager, token: str | None) -> models.User:
    """Resolve a cookie token to a live user row."""
    if not token:
        raise Unauthenticated()

    user_id = sessions.resolve(token)
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise AccountNotFound()
    return user


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> models.User:
    """
    Get current authenticated user from the session cookie.
    """
    token = request.cookies.get(sessions.cookie_name)
    try:
        return load_session_user(db, sessions, token)
    except Unauthenticated as e:
        logger.warning(f"Rejected session on {request.url.path}: {e.code}")
        raise


async def get_current_user_optional(
    request: Request,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> models.User | None:
    """
    Get current user if authenticated, None otherwise.

    Used for endpoints that work differently for authenticated vs anonymous users.
    """
    token = request.cookies.get(sessions.cookie_name)
    if not token:
        return None

    try:
        return load_session_user(db, sessions, token)
    except VidnestError:
        return None
