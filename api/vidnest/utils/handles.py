"""Handle and email normalization and validation utilities."""

from __future__ import annotations

import re

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models import User

HANDLE_PATTERN = re.compile(r"^[a-z0-9]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_handle(handle: str) -> str:
    return (handle or "").strip().lower()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_handle(handle: str, min_length: int = 3, max_length: int = 50) -> tuple[bool, str | None]:
    """
    Validate a normalized handle and return (is_valid, error_message).

    Handles may only contain lowercase letters and digits.
    """
    if not handle:
        return False, "Username is required"

    if len(handle) < min_length:
        return False, f"Username must be at least {min_length} characters"

    if len(handle) > max_length:
        return False, f"Username must be at most {max_length} characters"

    if not HANDLE_PATTERN.match(handle):
        return False, "Username can only contain lowercase letters and numbers"

    return True, None


def validate_email(email: str) -> tuple[bool, str | None]:
    if not email:
        return False, "Email is required"
    if len(email) > 255 or not EMAIL_PATTERN.match(email):
        return False, "Please use a valid email address"
    return True, None


def is_identity_taken(db: Session, handle: str, email: str) -> bool:
    """Check whether a normalized handle or email is already registered."""
    return (
        db.query(User.id)
        .filter(or_(User.handle == handle, User.email == email))
        .first()
        is not None
    )
