"""Ownership checks for videos, tweets and comments.

Authorization is strictly "creator owns resource": no roles, no delegation.
The resource is always loaded first, so a missing resource reports NotFound
even to a caller who would not own it.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session

from .. import models
from ..errors import NotFound, Unauthorized
from .targets import TargetKind, model_for


class Owned(Protocol):
    owner_id: int


def authorize(identity_id: int, resource: Owned) -> None:
    """Raise Unauthorized unless the identity created the resource."""
    if resource.owner_id != identity_id:
        raise Unauthorized()


def fetch_target(db: Session, kind: TargetKind, resource_id: int):
    """Load a video, tweet or comment by id, raising NotFound if absent."""
    model = model_for(kind)
    resource = db.query(model).filter(model.id == resource_id).first()
    if resource is None:
        raise NotFound(kind.label)
    return resource


def fetch_owned(db: Session, kind: TargetKind, resource_id: int, current_user: models.User):
    """Load a resource for edit/delete: existence first, then ownership."""
    resource = fetch_target(db, kind, resource_id)
    authorize(current_user.id, resource)
    return resource
