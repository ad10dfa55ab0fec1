"""Follow graph: directed subscriber -> channel edges.

The (subscriber, channel) pair is unique in the database. Unfollowing keeps the
row and flags it inactive; following again reactivates the same row. Counts are
aggregated from active edges on every read.
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..errors import AlreadyFollowing, InvalidInput, NotFollowing

logger = logging.getLogger(__name__)


def _edge_query(db: Session, subscriber_id: int, channel_id: int):
    return db.query(models.Subscription).filter(
        models.Subscription.subscriber_id == subscriber_id,
        models.Subscription.channel_id == channel_id,
    )


def follow(db: Session, subscriber: models.User, channel: models.User) -> models.Subscription:
    """
    Subscribe ``subscriber`` to ``channel``.

    Raises AlreadyFollowing if an active edge exists, including when a concurrent
    request inserted it first.
    """
    if subscriber.id == channel.id:
        raise InvalidInput("You cannot subscribe to your own channel")

    # Single conditional write: only an inactive edge can be reactivated
    reactivated = (
        _edge_query(db, subscriber.id, channel.id)
        .filter(models.Subscription.active == False)
        .update({models.Subscription.active: True}, synchronize_session=False)
    )
    if reactivated:
        db.commit()
        logger.info(f"User {subscriber.id} re-subscribed to channel {channel.id}")
        return _edge_query(db, subscriber.id, channel.id).one()

    edge = models.Subscription(subscriber_id=subscriber.id, channel_id=channel.id, active=True)
    db.add(edge)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyFollowing()
    db.refresh(edge)

    logger.info(f"User {subscriber.id} subscribed to channel {channel.id}")
    return edge


def unfollow(db: Session, subscriber: models.User, channel: models.User) -> models.Subscription:
    """Flag the active edge inactive; raises NotFollowing if there is none."""
    deactivated = (
        _edge_query(db, subscriber.id, channel.id)
        .filter(models.Subscription.active == True)
        .update({models.Subscription.active: False}, synchronize_session=False)
    )
    if not deactivated:
        db.rollback()
        raise NotFollowing()
    db.commit()

    logger.info(f"User {subscriber.id} unsubscribed from channel {channel.id}")
    return _edge_query(db, subscriber.id, channel.id).one()


def count_subscribers(db: Session, channel_id: int) -> int:
    return (
        db.query(func.count(models.Subscription.id))
        .filter(
            models.Subscription.channel_id == channel_id,
            models.Subscription.active == True,
        )
        .scalar()
    )


def count_subscribed_to(db: Session, subscriber_id: int) -> int:
    return (
        db.query(func.count(models.Subscription.id))
        .filter(
            models.Subscription.subscriber_id == subscriber_id,
            models.Subscription.active == True,
        )
        .scalar()
    )


def is_subscribed(db: Session, subscriber_id: int, channel_id: int) -> bool:
    return (
        _edge_query(db, subscriber_id, channel_id)
        .filter(models.Subscription.active == True)
        .first()
        is not None
    )


def list_subscriptions(db: Session, subscriber_id: int) -> list[models.User]:
    """Channels the user currently follows, most recent first."""
    return (
        db.query(models.User)
        .join(models.Subscription, models.Subscription.channel_id == models.User.id)
        .filter(
            models.Subscription.subscriber_id == subscriber_id,
            models.Subscription.active == True,
        )
        .order_by(models.Subscription.created_at.desc(), models.Subscription.id.desc())
        .all()
    )
