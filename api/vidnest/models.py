from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .db import Base

DEFAULT_AVATAR_URL = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/b/bc/"
    "Unknown_person.jpg/1200px-Unknown_person.jpg"
)
DEFAULT_COVER_IMAGE_URL = "https://wallpapers.com/images/featured/plain-blue-dmlktw5iuzdjvb7j.jpg"


# ============================================================================
# CORE ENTITIES
# ============================================================================
#
# Owner, subscriber and like references carry no foreign-key constraint:
# deleting an account cascades nothing and orphaned references are tolerated.


class User(Base):
    """Account with credentials, profile media and watch history."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    handle = Column(String(50), unique=True, nullable=False, index=True)  # stored lower-case
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lower-case
    password_hash = Column(String(255), nullable=False)

    avatar_url = Column(String(500), nullable=True, default=DEFAULT_AVATAR_URL)
    cover_image_url = Column(String(500), nullable=True, default=DEFAULT_COVER_IMAGE_URL)
    is_premium = Column(Boolean, nullable=False, default=False)

    # Ordered video ids, duplicates allowed
    watch_history = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())


class Video(Base):
    """Uploaded video (content item)."""

    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    owner_id = Column(Integer, nullable=False, index=True)

    video_url = Column(String(500), nullable=False)
    thumbnail_url = Column(String(500), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(String(20), nullable=False, default="0:00")
    views = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    # Relationships
    owner = relationship(
        "User",
        primaryjoin="foreign(Video.owner_id) == User.id",
        viewonly=True,
        lazy="joined",
    )
    comments = relationship("Comment", back_populates="video", cascade="all, delete-orphan")


class Tweet(Base):
    """Short text post."""

    __tablename__ = "tweets"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    owner_id = Column(Integer, nullable=False, index=True)
    content = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    # Relationships
    owner = relationship(
        "User",
        primaryjoin="foreign(Tweet.owner_id) == User.id",
        viewonly=True,
        lazy="joined",
    )


class Comment(Base):
    """Comment on a video."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(Integer, nullable=False, index=True)
    content = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    # Relationships
    video = relationship("Video", back_populates="comments")
    owner = relationship(
        "User",
        primaryjoin="foreign(Comment.owner_id) == User.id",
        viewonly=True,
        lazy="joined",
    )

    __table_args__ = (Index("ix_comments_video_created", video_id, created_at),)


# ============================================================================
# SOCIAL FEATURES
# ============================================================================


class Like(Base):
    """
    One account's disposition toward one video, tweet or comment.

    The target is a tagged union (target_kind, target_id). A row with
    is_liked=False is a tombstone: the pair was liked before and is now unliked.
    """

    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    target_kind = Column(String(16), nullable=False)  # "video" | "tweet" | "comment"
    target_id = Column(Integer, nullable=False)
    is_liked = Column(Boolean, nullable=False, default=False)

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "target_kind", "target_id", name="uq_likes_user_target"),
        Index("ix_likes_target", target_kind, target_id),
    )


class Subscription(Base):
    """Directed follow edge from subscriber to channel; unfollow flags it inactive."""

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    subscriber_id = Column(Integer, nullable=False, index=True)
    channel_id = Column(Integer, nullable=False, index=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    channel = relationship(
        "User",
        primaryjoin="foreign(Subscription.channel_id) == User.id",
        viewonly=True,
    )

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
        Index("ix_subscriptions_channel_active", channel_id, active),
    )
