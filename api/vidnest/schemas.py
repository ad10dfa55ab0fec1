from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool


# ============================================================================
# BASE SCHEMAS
# ============================================================================


class Message(BaseModel):
    """Plain acknowledgement."""

    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok"] = "ok"
    uptime_s: float | None = None


# ============================================================================
# USER SCHEMAS
# ============================================================================


class OwnerSummary(BaseModel):
    """Public projection of a content owner: handle and avatar only."""

    handle: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserPublic(BaseModel):
    """Public user profile."""

    id: int
    handle: str
    avatar_url: str | None = None
    cover_image_url: str | None = None
    is_premium: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserPrivate(UserPublic):
    """Own profile, as seen by the logged-in user."""

    email: str
    updated_at: datetime | None = None


class LoginRequest(BaseModel):
    """Login request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class PasswordChange(BaseModel):
    """Change password request."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=72)


class ChannelView(BaseModel):
    """Channel profile with aggregated subscription figures."""

    id: int
    handle: str
    avatar_url: str | None = None
    cover_image_url: str | None = None
    is_premium: bool
    subscribers_count: int
    subscribed_to_count: int
    is_subscribed: bool


class Subscription(BaseModel):
    """Follow edge."""

    id: int
    subscriber_id: int
    channel_id: int
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# VIDEO SCHEMAS
# ============================================================================


class Video(BaseModel):
    """Video metadata with its owner's public handle and avatar."""

    id: int
    owner_id: int
    video_url: str
    thumbnail_url: str | None = None
    title: str
    description: str | None = None
    duration: str
    views: int
    created_at: datetime
    updated_at: datetime | None = None
    owner: OwnerSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class VideoDetail(Video):
    """Video with engagement figures computed for the request."""

    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = False


# ============================================================================
# TWEET SCHEMAS
# ============================================================================


class Tweet(BaseModel):
    """Short text post."""

    id: int
    owner_id: int
    content: str
    created_at: datetime
    updated_at: datetime | None = None
    owner: OwnerSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class TweetCreate(BaseModel):
    """Create tweet request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=5000)


class TweetUpdate(TweetCreate):
    """Update tweet request."""


# ============================================================================
# COMMENT SCHEMAS
# ============================================================================


class Comment(BaseModel):
    """Comment on a video."""

    id: int
    video_id: int
    owner_id: int
    content: str
    created_at: datetime
    updated_at: datetime | None = None
    owner: OwnerSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class CommentCreate(BaseModel):
    """Create comment request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=2000)


class CommentUpdate(CommentCreate):
    """Update comment request."""


# ============================================================================
# LIKE SCHEMAS
# ============================================================================


class LikeToggle(BaseModel):
    """Body of the like endpoints: must be a JSON boolean, not "true" or 1."""

    model_config = ConfigDict(populate_by_name=True)

    toggle_like: StrictBool = Field(..., alias="toggleLike")


class Like(BaseModel):
    """Current disposition of one user toward one target."""

    id: int
    user_id: int
    target_kind: Literal["video", "tweet", "comment"]
    target_id: int
    is_liked: bool
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
