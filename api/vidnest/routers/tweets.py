"""Tweet endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..deps import get_db
from ..errors import ChannelNotFound
from ..services.guard import fetch_owned
from ..services.reactions import set_disposition
from ..services.targets import TargetKind, TargetRef
from ..utils.handles import normalize_handle

router = APIRouter(prefix="/tweets", tags=["Tweets"])


@router.post("", response_model=schemas.Tweet, status_code=status.HTTP_201_CREATED)
def create_tweet(
    payload: schemas.TweetCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Tweet:
    tweet = models.Tweet(owner_id=current_user.id, content=payload.content)
    db.add(tweet)
    db.commit()
    db.refresh(tweet)
    return schemas.Tweet.model_validate(tweet)


@router.get("", response_model=list[schemas.Tweet])
def list_tweets(
    owner: str | None = Query(None, description="Only tweets from this channel handle"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> list[schemas.Tweet]:
    """List tweets, newest first, optionally only those of one channel."""
    query = db.query(models.Tweet)
    if owner is not None:
        handle = normalize_handle(owner)
        channel = db.query(models.User.id).filter(models.User.handle == handle).first()
        if not channel:
            raise ChannelNotFound(handle or owner)
        query = query.filter(models.Tweet.owner_id == channel.id)

    tweets = (
        query.order_by(models.Tweet.created_at.desc(), models.Tweet.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [schemas.Tweet.model_validate(t) for t in tweets]


@router.patch("/{tweet_id}", response_model=schemas.Tweet)
def update_tweet(
    tweet_id: int,
    payload: schemas.TweetUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Tweet:
    """Edit a tweet. Owner only."""
    tweet = fetch_owned(db, TargetKind.TWEET, tweet_id, current_user)
    tweet.content = payload.content
    db.commit()
    db.refresh(tweet)
    return schemas.Tweet.model_validate(tweet)


@router.delete("/{tweet_id}", response_model=schemas.Message)
def delete_tweet(
    tweet_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Message:
    """Delete a tweet. Owner only."""
    tweet = fetch_owned(db, TargetKind.TWEET, tweet_id, current_user)
    db.delete(tweet)
    db.commit()
    return schemas.Message(message="Tweet deleted successfully")


@router.post("/{tweet_id}/like", response_model=schemas.Like)
def like_tweet(
    tweet_id: int,
    payload: schemas.LikeToggle,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.Like:
    like = set_disposition(db, current_user, TargetRef.tweet(tweet_id), payload.toggle_like)
    return schemas.Like.model_validate(like)
