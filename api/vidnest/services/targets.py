"""Tagged references to the content kinds a like can point at."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .. import models


class TargetKind(str, Enum):
    VIDEO = "video"
    TWEET = "tweet"
    COMMENT = "comment"

    @property
    def label(self) -> str:
        return self.value.capitalize()


_MODELS = {
    TargetKind.VIDEO: models.Video,
    TargetKind.TWEET: models.Tweet,
    TargetKind.COMMENT: models.Comment,
}


def model_for(kind: TargetKind):
    return _MODELS[kind]


@dataclass(frozen=True)
class TargetRef:
    """Exactly one video, tweet or comment."""

    kind: TargetKind
    id: int

    @classmethod
    def video(cls, video_id: int) -> "TargetRef":
        return cls(TargetKind.VIDEO, video_id)

    @classmethod
    def tweet(cls, tweet_id: int) -> "TargetRef":
        return cls(TargetKind.TWEET, tweet_id)

    @classmethod
    def comment(cls, comment_id: int) -> "TargetRef":
        return cls(TargetKind.COMMENT, comment_id)
