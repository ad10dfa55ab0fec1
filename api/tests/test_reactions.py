"""Test the like ledger shared by videos, tweets and comments."""

from __future__ import annotations

import pytest
from sqlalchemy import false

from vidnest import models
from vidnest.errors import AlreadyExists, InvalidInput, NotFound, NothingToUndo
from vidnest.services import reactions
from vidnest.services.reactions import count_likes, get_disposition, set_disposition
from vidnest.services.targets import TargetRef


def _rows(db, user, target):
    return (
        db.query(models.Like)
        .filter(
            models.Like.user_id == user.id,
            models.Like.target_kind == target.kind.value,
            models.Like.target_id == target.id,
        )
        .all()
    )


def test_like_creates_row(db, alice, make_video):
    target = TargetRef.video(make_video(alice).id)

    like = set_disposition(db, alice, target, True)

    assert like.is_liked is True
    assert get_disposition(db, alice.id, target) is True
    assert count_likes(db, target) == 1


def test_like_unlike_like_keeps_single_row(db, alice, bob, make_tweet):
    target = TargetRef.tweet(make_tweet(alice).id)

    set_disposition(db, bob, target, True)
    set_disposition(db, bob, target, False)
    assert get_disposition(db, bob.id, target) is False
    assert count_likes(db, target) == 0

    set_disposition(db, bob, target, True)

    rows = _rows(db, bob, target)
    assert len(rows) == 1
    assert rows[0].is_liked is True
    assert count_likes(db, target) == 1


def test_repeated_like_is_idempotent(db, alice, make_video):
    target = TargetRef.video(make_video(alice).id)

    set_disposition(db, alice, target, True)
    set_disposition(db, alice, target, True)

    assert len(_rows(db, alice, target)) == 1
    assert count_likes(db, target) == 1


def test_unlike_without_prior_like_creates_nothing(db, alice, make_video, make_comment):
    target = TargetRef.comment(make_comment(make_video(alice), alice).id)

    with pytest.raises(NothingToUndo):
        set_disposition(db, alice, target, False)

    assert _rows(db, alice, target) == []
    assert get_disposition(db, alice.id, target) is None


@pytest.mark.parametrize("desired", ["true", 1, None])
def test_non_boolean_disposition_rejected(db, alice, make_video, desired):
    target = TargetRef.video(make_video(alice).id)

    with pytest.raises(InvalidInput):
        set_disposition(db, alice, target, desired)

    assert _rows(db, alice, target) == []


def test_missing_target_checked_first(db, alice):
    with pytest.raises(NotFound):
        set_disposition(db, alice, TargetRef.video(424242), "not-a-bool")


def test_same_id_different_kinds_are_separate_targets(db, alice, make_video, make_tweet):
    video = make_video(alice)
    tweet = make_tweet(alice)
    assert video.id == tweet.id

    set_disposition(db, alice, TargetRef.video(video.id), True)

    assert count_likes(db, TargetRef.video(video.id)) == 1
    assert count_likes(db, TargetRef.tweet(tweet.id)) == 0


def test_concurrent_first_like_yields_single_row(db, store, alice, bob, make_video, monkeypatch):
    target = TargetRef.video(make_video(alice).id)

    # First request wins
    other = store.session_factory()
    try:
        set_disposition(other, bob, target, True)
    finally:
        other.close()

    # Second request read "no row" before the first committed
    monkeypatch.setattr(
        reactions, "_pair_filter", lambda query, user_id, target: query.filter(false())
    )
    with pytest.raises(AlreadyExists):
        set_disposition(db, bob, target, True)

    monkeypatch.undo()
    assert len(_rows(db, bob, target)) == 1
    assert count_likes(db, target) == 1


# ============================================================================
# HTTP
# ============================================================================


def test_like_endpoints_for_every_kind(client, login, alice, bob, make_video, make_tweet, make_comment):
    video = make_video(alice)
    comment = make_comment(video, alice)
    tweet = make_tweet(alice)
    login(bob)

    for path in (
        f"/api/v1/videos/{video.id}/like",
        f"/api/v1/tweets/{tweet.id}/like",
        f"/api/v1/comments/{comment.id}/like",
    ):
        response = client.post(path, json={"toggleLike": True})
        assert response.status_code == 200, path
        assert response.json()["is_liked"] is True


def test_like_endpoint_rejects_string_boolean(client, login, alice, make_video):
    video = make_video(alice)
    login(alice)

    response = client.post(f"/api/v1/videos/{video.id}/like", json={"toggleLike": "true"})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidInput"


def test_like_endpoint_unlike_never_liked(client, login, alice, make_tweet):
    tweet = make_tweet(alice)
    login(alice)

    response = client.post(f"/api/v1/tweets/{tweet.id}/like", json={"toggleLike": False})

    assert response.status_code == 409
    assert response.json()["error"] == "NothingToUndo"


def test_like_endpoint_missing_target(client, login, alice):
    login(alice)
    response = client.post("/api/v1/comments/999/like", json={"toggleLike": True})
    assert response.status_code == 404
    assert response.json() == {"message": "Comment not found", "error": "NotFound"}


def test_like_endpoint_requires_session(client, alice, make_video):
    video = make_video(alice)
    response = client.post(f"/api/v1/videos/{video.id}/like", json={"toggleLike": True})
    assert response.status_code == 401


def test_double_like_over_http_keeps_one_row(client, db, login, alice, make_video):
    video = make_video(alice)
    login(alice)

    for _ in range(2):
        response = client.post(f"/api/v1/videos/{video.id}/like", json={"toggleLike": True})
        assert response.status_code == 200

    assert len(_rows(db, alice, TargetRef.video(video.id))) == 1
