"""Test channel, history and video views."""

from __future__ import annotations

import pytest

from vidnest import models
from vidnest.errors import ChannelNotFound
from vidnest.services.engagement import (
    build_channel_view,
    build_history_view,
    build_video_view,
    record_view,
)
from vidnest.services.reactions import set_disposition
from vidnest.services.subscriptions import follow
from vidnest.services.targets import TargetRef


def test_channel_view_counts(db, make_user, alice):
    fans = [make_user(f"fan{i}") for i in range(3)]
    for fan in fans[:2]:
        follow(db, fan, alice)
    follow(db, alice, fans[0])

    view = build_channel_view(db, "alice")
    assert view.subscribers_count == 2
    assert view.subscribed_to_count == 1
    assert view.is_subscribed is False

    follow(db, fans[2], alice)
    assert build_channel_view(db, "alice").subscribers_count == 3


def test_channel_view_is_subscribed_for_viewer(db, alice, bob):
    follow(db, bob, alice)

    assert build_channel_view(db, "ALICE", viewer=bob).is_subscribed is True
    assert build_channel_view(db, "alice", viewer=alice).is_subscribed is False


def test_channel_view_hides_private_fields(db, alice):
    dumped = build_channel_view(db, "alice").model_dump()
    assert "email" not in dumped
    assert "password_hash" not in dumped
    assert "watch_history" not in dumped


@pytest.mark.parametrize("handle", ["", "   ", "nobody"])
def test_channel_view_unknown_handle(db, handle):
    with pytest.raises(ChannelNotFound):
        build_channel_view(db, handle)


def test_history_keeps_order_and_duplicates(db, alice, bob, make_video):
    first = make_video(bob, title="first")
    second = make_video(bob, title="second")
    alice.watch_history = [second.id, first.id, second.id]
    db.commit()

    history = build_history_view(db, alice)

    assert [v.title for v in history] == ["second", "first", "second"]
    assert history[0].owner.handle == "bob"
    assert "email" not in history[0].owner.model_dump()


def test_history_skips_deleted_videos(db, alice, make_video):
    kept = make_video(alice, title="kept")
    gone = make_video(alice, title="gone")
    alice.watch_history = [gone.id, kept.id]
    db.commit()
    db.delete(gone)
    db.commit()

    assert [v.title for v in build_history_view(db, alice)] == ["kept"]


def test_history_empty(db, alice):
    assert build_history_view(db, alice) == []


def test_record_view_counts_and_appends_history(db, alice, bob, make_video):
    video = make_video(bob)

    record_view(db, video, viewer=alice)
    record_view(db, video, viewer=alice)
    record_view(db, video)

    db.refresh(alice)
    assert video.views == 3
    assert alice.watch_history == [video.id, video.id]


def test_video_view_figures(db, alice, bob, make_video, make_comment):
    video = make_video(alice)
    make_comment(video, bob)
    make_comment(video, alice)
    set_disposition(db, bob, TargetRef.video(video.id), True)

    as_bob = build_video_view(db, video, viewer=bob)
    assert as_bob.likes_count == 1
    assert as_bob.comments_count == 2
    assert as_bob.is_liked is True

    assert build_video_view(db, video, viewer=alice).is_liked is False
    assert build_video_view(db, video).is_liked is False


# ============================================================================
# HTTP
# ============================================================================


def test_channel_endpoint_anonymous_and_logged_in(client, db, login, alice, bob):
    follow(db, bob, alice)

    anonymous = client.get("/api/v1/users/alice")
    assert anonymous.status_code == 200
    body = anonymous.json()
    assert body["subscribers_count"] == 1
    assert body["is_subscribed"] is False
    assert "email" not in body

    login(bob)
    assert client.get("/api/v1/users/alice").json()["is_subscribed"] is True


def test_channel_endpoint_ignores_bad_session(client, settings, alice):
    client.cookies.set(settings.session_cookie_name, "garbage")
    response = client.get("/api/v1/users/alice")
    assert response.status_code == 200
    assert response.json()["is_subscribed"] is False


def test_channel_endpoint_unknown(client):
    response = client.get("/api/v1/users/nobody")
    assert response.status_code == 404
    assert response.json() == {"message": "Channel 'nobody' not found", "error": "ChannelNotFound"}


def test_history_endpoint(client, login, alice, bob, make_video):
    video = make_video(bob, title="watched")
    login(alice)

    client.get(f"/api/v1/videos/{video.id}")
    client.get(f"/api/v1/videos/{video.id}")

    response = client.get("/api/v1/users/me/history")
    assert response.status_code == 200
    assert [v["title"] for v in response.json()] == ["watched", "watched"]
    assert response.json()[0]["owner"] == {"handle": "bob", "avatar_url": bob.avatar_url}


def test_record_view_keeps_history_written_by_another_request(db, store, alice, bob, make_video):
    earlier = make_video(bob, title="earlier")
    video = make_video(bob, title="now")
    assert alice.watch_history == []

    # Another request appends while this session still holds the old list
    other = store.session_factory()
    try:
        other.get(models.User, alice.id).watch_history = [earlier.id]
        other.commit()
    finally:
        other.close()

    record_view(db, video, viewer=alice)

    db.refresh(alice)
    assert alice.watch_history == [earlier.id, video.id]
