"""Register, upload and like through the HTTP surface."""

from __future__ import annotations

from vidnest import models


def test_register_upload_double_like(client, db, mp4_upload, png_upload):
    registered = client.post(
        "/api/v1/auth/register",
        data={"username": "erin", "email": "erin@example.com", "password": "pa55word!"},
    )
    assert registered.status_code == 201
    uploader_id = registered.json()["id"]

    uploaded = client.post(
        "/api/v1/videos",
        data={"title": "First upload", "description": "Hello"},
        files={"videoFile": mp4_upload, "thumbnail": png_upload},
    )
    assert uploaded.status_code == 201
    video_id = uploaded.json()["id"]
    assert uploaded.json()["owner_id"] == uploader_id

    # A different account likes the video twice
    client.cookies.clear()
    fan = client.post(
        "/api/v1/auth/register",
        data={"username": "frank", "email": "frank@example.com", "password": "pa55word!"},
    )
    assert fan.status_code == 201
    user_id = fan.json()["id"]
    assert user_id != uploader_id

    for _ in range(2):
        liked = client.post(f"/api/v1/videos/{video_id}/like", json={"toggleLike": True})
        assert liked.status_code == 200

    rows = (
        db.query(models.Like)
        .filter(models.Like.user_id == user_id, models.Like.target_id == video_id)
        .all()
    )
    assert len(rows) == 1
    assert rows[0].is_liked is True
    assert rows[0].target_kind == "video"

    detail = client.get(f"/api/v1/videos/{video_id}").json()
    assert detail["likes_count"] == 1
    assert detail["is_liked"] is True
    assert detail["views"] == 1


def test_delete_account_leaves_content_and_expires_cookie(client, db, login, alice, make_tweet):
    tweet = make_tweet(alice)
    login(alice)

    response = client.delete("/api/v1/users/me")

    assert response.status_code == 200
    assert "Max-Age=0" in response.headers.get("set-cookie", "")
    db.expire_all()
    assert db.query(models.User).filter(models.User.handle == "alice").first() is None
    assert db.query(models.Tweet).filter(models.Tweet.id == tweet.id).first() is not None
