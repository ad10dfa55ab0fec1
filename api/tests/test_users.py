"""Test own-account endpoints."""

from __future__ import annotations

from vidnest.models import DEFAULT_AVATAR_URL, DEFAULT_COVER_IMAGE_URL


def test_get_me_hides_password_hash(client, login, alice):
    login(alice)
    response = client.get("/api/v1/users/me")

    assert response.status_code == 200
    body = response.json()
    assert body["handle"] == "alice"
    assert body["email"] == "alice@example.com"
    assert "password_hash" not in body
    assert "watch_history" not in body


def test_replace_avatar_deletes_previous_vault_file(client, login, alice, media, png_upload):
    login(alice)

    first = client.patch("/api/v1/users/me/avatar", files={"avatar": png_upload})
    assert first.status_code == 200
    first_url = first.json()["avatar_url"]
    assert first_url != DEFAULT_AVATAR_URL
    first_path = media.location / first_url[len("/vault/"):]
    assert first_path.exists()

    second = client.patch("/api/v1/users/me/avatar", files={"avatar": png_upload})
    assert second.status_code == 200
    assert second.json()["avatar_url"] != first_url
    assert not first_path.exists()


def test_replace_cover_image(client, login, alice, png_upload):
    login(alice)

    response = client.patch("/api/v1/users/me/cover-image", files={"coverImage": png_upload})

    assert response.status_code == 200
    cover = response.json()["cover_image_url"]
    assert cover != DEFAULT_COVER_IMAGE_URL
    assert cover.startswith("/vault/")


def test_avatar_requires_image(client, login, alice, mp4_upload):
    login(alice)
    response = client.patch("/api/v1/users/me/avatar", files={"avatar": mp4_upload})
    assert response.status_code == 400


def test_change_password(client, login, alice, password):
    login(alice)

    response = client.patch(
        "/api/v1/users/me/password",
        json={"current_password": password, "new_password": "brand-new-pass"},
    )
    assert response.status_code == 200

    relogin = client.post(
        "/api/v1/auth/login", json={"email": "alice@example.com", "password": "brand-new-pass"}
    )
    assert relogin.status_code == 200


def test_change_password_wrong_current(client, login, alice):
    login(alice)
    response = client.patch(
        "/api/v1/users/me/password",
        json={"current_password": "nope", "new_password": "brand-new-pass"},
    )
    assert response.status_code == 401
    assert response.json()["error"] == "InvalidCredentials"


def test_change_password_to_same_value(client, login, alice, password):
    login(alice)
    response = client.patch(
        "/api/v1/users/me/password",
        json={"current_password": password, "new_password": password},
    )
    assert response.status_code == 400
