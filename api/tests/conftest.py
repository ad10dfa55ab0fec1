from __future__ import annotations

from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from vidnest.auth import SessionManager
from vidnest.db import Store
from vidnest.main import create_app
from vidnest.media_vault import MediaVault
from vidnest.models import Comment, Tweet, User, Video
from vidnest.services.passwords import hash_password
from vidnest.settings import Settings

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
TEST_PASSWORD = "correct-horse-battery"

# Smallest byte strings the vault accepts for each media kind
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 32


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        jwt_secret_key=TEST_SECRET,
        database_url=f"sqlite:///{tmp_path / 'vidnest.db'}",
        vault_location=str(tmp_path / "vault"),
        media_size_limit=1024 * 1024,
    )


@pytest.fixture()
def store(settings: Settings) -> Generator[Store, None, None]:
    store = Store(settings.database_url)
    store.create_all()
    yield store
    store.dispose()


@pytest.fixture()
def media(settings: Settings) -> MediaVault:
    return MediaVault(settings.vault_location, settings.media_size_limit)


@pytest.fixture()
def sessions(settings: Settings) -> SessionManager:
    return SessionManager(
        secret_key=settings.jwt_secret_key,
        ttl_seconds=settings.session_ttl_seconds,
        cookie_name=settings.session_cookie_name,
    )


@pytest.fixture()
def db(store: Store) -> Generator[Session, None, None]:
    """Create a database session for testing."""
    session = store.session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def client(settings: Settings, store: Store, media: MediaVault) -> Generator[TestClient, None, None]:
    app = create_app(settings, store=store, media=media)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_user(db: Session) -> Callable[..., User]:
    """Factory creating users directly in the database."""

    def _make_user(handle: str, email: str | None = None, password: str = TEST_PASSWORD) -> User:
        user = User(
            handle=handle,
            email=email or f"{handle}@example.com",
            password_hash=hash_password(password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def alice(make_user) -> User:
    return make_user("alice")


@pytest.fixture()
def bob(make_user) -> User:
    return make_user("bob")


@pytest.fixture()
def login(client: TestClient, sessions: SessionManager, settings: Settings) -> Callable[[User], None]:
    """Put a valid session cookie for ``user`` on the test client."""

    def _login(user: User) -> None:
        client.cookies.clear()
        client.cookies.set(settings.session_cookie_name, sessions.issue(user.id))

    return _login


@pytest.fixture()
def make_video(db: Session) -> Callable[..., Video]:
    def _make_video(owner: User, title: str = "A video") -> Video:
        video = Video(
            owner_id=owner.id,
            video_url="/vault/00/00/00/missing.mp4",
            thumbnail_url="/vault/00/00/00/missing.png",
            title=title,
            description="Some description",
        )
        db.add(video)
        db.commit()
        db.refresh(video)
        return video

    return _make_video


@pytest.fixture()
def make_tweet(db: Session) -> Callable[..., Tweet]:
    def _make_tweet(owner: User, content: str = "Hello world") -> Tweet:
        tweet = Tweet(owner_id=owner.id, content=content)
        db.add(tweet)
        db.commit()
        db.refresh(tweet)
        return tweet

    return _make_tweet


@pytest.fixture()
def make_comment(db: Session) -> Callable[..., Comment]:
    def _make_comment(video: Video, owner: User, content: str = "Nice!") -> Comment:
        comment = Comment(video_id=video.id, owner_id=owner.id, content=content)
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    return _make_comment


@pytest.fixture()
def password() -> str:
    return TEST_PASSWORD


@pytest.fixture()
def png_upload() -> tuple[str, bytes, str]:
    return ("thumb.png", PNG_BYTES, "image/png")


@pytest.fixture()
def mp4_upload() -> tuple[str, bytes, str]:
    return ("clip.mp4", MP4_BYTES, "video/mp4")
