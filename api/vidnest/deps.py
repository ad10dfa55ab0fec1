from __future__ import annotations

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from .media_vault import MediaVault


def get_db(request: Request) -> Generator[Session, None, None]:
    yield from request.app.state.store.session()


def get_media(request: Request) -> MediaVault:
    return request.app.state.media
