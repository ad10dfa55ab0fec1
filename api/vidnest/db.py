from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


def _engine_for(database_url: str, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        # In-memory databases only live as long as their single connection
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, future=True, echo=echo, **kwargs)
    return create_engine(database_url, future=True, echo=echo, pool_pre_ping=True)


class Store:
    """
    Handle on the backing database.

    Constructed once by the process entry point and handed to the app; nothing
    in the package keeps a module-level engine.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self.engine = _engine_for(database_url, echo=echo)
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, future=True
        )

    def ping(self) -> None:
        """Raise if the database cannot be reached."""
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def create_all(self) -> None:
        # Import models so every table is registered on the metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def session(self) -> Generator[Session, None, None]:
        session: Session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
