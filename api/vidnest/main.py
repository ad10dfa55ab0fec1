from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .auth import SessionManager
from .db import Store
from .error_handlers import register_error_handlers
from .media_vault import MediaVault
from .routers import auth, comments, system, tweets, users, videos
from .settings import Settings, load_settings

load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)


def _alembic_config(database_url: str) -> Config:
    base_dir = Path(__file__).resolve().parent.parent
    cfg = Config(str(base_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(base_dir / "alembic"))
    # ConfigParser interpolation: escape percent-encoded credentials
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def run_migrations(store: Store) -> None:
    logger.info("Running Alembic migrations...")
    # Release pooled connections before alembic opens its own
    store.engine.dispose()
    command.upgrade(_alembic_config(store.database_url), "head")
    logger.info("Migrations completed.")


def run_startup_tasks(settings: Settings, store: Store) -> None:
    """Verify the database is reachable and bring the schema up to date."""
    logger.info("run_startup_tasks: Starting...")
    try:
        store.ping()
        if settings.run_migrations:
            run_migrations(store)
        else:
            store.create_all()
        logger.info("Startup tasks completed.")
    except Exception as e:
        logger.error(f"Startup tasks failed: {e}", exc_info=True)
        raise


def create_app(
    settings: Settings | None = None,
    store: Store | None = None,
    media: MediaVault | None = None,
) -> FastAPI:
    """
    Build the API application.

    Collaborators are constructed here from settings unless passed in, and are
    reachable by request handlers through app.state.
    """
    settings = settings or load_settings()
    logging.getLogger("vidnest").setLevel(settings.log_level)
    store = store or Store(settings.database_url)
    media = media or MediaVault(settings.vault_location, settings.media_size_limit)
    sessions = SessionManager(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        ttl_seconds=settings.session_ttl_seconds,
        cookie_name=settings.session_cookie_name,
        secure_cookie=settings.is_production,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting application...")
        # Server won't start until these complete
        run_startup_tasks(settings, store)
        logger.info("Vidnest API server ready")
        yield
        logger.info("Shutting down application...")
        store.dispose()

    app = FastAPI(
        title="Vidnest API",
        version="1.0.0",
        description="Video sharing API with channels, tweets, comments and likes",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.media = media
    app.state.sessions = sessions

    if "*" in settings.cors_origins:
        logger.warning(
            "CORS is configured to allow all origins. "
            "This is insecure for production. Set CORS_ORIGINS to specific domains."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    register_error_handlers(app)

    prefix = settings.api_prefix
    app.include_router(system.router, prefix=prefix)
    app.include_router(auth.router, prefix=prefix)
    app.include_router(users.router, prefix=prefix)
    app.include_router(videos.router, prefix=prefix)
    app.include_router(tweets.router, prefix=prefix)
    app.include_router(comments.router, prefix=prefix)

    # Serve stored media
    vault_path = Path(settings.vault_location)
    vault_path.mkdir(parents=True, exist_ok=True)
    app.mount("/vault", StaticFiles(directory=str(vault_path)), name="vault")

    return app


def __getattr__(name: str):
    # uvicorn vidnest.main:app builds the app on first access, after the
    # environment is loaded; importing this module for create_app stays cheap.
    if name == "app":
        application = create_app()
        globals()["app"] = application
        return application
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
