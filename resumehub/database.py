"""
Database Configuration and Session Management

SQLAlchemy engine and session factory. Tenants share one schema and every
tenant-owned table carries a tenant_id column; isolation is enforced by the
tenant middleware and the tenant filter on each query.
"""
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from resumehub.config import get_settings
import logging

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    Pool sizing only applies to server databases. SQLite connections are
    shared with the threadpool, so same-thread checking is turned off.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG,
        )

    new_engine = create_engine(
        database_url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,  # Handles stale connections
        echo=settings.DEBUG,
    )

    @event.listens_for(new_engine, "connect")
    def set_utc_timezone(dbapi_connection, connection_record):
        """Keep timestamps consistent across all tenants."""
        cursor = dbapi_connection.cursor()
        cursor.execute("SET TIME ZONE 'UTC'")
        cursor.close()
        logger.debug("New database connection established")

    return new_engine


def build_session_factory(bind: Engine) -> sessionmaker:
    # expire_on_commit=False: loaded objects stay readable after commit,
    # including from event handlers running on other threads.
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=bind,
        expire_on_commit=False,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = build_session_factory(engine)

# Base class for all models
Base = declarative_base()


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency that provides a database session for one request.

    The session factory is the one the application was built with, so tests
    can point the whole app at a throwaway database.
    """
    session_factory = getattr(request.app.state, "session_factory", SessionLocal)
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """
    Create all tables.

    Development convenience only; production schemas are managed by
    migrations.
    """
    import resumehub.models  # noqa: F401  (registers models on Base)

    logger.warning("init_db() called - use migrations in production!")
    Base.metadata.create_all(bind=bind or engine)
