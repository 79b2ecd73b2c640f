"""Database session management."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rapid_responder.core.config import settings
from rapid_responder.db.base import Base  # noqa: F401


def engine_options(database_url: str) -> dict:
    """Bounded timeouts so a stuck database surfaces as an error, not a hang."""
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.db_connect_timeout_seconds,
            },
        }
    return {
        "pool_pre_ping": True,
        "pool_timeout": settings.db_pool_timeout_seconds,
        "connect_args": {"connect_timeout": settings.db_connect_timeout_seconds},
    }


engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    **engine_options(settings.database_url),
)

# Records stay readable after commit; store writes load everything they need before committing
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db():
    """Dependency for FastAPI to get DB session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
