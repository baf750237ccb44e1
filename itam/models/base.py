"""
Engine, session factory and declarative base.

Request handlers get their session from get_db(). Code that
outlives a request (the permission cache loader) builds its
own sessions from SessionLocal.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from itam.config import get_settings

settings = get_settings()


def engine_options(url: str) -> dict:
    """Driver options for url. SQLite sessions are used across worker threads."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

# Nothing is durable until the handler commits. Audit entries are
# written after that commit, so the boundary has to stay explicit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


def get_db():
    """
    Yield one session per request and close it afterwards.

    Uncommitted work is discarded on close, so a handler that
    raises before commit leaves no partial mutation behind.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
