"""
Database engine, session management, and initialization.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from typing import Generator

from config.settings import settings
from db.models import Base


def make_engine(url: str, echo: bool = False) -> Engine:
    kwargs = {"echo": echo}
    if "sqlite" in url:
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create all tables."""
    Base.metadata.create_all(bind=bind)
    print("✅ Database initialized.")


def create_session_factory(url: str) -> sessionmaker:
    """Standalone engine + tables + session factory (tests, alternate stores)."""
    other = make_engine(url)
    Base.metadata.create_all(bind=other)
    return sessionmaker(autocommit=False, autoflush=False, bind=other)


@contextmanager
def session_scope(factory: sessionmaker = SessionLocal) -> Generator[Session, None, None]:
    """Context manager for database sessions."""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

