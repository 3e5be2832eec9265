"""SQLAlchemy Engine / Session helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from common.utils.config import get_settings


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Create an Engine for the publish store."""

    url = database_url or get_settings().publish_store_url
    if not url:
        raise RuntimeError("PUBLISH_STORE_URL is not configured")
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, future=True, connect_args=connect_args)


def get_session_factory(engine=None):
    """Build a sessionmaker, defaulting to the configured Engine."""

    engine = engine or get_engine()
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False, future=True)


@contextmanager
def session_scope(session_factory=None) -> Generator[Session, None, None]:
    """Transactional Session scope: commit on success, roll back on error."""

    factory = session_factory or get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
