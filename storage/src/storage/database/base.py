"""SQLAlchemy engine and session management."""

from contextlib import contextmanager
from typing import Iterator, Optional

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def init_db(database_url: str, create_tables: bool = True) -> Engine:
    """Bind the module-level engine. In-memory SQLite shares one connection."""
    global _engine, _session_factory
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
    _engine = create_engine(database_url, **kwargs)
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
    if create_tables:
        # Import entities so their tables register on Base.metadata
        from storage.entity import task, point, pomodoro_stats  # noqa: F401
        from storage.entity.base import Base
        Base.metadata.create_all(_engine)
    logger.info("Database initialized url={}", _engine.url.render_as_string(hide_password=True))
    return _engine


def is_initialized() -> bool:
    return _session_factory is not None


def dispose_db():
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_db() -> Iterator[Session]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized; call init_db() first")
    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
