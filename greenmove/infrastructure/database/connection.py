"""Database engine and session factory."""
import logging
import os
import re
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

log = logging.getLogger("greenmove.db")

_engine = None
_SessionLocal = None

# Matches a postgres(ql):// URL anywhere inside a string.
_PG_URL_RE = re.compile(r"(postgres(?:ql)?://\S+)")


def resolve_database_url(raw: str) -> str:
    """Return a clean SQLAlchemy URL.

    Strips whitespace and surrounding quotes, extracts the URL from a pasted
    ``psql`` command, and selects the psycopg 3 driver for PostgreSQL URLs.
    Non-PostgreSQL URLs (e.g. ``sqlite://``) pass through unchanged.
    """
    raw = (raw or "").strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ('"', "'"):
        raw = raw[1:-1].strip()

    match = _PG_URL_RE.search(raw)
    if not match:
        return raw
    url = match.group(1).rstrip("'\"").strip()
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def _mask(url: str) -> str:
    return url.split("@")[-1].split("?")[0] if "@" in url else url.split("://")[0]


def init_engine(url: str) -> None:
    """Create the engine and sessionmaker for ``url``."""
    global _engine, _SessionLocal

    url = resolve_database_url(url)
    if not url:
        raise RuntimeError("Database URL is empty")

    log.info("Initialising database engine -> %s", _mask(url))
    if url.startswith("sqlite"):
        # One shared connection so in-memory SQLite survives across sessions.
        _engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        _engine = create_engine(
            url,
            pool_size=3,
            max_overflow=5,
            pool_timeout=15,
            pool_recycle=1800,
            pool_pre_ping=True,
        )
    _SessionLocal = sessionmaker(bind=_engine, expire_on_commit=False)


def get_engine():
    """Return the active SQLAlchemy engine (may be None)."""
    return _engine


def get_session_factory():
    """Return a context-managed session factory for repositories.

    Raises RuntimeError if no engine has been initialised.
    """
    if _SessionLocal is None:
        raise RuntimeError("Database not initialised. Call init_engine() first.")
    return managed_session_factory(_SessionLocal)


def managed_session_factory(session_maker):
    """Wrap a sessionmaker so failed blocks always roll back and close."""

    @contextmanager
    def _managed_session():
        session = session_maker()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return _managed_session


def create_tables() -> None:
    """Create all tables (idempotent)."""
    from greenmove.infrastructure.database.models import Base

    Base.metadata.create_all(bind=_engine)
    log.info("Ledger tables verified.")


def check_health() -> bool:
    """Lightweight connectivity probe."""
    if _engine is None:
        return False
    try:
        with _engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        log.warning("Database health check failed: %s", exc)
        return False
