"""
Database access: SQLAlchemy engine/session for the ORM, raw psycopg for probes.

Tables: clients, app_credentials, user_doramas, admin_users.
"""
from contextlib import contextmanager
from collections.abc import Iterator

import psycopg
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from app.config import get_settings


class Base(DeclarativeBase):
    pass


_engine = None
_SessionLocal = None


def get_db_dsn() -> str:
    """libpq DSN (psycopg does not understand the +psycopg driver suffix)."""
    raw = get_settings().DATABASE_URL
    if raw.startswith("postgresql+psycopg://"):
        raw = raw.replace("postgresql+psycopg://", "postgresql://", 1)
    return raw


def get_engine():
    global _engine
    if _engine is None:
        _engine = create_engine(get_settings().get_sqlalchemy_url(), pool_pre_ping=True)
    return _engine


def get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: one session per request, always closed.

    Usage:
        @router.get("/clients")
        def list_clients(db: Session = Depends(get_db)):
            ...
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for background jobs (outside the request cycle)."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> None:
    """
    Readiness probe.

    Raises:
        psycopg.OperationalError: if the database is down
    """
    with psycopg.connect(get_db_dsn(), connect_timeout=3) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
            cur.fetchone()
