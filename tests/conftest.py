"""
Pytest fixtures for testing
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, JSON
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import JSONB

from app.infrastructure.db.session import Base
from app.infrastructure.db.models import AppCredentialModel, ClientModel

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_engine():
    """In-memory SQLite engine for tests, with JSONB→JSON mapping.

    StaticPool + check_same_thread=False: TestClient runs sync routes in a
    worker thread, and every thread must see the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # SQLite doesn't support JSONB: remap to JSON for tests
    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, JSONB):
                col.type = JSON()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def add_client(db_session):
    """Insert a raw client row; returns the model."""
    def _add(
        phone_number: str,
        subscriptions,
        purchase_date: datetime = datetime(2024, 6, 1, tzinfo=timezone.utc),
        duration_months: int = 1,
        client_name: str | None = None,
        client_password: str = "",
        is_debtor: bool = False,
        override_expiration: bool = False,
        deleted: bool = False,
        game_progress: dict | None = None,
    ) -> ClientModel:
        row = ClientModel(
            phone_number=phone_number,
            client_name=client_name,
            client_password=client_password,
            subscriptions=subscriptions,
            purchase_date=purchase_date,
            duration_months=duration_months,
            is_debtor=is_debtor,
            override_expiration=override_expiration,
            deleted=deleted,
            game_progress=game_progress,
        )
        db_session.add(row)
        db_session.commit()
        return row
    return _add


@pytest.fixture
def add_credential(db_session):
    """Insert a credential row; returns the model."""
    def _add(
        service: str,
        email: str,
        published_at: datetime = datetime(2024, 6, 10, tzinfo=timezone.utc),
        is_visible: bool = True,
        password: str = "secret",
    ) -> AppCredentialModel:
        row = AppCredentialModel(
            service=service,
            email=email,
            password=password,
            published_at=published_at,
            is_visible=is_visible,
        )
        db_session.add(row)
        db_session.commit()
        return row
    return _add
