"""
SQLAlchemy ORM models
"""
from datetime import datetime
from typing import Any

from sqlalchemy import String, Integer, Text, TIMESTAMP, Boolean, func, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import JSONB

from app.infrastructure.db.session import Base


class ClientModel(Base):
    """
    Subscriber row. One phone number may own several rows: renewals insert a
    new row instead of updating the old one. `deleted` is a soft tombstone.
    """
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    client_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_password: Mapped[str | None] = mapped_column(String(255), nullable=True)  # passlib hash or ""

    # list of service names, or a legacy "+"-joined string
    subscriptions: Mapped[Any] = mapped_column(JSONB, nullable=True)
    purchase_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")

    is_debtor: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    override_expiration: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    # opaque per-game blobs, never inspected by the core
    game_progress: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    def to_record(self) -> dict:
        """Row as a plain dict with store column names (input of the merger)."""
        return {
            "id": self.id,
            "phone_number": self.phone_number,
            "client_name": self.client_name,
            "client_password": self.client_password,
            "subscriptions": self.subscriptions,
            "purchase_date": self.purchase_date,
            "duration_months": self.duration_months,
            "is_debtor": self.is_debtor,
            "override_expiration": self.override_expiration,
            "deleted": self.deleted,
        }


class AppCredentialModel(Base):
    """
    Shared streaming login. Hard-deleted by admin.

    The row with service == 'SYSTEM_CONFIG' is not a credential: its `email`
    column holds the banner/service-status JSON.
    """
    __tablename__ = "app_credentials"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    service: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    published_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "service": self.service,
            "email": self.email,
            "password": self.password,
            "published_at": self.published_at,
            "is_visible": self.is_visible,
        }


class UserDoramaModel(Base):
    """Watch-list entry keyed by normalized phone number"""
    __tablename__ = "user_doramas"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    genre: Mapped[str | None] = mapped_column(String(128), nullable=True)
    thumbnail: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="watching")  # watching / plan_to_watch / completed
    list_type: Mapped[str | None] = mapped_column(String(32), nullable=True)  # legacy copy of the list name

    episodes_watched: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_episodes: Mapped[int] = mapped_column(Integer, nullable=False, default=16)
    season: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index('ix_user_doramas_phone', 'phone_number'),
    )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "genre": self.genre,
            "thumbnail": self.thumbnail,
            "status": self.status,
            "episodes_watched": self.episodes_watched,
            "total_episodes": self.total_episodes,
            "season": self.season,
            "rating": self.rating,
        }


class AdminUserModel(Base):
    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
