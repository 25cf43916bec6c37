"""
FastAPI dependencies (DB session, clock, authentication)
"""
from datetime import datetime

from fastapi import Depends, Request, HTTPException, status
from sqlalchemy.orm import Session

from app.application.clients import resolve_client
from app.domain.subscription import MergedClient
from app.infrastructure.db.session import get_db as _get_db
from app.infrastructure.db.models import AdminUserModel
from app.utils.dates import utc_now


# Re-export get_db
get_db = _get_db

SESSION_CLIENT_KEY = "client_phone"
SESSION_ADMIN_KEY = "admin_id"


def get_now() -> datetime:
    """Current UTC time; overridden in tests to pin the clock."""
    return utc_now()


def get_current_client(request: Request, db: Session = Depends(get_db)) -> MergedClient:
    """
    Logged-in client (merged view), re-read on every request.

    Raises:
        HTTPException(401): not logged in, or every row was deleted since login
    """
    phone = request.session.get(SESSION_CLIENT_KEY)
    if not phone:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )

    client = resolve_client(db, phone)
    if client is None:
        request.session.pop(SESSION_CLIENT_KEY, None)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Acesso revogado."
        )
    return client


def require_admin(request: Request, db: Session = Depends(get_db)) -> AdminUserModel:
    """Current admin, otherwise 403."""
    admin_id = request.session.get(SESSION_ADMIN_KEY)
    if not admin_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso negado")
    admin = db.query(AdminUserModel).filter(AdminUserModel.id == admin_id).first()
    if not admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso negado")
    return admin
