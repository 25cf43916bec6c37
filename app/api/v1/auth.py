"""
Authentication routes (client phone login, admin login)
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import SESSION_ADMIN_KEY, SESSION_CLIENT_KEY, get_db, get_now
from app.api.v1.schemas import ClientResponse, client_response
from app.application.login import (
    LoginError, LoginWithPasswordUseCase, RegisterClientPasswordUseCase, check_user_status,
)
from app.auth import verify_admin_login


router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


# === Request/Response models ===

class CheckRequest(BaseModel):
    last_digits: str


class CheckResponse(BaseModel):
    exists: bool
    has_password: bool
    phone_matches: list[str]


class LoginRequest(BaseModel):
    phone_number: str
    password: str


class AdminLoginRequest(BaseModel):
    username: str
    password: str


# === Endpoints ===

@router.post("/check", response_model=CheckResponse)
def check(req: CheckRequest, db: Session = Depends(get_db)):
    """Which full numbers end with these digits, and is a password set"""
    result = check_user_status(db, req.last_digits)
    return CheckResponse(
        exists=result.exists,
        has_password=result.has_password,
        phone_matches=result.phone_matches,
    )


@router.post("/login", response_model=ClientResponse)
def login(
    request: Request,
    req: LoginRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    try:
        client = LoginWithPasswordUseCase(db).execute(req.phone_number, req.password)
    except LoginError as e:
        raise HTTPException(status_code=401, detail=str(e))

    request.session[SESSION_CLIENT_KEY] = client.normalized_phone
    return client_response(client, now)


@router.post("/register-password", response_model=ClientResponse)
def register_password(
    request: Request,
    req: LoginRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """First access: set password and log in"""
    try:
        client = RegisterClientPasswordUseCase(db).execute(req.phone_number, req.password)
    except LoginError as e:
        raise HTTPException(status_code=400, detail=str(e))

    request.session[SESSION_CLIENT_KEY] = client.normalized_phone
    return client_response(client, now)


@router.post("/logout")
def logout(request: Request):
    request.session.pop(SESSION_CLIENT_KEY, None)
    return {"status": "ok"}


@router.post("/admin/login")
def admin_login(request: Request, req: AdminLoginRequest, db: Session = Depends(get_db)):
    admin = verify_admin_login(db, req.username, req.password)
    if admin is None:
        raise HTTPException(status_code=401, detail="Login ou senha inválidos")
    request.session[SESSION_ADMIN_KEY] = admin.id
    return {"status": "ok", "username": admin.username}


@router.post("/admin/logout")
def admin_logout(request: Request):
    request.session.pop(SESSION_ADMIN_KEY, None)
    return {"status": "ok"}
