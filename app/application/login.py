"""
Client login by phone number.

Flow: the client types the last digits of the phone -> check_user_status
tells the UI which full numbers match and whether a password exists ->
first access registers a password, later accesses log in with it.
"""
import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from app.application.clients import find_client_rows
from app.auth import hash_password, verify_password
from app.config import get_settings
from app.domain.phone import normalize_phone
from app.domain.subscription import MergedClient, RawClientRecord, merge_client_records
from app.infrastructure.db.models import ClientModel

logger = logging.getLogger(__name__)

MIN_LOOKUP_DIGITS = 4
MIN_PASSWORD_LENGTH = 4


class LoginError(ValueError):
    pass


@dataclass
class UserStatus:
    exists: bool
    has_password: bool
    phone_matches: list[str] = field(default_factory=list)


def check_user_status(db: Session, last_digits: str) -> UserStatus:
    digits = normalize_phone(last_digits)
    if len(digits) < MIN_LOOKUP_DIGITS:
        return UserStatus(False, False)

    rows = (
        db.query(ClientModel)
        .filter(ClientModel.phone_number.like(f"%{digits}"))
        .order_by(ClientModel.id)
        .all()
    )
    active = [r for r in rows if not r.deleted]
    if not active:
        return UserStatus(False, False)

    has_password = any((r.client_password or "").strip() for r in active)
    phones: list[str] = []
    for r in active:
        if r.phone_number not in phones:
            phones.append(r.phone_number)
    return UserStatus(True, has_password, phones)


class LoginWithPasswordUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, phone_number: str, password: str) -> MergedClient:
        rows = find_client_rows(self.db, phone_number)
        if not rows:
            raise LoginError("Usuário não encontrado.")

        # Old deleted rows of the same phone must not lock the client out
        active = [r for r in rows if not r.deleted]
        if not active:
            raise LoginError("Acesso revogado.")

        if not any(verify_password(password, r.client_password) for r in active):
            logger.info("Failed login for phone=%s", normalize_phone(phone_number))
            raise LoginError("Senha incorreta.")

        records = [RawClientRecord.from_mapping(r.to_record()) for r in rows]
        client = merge_client_records(records, get_settings().DEFAULT_CLIENT_NAME)
        if client is None:
            raise LoginError("Acesso revogado.")
        return client


class RegisterClientPasswordUseCase:
    """First access: store the password hash on every active row of the phone."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, phone_number: str, password: str) -> MergedClient:
        password = password.strip()
        if len(password) < MIN_PASSWORD_LENGTH:
            raise LoginError(f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres.")

        rows = [r for r in find_client_rows(self.db, phone_number) if not r.deleted]
        if not rows:
            raise LoginError("Usuário não encontrado.")
        if any((r.client_password or "").strip() for r in rows):
            raise LoginError("Senha já cadastrada.")

        password_hash = hash_password(password)
        for row in rows:
            row.client_password = password_hash
        self.db.commit()

        records = [RawClientRecord.from_mapping(r.to_record()) for r in rows]
        return merge_client_records(records, get_settings().DEFAULT_CLIENT_NAME)
