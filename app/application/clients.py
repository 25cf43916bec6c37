"""
Client store use cases - CRUD over the `clients` table and merged lookups.

Reads never raise on storage failure: the assignment engine must degrade to
"no credential" instead of erroring, so load_* helpers log and return [].
"""
import logging
import secrets
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth import hash_password
from app.config import get_settings
from app.domain.phone import normalize_phone, phone_variants
from app.domain.subscription import (
    MergedClient, RawClientRecord, group_by_phone, merge_client_records, parse_services,
)
from app.infrastructure.db.models import ClientModel
from app.utils.dates import parse_timestamp, utc_now

logger = logging.getLogger(__name__)

MAX_DURATION_MONTHS = 999
DEMO_SERVICES = ["Viki Pass", "Kocowa+", "IQIYI", "WeTV", "DramaBox"]


class ClientValidationError(ValueError):
    pass


# ============================================================================
# Reads
# ============================================================================


def load_client_records(db: Session) -> list[RawClientRecord]:
    """All rows (deleted included) as domain records, id order."""
    try:
        rows = db.query(ClientModel).order_by(ClientModel.id).all()
    except SQLAlchemyError:
        logger.warning("Client store unavailable, using empty roster", exc_info=True)
        db.rollback()
        return []
    return [RawClientRecord.from_mapping(r.to_record()) for r in rows]


def load_merged_clients(db: Session) -> list[MergedClient]:
    return group_by_phone(load_client_records(db), get_settings().DEFAULT_CLIENT_NAME)


def find_client_rows(db: Session, phone: str) -> list[ClientModel]:
    """Rows for a phone, probing with and without the country code."""
    variants = phone_variants(phone)
    if not variants:
        return []
    return (
        db.query(ClientModel)
        .filter(ClientModel.phone_number.in_(variants))
        .order_by(ClientModel.id)
        .all()
    )


def resolve_client(db: Session, phone: str) -> MergedClient | None:
    """Merged view of one client; None when unknown or fully deleted."""
    try:
        rows = find_client_rows(db, phone)
    except SQLAlchemyError:
        logger.warning("Client lookup failed for phone=%s", normalize_phone(phone), exc_info=True)
        db.rollback()
        return None
    records = [RawClientRecord.from_mapping(r.to_record()) for r in rows]
    return merge_client_records(records, get_settings().DEFAULT_CLIENT_NAME)


# ============================================================================
# Writes
# ============================================================================


def _validate_payload(
    phone_number: str,
    services,
    purchase_date,
    duration_months: int,
) -> tuple[str, list[str], datetime]:
    phone = normalize_phone(phone_number)
    if not phone:
        raise ClientValidationError("Telefone inválido")

    parsed_services = parse_services(services)
    if not parsed_services:
        raise ClientValidationError("Informe pelo menos um serviço")

    parsed_date = parse_timestamp(purchase_date)
    if parsed_date is None:
        raise ClientValidationError("Data de compra inválida")

    if not isinstance(duration_months, int) or not 1 <= duration_months <= MAX_DURATION_MONTHS:
        raise ClientValidationError("Duração deve estar entre 1 e 999 meses")

    return phone, parsed_services, parsed_date


class SaveClientUseCase:
    """Insert a new client row, or update the row with the given id."""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        phone_number: str,
        subscriptions,
        purchase_date,
        duration_months: int,
        client_name: str | None = None,
        is_debtor: bool = False,
        override_expiration: bool = False,
        client_id: int | None = None,
    ) -> int:
        phone, parsed_services, parsed_date = _validate_payload(
            phone_number, subscriptions, purchase_date, duration_months,
        )

        if client_id is not None:
            row = self.db.query(ClientModel).filter(ClientModel.id == client_id).first()
            if not row:
                raise ClientValidationError("Cliente não encontrado")
        else:
            row = ClientModel(deleted=False, client_password="")
            self.db.add(row)

        row.phone_number = phone
        row.client_name = (client_name or "").strip() or None
        row.subscriptions = parsed_services
        row.purchase_date = parsed_date
        row.duration_months = duration_months
        row.is_debtor = is_debtor
        row.override_expiration = override_expiration

        self.db.flush()
        self.db.commit()
        logger.info("Client saved id=%d phone=%s", row.id, phone)
        return row.id


class SoftDeleteClientUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, client_id: int) -> None:
        row = self.db.query(ClientModel).filter(ClientModel.id == client_id).first()
        if not row:
            raise ClientValidationError("Cliente não encontrado")
        if row.deleted:
            raise ClientValidationError("Cliente já removido")
        row.deleted = True
        self.db.commit()


class ToggleOverrideUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, client_id: int) -> bool:
        row = self.db.query(ClientModel).filter(ClientModel.id == client_id).first()
        if not row:
            raise ClientValidationError("Cliente não encontrado")
        row.override_expiration = not row.override_expiration
        self.db.commit()
        return row.override_expiration


class ToggleDebtorUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, client_id: int) -> bool:
        row = self.db.query(ClientModel).filter(ClientModel.id == client_id).first()
        if not row:
            raise ClientValidationError("Cliente não encontrado")
        row.is_debtor = not row.is_debtor
        self.db.commit()
        return row.is_debtor


class UpdateClientNameUseCase:
    """Rename every row of the phone (name is per person, not per row)."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, phone_number: str, name: str) -> int:
        name = name.strip()
        if not name:
            raise ClientValidationError("Nome não pode ser vazio")
        rows = find_client_rows(self.db, phone_number)
        if not rows:
            raise ClientValidationError("Cliente não encontrado")
        for row in rows:
            row.client_name = name
        self.db.commit()
        return len(rows)


class ResetAllClientPasswordsUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self) -> int:
        count = self.db.query(ClientModel).update(
            {ClientModel.client_password: ""}, synchronize_session=False,
        )
        self.db.commit()
        logger.info("Client passwords reset: %d rows", count)
        return count


class CreateDemoClientUseCase:
    """Demo account with every service and override on (for presentations)."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, now: datetime | None = None) -> int:
        suffix = 1000 + secrets.randbelow(9000)
        row = ClientModel(
            phone_number=f"99999{suffix}",
            client_name=f"Demo User ({suffix})",
            client_password=hash_password("1234"),
            subscriptions=list(DEMO_SERVICES),
            purchase_date=now or utc_now(),
            duration_months=MAX_DURATION_MONTHS,
            is_debtor=False,
            override_expiration=True,
            deleted=False,
            game_progress={},
        )
        self.db.add(row)
        self.db.flush()
        self.db.commit()
        return row.id


def save_game_progress(db: Session, phone_number: str, game_id: str, data: dict) -> bool:
    """Shallow-merge `data` into game_progress[game_id] of the primary row."""
    rows = [r for r in find_client_rows(db, phone_number) if not r.deleted]
    if not rows:
        return False
    row = rows[0]
    progress = dict(row.game_progress or {})
    progress[game_id] = {**(progress.get(game_id) or {}), **data}
    row.game_progress = progress
    db.commit()
    return True


def get_game_progress(db: Session, phone_number: str) -> dict:
    rows = [r for r in find_client_rows(db, phone_number) if not r.deleted]
    if not rows:
        return {}
    return dict(rows[0].game_progress or {})
