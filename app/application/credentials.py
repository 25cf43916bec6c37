"""
Credential store use cases + assignment queries.

Assignment is never persisted: every query reloads clients and credentials
and runs the pure engine in app.domain.assignment.
"""
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.application.clients import load_merged_clients
from app.domain.assignment import (
    CredentialAssignment, assign_credential, assigned_clients, credential_usage,
)
from app.domain.credential import SYSTEM_CONFIG_SERVICE, Credential, without_system_rows
from app.domain.subscription import MergedClient
from app.infrastructure.db.models import AppCredentialModel
from app.utils.dates import parse_timestamp

logger = logging.getLogger(__name__)


class CredentialValidationError(ValueError):
    pass


def load_credentials(db: Session) -> list[Credential]:
    """Every credential except the SYSTEM_CONFIG row, id order."""
    try:
        rows = (
            db.query(AppCredentialModel)
            .filter(AppCredentialModel.service != SYSTEM_CONFIG_SERVICE)
            .order_by(AppCredentialModel.id)
            .all()
        )
    except SQLAlchemyError:
        logger.warning("Credential store unavailable, using empty pool", exc_info=True)
        db.rollback()
        return []
    return without_system_rows([Credential.from_mapping(r.to_record()) for r in rows])


class SaveCredentialUseCase:
    """Insert or update (when credential_id is given) a shared login."""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        service: str,
        email: str,
        password: str,
        published_at,
        is_visible: bool = True,
        credential_id: int | None = None,
    ) -> int:
        service = service.strip()
        if not service:
            raise CredentialValidationError("Serviço não pode ser vazio")
        if service == SYSTEM_CONFIG_SERVICE:
            raise CredentialValidationError("Nome de serviço reservado")
        email = email.strip()
        if not email:
            raise CredentialValidationError("Email não pode ser vazio")
        if not password.strip():
            raise CredentialValidationError("Senha não pode ser vazia")
        published = parse_timestamp(published_at)
        if published is None:
            raise CredentialValidationError("Data de publicação inválida")

        if credential_id is not None:
            row = self.db.query(AppCredentialModel).filter(
                AppCredentialModel.id == credential_id,
                AppCredentialModel.service != SYSTEM_CONFIG_SERVICE,
            ).first()
            if not row:
                raise CredentialValidationError("Credencial não encontrada")
        else:
            row = AppCredentialModel()
            self.db.add(row)

        row.service = service
        row.email = email
        row.password = password.strip()
        row.published_at = published
        row.is_visible = is_visible

        self.db.flush()
        self.db.commit()
        logger.info("Credential saved id=%d service=%s", row.id, service)
        return row.id


class DeleteCredentialUseCase:
    """Hard delete (unlike clients, credentials have no tombstone)."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, credential_id: int) -> None:
        row = self.db.query(AppCredentialModel).filter(
            AppCredentialModel.id == credential_id,
            AppCredentialModel.service != SYSTEM_CONFIG_SERVICE,
        ).first()
        if not row:
            raise CredentialValidationError("Credencial não encontrada")
        self.db.delete(row)
        self.db.commit()
        logger.info("Credential deleted id=%d", credential_id)


# ============================================================================
# Assignment queries
# ============================================================================


def get_assigned_credential(
    db: Session,
    phone_number: str,
    service: str,
    now: datetime,
) -> CredentialAssignment:
    credentials = load_credentials(db)
    if not credentials:
        return CredentialAssignment(None, None)
    return assign_credential(phone_number, service, load_merged_clients(db), credentials, now)


def get_clients_assigned_to_credential(
    db: Session,
    credential_id: int,
    preloaded_clients: list[MergedClient] | None = None,
    preloaded_credentials: list[Credential] | None = None,
) -> list[MergedClient]:
    """Who uses this credential. Pass preloaded lists when rendering many rows."""
    clients = preloaded_clients if preloaded_clients is not None else load_merged_clients(db)
    credentials = preloaded_credentials if preloaded_credentials is not None else load_credentials(db)
    return assigned_clients(credential_id, clients, credentials)


def get_users_count_for_credential(
    db: Session,
    credential_id: int,
    preloaded_clients: list[MergedClient] | None = None,
) -> int:
    return len(get_clients_assigned_to_credential(db, credential_id, preloaded_clients))


def list_credentials_with_usage(db: Session) -> list[tuple[Credential, int]]:
    """Admin list: every credential with its current client count."""
    credentials = load_credentials(db)
    usage = credential_usage(load_merged_clients(db), credentials)
    return [(c, usage.get(c.id, 0)) for c in credentials]
