"""
Admin API: clients, shared credentials, system banner, overview.

Access: only sessions logged in through /api/v1/auth/admin/login.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_now, require_admin
from app.api.v1.schemas import ClientResponse, CredentialResponse, client_response
from app.application.clients import (
    ClientValidationError, CreateDemoClientUseCase, ResetAllClientPasswordsUseCase,
    SaveClientUseCase, SoftDeleteClientUseCase, ToggleDebtorUseCase, ToggleOverrideUseCase,
    UpdateClientNameUseCase, load_merged_clients,
)
from app.application.credentials import (
    CredentialValidationError, DeleteCredentialUseCase, SaveCredentialUseCase,
    get_clients_assigned_to_credential, list_credentials_with_usage,
    load_credentials,
)
from app.application.system_config import SaveSystemConfigUseCase, SystemConfig, get_system_config
from app.readmodels.admin_stats import get_overview_stats

router = APIRouter(prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# === Request/Response models ===

class ClientRequest(BaseModel):
    phone_number: str
    client_name: str | None = None
    subscriptions: list[str] | str
    purchase_date: datetime
    duration_months: int = 1
    is_debtor: bool = False
    override_expiration: bool = False


class RenameRequest(BaseModel):
    phone_number: str
    name: str


class CredentialRequest(BaseModel):
    service: str
    email: str
    password: str
    published_at: datetime
    is_visible: bool = True


class CredentialWithUsageResponse(CredentialResponse):
    users_count: int


# === Clients ===

@router.get("/clients", response_model=list[ClientResponse])
def list_clients(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    clients = sorted(load_merged_clients(db), key=lambda c: c.normalized_phone)
    return [client_response(c, now) for c in clients]


@router.post("/clients")
def create_client(req: ClientRequest, db: Session = Depends(get_db)):
    try:
        client_id = SaveClientUseCase(db).execute(**req.model_dump())
    except ClientValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": client_id}


@router.put("/clients/{client_id}")
def update_client(client_id: int, req: ClientRequest, db: Session = Depends(get_db)):
    try:
        SaveClientUseCase(db).execute(client_id=client_id, **req.model_dump())
    except ClientValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": client_id}


@router.delete("/clients/{client_id}")
def delete_client(client_id: int, db: Session = Depends(get_db)):
    """Soft delete: the row stays, flagged as deleted"""
    try:
        SoftDeleteClientUseCase(db).execute(client_id)
    except ClientValidationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"status": "deleted"}


@router.post("/clients/{client_id}/toggle-override")
def toggle_override(client_id: int, db: Session = Depends(get_db)):
    try:
        value = ToggleOverrideUseCase(db).execute(client_id)
    except ClientValidationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"override_expiration": value}


@router.post("/clients/{client_id}/toggle-debtor")
def toggle_debtor(client_id: int, db: Session = Depends(get_db)):
    try:
        value = ToggleDebtorUseCase(db).execute(client_id)
    except ClientValidationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"is_debtor": value}


@router.post("/clients/rename")
def rename_client(req: RenameRequest, db: Session = Depends(get_db)):
    try:
        rows = UpdateClientNameUseCase(db).execute(req.phone_number, req.name)
    except ClientValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"updated_rows": rows}


@router.post("/clients/reset-passwords")
def reset_passwords(db: Session = Depends(get_db)):
    return {"updated_rows": ResetAllClientPasswordsUseCase(db).execute()}


@router.post("/clients/demo")
def create_demo_client(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return {"id": CreateDemoClientUseCase(db).execute(now)}


# === Credentials ===

@router.get("/credentials", response_model=list[CredentialWithUsageResponse])
def list_credentials(db: Session = Depends(get_db)):
    return [
        CredentialWithUsageResponse(**CredentialResponse.build(c).model_dump(), users_count=count)
        for c, count in list_credentials_with_usage(db)
    ]


@router.post("/credentials")
def create_credential(req: CredentialRequest, db: Session = Depends(get_db)):
    try:
        credential_id = SaveCredentialUseCase(db).execute(**req.model_dump())
    except CredentialValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": credential_id}


@router.put("/credentials/{credential_id}")
def update_credential(credential_id: int, req: CredentialRequest, db: Session = Depends(get_db)):
    try:
        SaveCredentialUseCase(db).execute(credential_id=credential_id, **req.model_dump())
    except CredentialValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": credential_id}


@router.delete("/credentials/{credential_id}")
def delete_credential(credential_id: int, db: Session = Depends(get_db)):
    try:
        DeleteCredentialUseCase(db).execute(credential_id)
    except CredentialValidationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"status": "deleted"}


@router.get("/credentials/{credential_id}/clients", response_model=list[ClientResponse])
def credential_clients(
    credential_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Who is currently assigned to this credential"""
    credentials = load_credentials(db)
    if not any(c.id == credential_id for c in credentials):
        raise HTTPException(status_code=404, detail="Credencial não encontrada")
    clients = get_clients_assigned_to_credential(
        db, credential_id, preloaded_credentials=credentials,
    )
    return [client_response(c, now) for c in clients]


# === System config / overview ===

@router.get("/system-config", response_model=SystemConfig, response_model_by_alias=True)
def read_system_config(db: Session = Depends(get_db)):
    return get_system_config(db)


@router.put("/system-config", response_model=SystemConfig, response_model_by_alias=True)
def write_system_config(
    config: SystemConfig,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    SaveSystemConfigUseCase(db).execute(config, now)
    return get_system_config(db)


@router.get("/overview")
def overview(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return get_overview_stats(db, now)
