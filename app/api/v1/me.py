"""
Client dashboard API: status, assigned credentials, watch-list, game progress
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_current_client, get_db, get_now
from app.api.v1.schemas import (
    ClientResponse, CredentialResponse, DoramaModel, ServiceResponse, client_response,
)
from app.application.clients import get_game_progress, save_game_progress
from app.application.credentials import get_assigned_credential
from app.application.system_config import SystemConfig, get_system_config
from app.application.watchlist import (
    AddDoramaUseCase, RemoveDoramaUseCase, UpdateDoramaUseCase,
    WatchListValidationError, get_user_doramas,
)
from app.domain.expiry import account_status
from app.domain.subscription import MergedClient


router = APIRouter(prefix="/api/v1", tags=["me"])

NO_CREDENTIAL_MESSAGE = "Credencial ainda não disponível. Fale com o suporte."
BLOCKED_MESSAGE = "Acesso bloqueado. Renove sua assinatura para ver a conta."
BLOCKED_ALERT = "blocked"


# === Request/Response models ===

class AssignedCredentialResponse(BaseModel):
    service: str
    credential: CredentialResponse | None
    alert: str | None
    message: str | None = None


class WatchListsResponse(BaseModel):
    watching: list[DoramaModel]
    favorites: list[DoramaModel]
    completed: list[DoramaModel]


class SyncWatchListsRequest(BaseModel):
    """Device copy of the lists; later local progress wins"""
    watching: list[DoramaModel] = []
    favorites: list[DoramaModel] = []
    completed: list[DoramaModel] = []


class AddDoramaRequest(BaseModel):
    list_type: str  # watching / favorites / completed
    dorama: DoramaModel


# === Endpoints ===

@router.get("/me", response_model=ClientResponse)
def me(
    client: MergedClient = Depends(get_current_client),
    now: datetime = Depends(get_now),
):
    return client_response(client, now)


@router.get("/me/services", response_model=list[ServiceResponse])
def my_services(
    client: MergedClient = Depends(get_current_client),
    now: datetime = Depends(get_now),
):
    return client_response(client, now).services


@router.get("/me/credentials/{service}", response_model=AssignedCredentialResponse)
def my_credential(
    service: str,
    client: MergedClient = Depends(get_current_client),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Shared login assigned to the current client for this service"""
    if not client.has_service(service):
        raise HTTPException(status_code=404, detail="Serviço não contratado")

    # Shared logins are only shown to accounts with access (override included)
    if not account_status(client, now).is_active:
        return AssignedCredentialResponse(
            service=service, credential=None, alert=BLOCKED_ALERT, message=BLOCKED_MESSAGE,
        )

    assignment = get_assigned_credential(db, client.phone_number, service, now)
    if assignment.credential is None:
        return AssignedCredentialResponse(
            service=service, credential=None, alert=None, message=NO_CREDENTIAL_MESSAGE,
        )
    return AssignedCredentialResponse(
        service=service,
        credential=CredentialResponse.build(assignment.credential),
        alert=assignment.alert,
    )


def _lists_response(lists) -> WatchListsResponse:
    return WatchListsResponse(
        watching=[DoramaModel.build(d) for d in lists.watching],
        favorites=[DoramaModel.build(d) for d in lists.favorites],
        completed=[DoramaModel.build(d) for d in lists.completed],
    )


@router.get("/me/doramas", response_model=WatchListsResponse)
def my_doramas(
    client: MergedClient = Depends(get_current_client),
    db: Session = Depends(get_db),
):
    return _lists_response(get_user_doramas(db, client.phone_number))


@router.post("/me/doramas/sync", response_model=WatchListsResponse)
def sync_doramas(
    req: SyncWatchListsRequest,
    client: MergedClient = Depends(get_current_client),
    db: Session = Depends(get_db),
):
    """Stored lists reconciled with the device copy"""
    prior = [d.to_domain() for d in (*req.watching, *req.favorites, *req.completed)]
    return _lists_response(get_user_doramas(db, client.phone_number, prior))


@router.post("/me/doramas", response_model=DoramaModel)
def add_dorama(
    req: AddDoramaRequest,
    client: MergedClient = Depends(get_current_client),
    db: Session = Depends(get_db),
):
    try:
        saved = AddDoramaUseCase(db).execute(client.phone_number, req.list_type, req.dorama.to_domain())
    except WatchListValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return DoramaModel.build(saved)


@router.put("/me/doramas/{dorama_id}")
def update_dorama(
    dorama_id: str,
    req: DoramaModel,
    client: MergedClient = Depends(get_current_client),
    db: Session = Depends(get_db),
):
    dorama = req.to_domain()
    if dorama.id != dorama_id:
        raise HTTPException(status_code=400, detail="Id divergente")
    if not UpdateDoramaUseCase(db).execute(client.phone_number, dorama):
        raise HTTPException(status_code=404, detail="Dorama não encontrado")
    return {"status": "updated"}


@router.delete("/me/doramas/{dorama_id}")
def remove_dorama(
    dorama_id: str,
    client: MergedClient = Depends(get_current_client),
    db: Session = Depends(get_db),
):
    if not RemoveDoramaUseCase(db).execute(client.phone_number, dorama_id):
        raise HTTPException(status_code=404, detail="Dorama não encontrado")
    return {"status": "removed"}


@router.get("/me/game-progress")
def my_game_progress(
    client: MergedClient = Depends(get_current_client),
    db: Session = Depends(get_db),
):
    return get_game_progress(db, client.phone_number)


@router.post("/me/game-progress/{game_id}")
def update_game_progress(
    game_id: str,
    data: dict,
    client: MergedClient = Depends(get_current_client),
    db: Session = Depends(get_db),
):
    if not save_game_progress(db, client.phone_number, game_id, data):
        raise HTTPException(status_code=404, detail="Cliente não encontrado")
    return {"status": "saved"}


@router.get("/system-config", response_model=SystemConfig, response_model_by_alias=True)
def system_config(db: Session = Depends(get_db)):
    """Public banner + service status (no login needed)"""
    return get_system_config(db)
