"""
Response models shared by the client and admin routers
"""
from datetime import datetime

from pydantic import BaseModel

from app.domain.credential import Credential
from app.domain.expiry import AccessStatus, account_status, service_status
from app.domain.subscription import MergedClient
from app.domain.watchlist import Dorama


class AccessStatusResponse(BaseModel):
    state: str
    label: str
    is_active: bool
    expiry: datetime | None
    days_left: int | None

    @classmethod
    def build(cls, s: AccessStatus) -> "AccessStatusResponse":
        return cls(
            state=s.state,
            label=s.label,
            is_active=s.is_active,
            expiry=s.expiry,
            days_left=s.days_left,
        )


class ServiceResponse(BaseModel):
    name: str
    purchase_date: datetime | None
    duration_months: int
    status: AccessStatusResponse


class ClientResponse(BaseModel):
    id: int | None
    phone_number: str
    name: str
    services: list[ServiceResponse]
    is_debtor: bool
    override_expiration: bool
    status: AccessStatusResponse


def client_response(client: MergedClient, now: datetime) -> ClientResponse:
    services = []
    for name in client.services:
        detail = client.detail_for(name)
        services.append(ServiceResponse(
            name=name,
            purchase_date=detail.purchase_date,
            duration_months=detail.duration_months,
            status=AccessStatusResponse.build(service_status(client, name, now)),
        ))
    return ClientResponse(
        id=client.id,
        phone_number=client.phone_number,
        name=client.name,
        services=services,
        is_debtor=client.is_debtor,
        override_expiration=client.override_expiration,
        status=AccessStatusResponse.build(account_status(client, now)),
    )


class CredentialResponse(BaseModel):
    id: int
    service: str
    email: str
    password: str
    published_at: datetime
    is_visible: bool

    @classmethod
    def build(cls, c: Credential) -> "CredentialResponse":
        return cls(
            id=c.id,
            service=c.service,
            email=c.email,
            password=c.password,
            published_at=c.published_at,
            is_visible=c.is_visible,
        )


class DoramaModel(BaseModel):
    """Watch-list item, both directions (the device sends its copy back)"""
    id: str
    title: str
    genre: str = "Dorama"
    thumbnail: str | None = None
    status: str = "Plan to Watch"
    episodes_watched: int = 1
    total_episodes: int = 16
    season: int = 1
    rating: int = 0

    def to_domain(self) -> Dorama:
        return Dorama(**self.model_dump())

    @classmethod
    def build(cls, d: Dorama) -> "DoramaModel":
        return cls(
            id=d.id,
            title=d.title,
            genre=d.genre,
            thumbnail=d.thumbnail,
            status=d.status,
            episodes_watched=d.episodes_watched,
            total_episodes=d.total_episodes,
            season=d.season,
            rating=d.rating,
        )
