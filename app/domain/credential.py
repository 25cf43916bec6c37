"""
Credential pool - shared logins registered per streaming service.

The pool for a service is: visible credentials whose `service` contains the
requested name (case-insensitive), sorted by published_at ascending.
Ties keep storage (id) order.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from app.utils.dates import parse_timestamp

# Reserved row in app_credentials used as a key/value slot for banner config
SYSTEM_CONFIG_SERVICE = "SYSTEM_CONFIG"

UNKNOWN_SERVICE = "Serviço Desconhecido"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Credential:
    id: int
    service: str
    email: str
    password: str
    published_at: datetime
    is_visible: bool = True

    @property
    def is_system_row(self) -> bool:
        return self.service == SYSTEM_CONFIG_SERVICE

    def matches(self, service: str) -> bool:
        return service.lower() in self.service.lower()

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "Credential":
        published = parse_timestamp(row.get("published_at")) or _EPOCH
        is_visible = row.get("is_visible")
        return cls(
            id=row["id"],
            service=row.get("service") or UNKNOWN_SERVICE,
            email=row.get("email") or "",
            password=row.get("password") or "",
            published_at=published,
            is_visible=True if is_visible is None else bool(is_visible),
        )


def without_system_rows(credentials: list[Credential]) -> list[Credential]:
    return [c for c in credentials if not c.is_system_row]


def list_visible(credentials: list[Credential], service: str) -> list[Credential]:
    """Pool for `service`: visible, matching, oldest first."""
    pool = [
        c for c in credentials
        if c.is_visible and not c.is_system_row and c.matches(service)
    ]
    return sorted(pool, key=lambda c: c.published_at)


def index_of(pool: list[Credential], credential_id: int) -> int:
    for i, cred in enumerate(pool):
        if cred.id == credential_id:
            return i
    return -1
