"""
Credential assignment engine.

Deterministic mapping (roster, pool) -> credential per client. Nothing is
persisted: every read rebuilds the roster and the pool from current storage
and recomputes, so adding or removing clients/credentials needs no migration.

    roster   = clients subscribed to the service, sorted by normalized phone
    pool     = visible credentials of the service, oldest first
    index    = (roster_position // capacity) % len(pool)

Overflow wraps around: once capacity * len(pool) clients are placed, the next
client gets the first credential again.
"""
import math
from dataclasses import dataclass
from datetime import datetime

from app.domain.credential import Credential, index_of, list_visible
from app.domain.expiry import credential_age_alert
from app.domain.phone import normalize_phone
from app.domain.subscription import MergedClient

DEFAULT_CAPACITY = 4
UNBOUNDED_CAPACITY = 1000


@dataclass(frozen=True)
class CredentialAssignment:
    credential: Credential | None
    alert: str | None = None


def build_roster(clients: list[MergedClient], service: str) -> list[MergedClient]:
    """Subscribed clients sorted by digit string (lexicographic, not numeric)."""
    subscribed = [c for c in clients if c.has_service(service)]
    return sorted(subscribed, key=lambda c: c.normalized_phone)


def capacity_for(service: str, roster_size: int, pool_size: int) -> int:
    """Clients per credential before rotating to the next one."""
    name = service.lower()
    if "iqiyi" in name:
        # Spread the roster evenly over every available account
        if pool_size <= 0:
            return 1
        return max(math.ceil(roster_size / pool_size), 1)
    if "wetv" in name:
        return UNBOUNDED_CAPACITY
    return DEFAULT_CAPACITY


def credential_index(position: int, capacity: int, pool_size: int) -> int:
    return (position // capacity) % pool_size


def roster_position(roster: list[MergedClient], phone: str) -> int:
    target = normalize_phone(phone)
    if not target:
        return -1
    for i, client in enumerate(roster):
        if client.normalized_phone == target:
            return i
    return -1


def assign_credential(
    phone: str,
    service: str,
    clients: list[MergedClient],
    credentials: list[Credential],
    now: datetime,
) -> CredentialAssignment:
    """Credential (plus rotation warning) for one client and one service."""
    pool = list_visible(credentials, service)
    if not pool:
        return CredentialAssignment(None, None)

    roster = build_roster(clients, service)
    position = roster_position(roster, phone)
    if position == -1:
        # Legacy fallback: unknown client still sees the first account, no alert.
        # TODO: revisit with DESIGN.md open question 2 (roster miss) before switching to "no credential".
        return CredentialAssignment(pool[0], None)

    capacity = capacity_for(service, len(roster), len(pool))
    assigned = pool[credential_index(position, capacity, len(pool))]
    return CredentialAssignment(assigned, credential_age_alert(service, assigned.published_at, now))


def assigned_clients(
    credential_id: int,
    clients: list[MergedClient],
    credentials: list[Credential],
) -> list[MergedClient]:
    """Reverse lookup: roster members whose forward assignment is this credential."""
    target = next((c for c in credentials if c.id == credential_id), None)
    if target is None:
        return []

    service = target.service
    pool = list_visible(credentials, service)
    target_index = index_of(pool, credential_id)
    if target_index == -1:
        return []

    roster = build_roster(clients, service)
    capacity = capacity_for(service, len(roster), len(pool))
    return [
        client for i, client in enumerate(roster)
        if credential_index(i, capacity, len(pool)) == target_index
    ]


def credential_usage(
    clients: list[MergedClient],
    credentials: list[Credential],
) -> dict[int, int]:
    """Clients per credential id, for the admin list (one pass per service)."""
    usage: dict[int, int] = {c.id: 0 for c in credentials}
    for service in {c.service for c in credentials if c.is_visible and not c.is_system_row}:
        pool = list_visible(credentials, service)
        roster = build_roster(clients, service)
        capacity = capacity_for(service, len(roster), len(pool))
        counts = [0] * len(pool)
        for i in range(len(roster)):
            counts[credential_index(i, capacity, len(pool))] += 1
        for cred, count in zip(pool, counts):
            if cred.service == service:
                usage[cred.id] = count
    return usage
