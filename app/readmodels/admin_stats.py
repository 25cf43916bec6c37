"""
Admin statistics readmodel - overview numbers for the admin panel.

All functions accept a SQLAlchemy Session and return plain dicts/lists.
`now` is passed explicitly.
"""
from collections import Counter
from datetime import datetime

from sqlalchemy.orm import Session

from app.application.clients import load_merged_clients
from app.application.credentials import load_credentials
from app.application.rotation_check import credentials_due_for_rotation
from app.config import get_settings
from app.domain.expiry import account_status, days_left
from app.domain.subscription import MergedClient


def _count_expiring(clients: list[MergedClient], now: datetime, window_days: int) -> int:
    count = 0
    for client in clients:
        if client.override_expiration or client.expiry is None:
            continue
        left = days_left(client.expiry, now)
        if 0 <= left <= window_days:
            count += 1
    return count


def get_overview_stats(db: Session, now: datetime) -> dict:
    """Aggregate stats for /api/v1/admin/overview."""
    clients = load_merged_clients(db)
    credentials = load_credentials(db)

    states = Counter(account_status(c, now).state for c in clients)
    services = Counter(s for c in clients for s in c.services)

    return {
        "total_clients": len(clients),
        "active_clients": sum(1 for c in clients if not c.is_debtor),
        "debtors": sum(1 for c in clients if c.is_debtor),
        "expiring_soon": _count_expiring(clients, now, get_settings().EXPIRING_SOON_DAYS),
        "states": dict(states),
        "clients_per_service": dict(services),
        "total_credentials": len(credentials),
        "visible_credentials": sum(1 for c in credentials if c.is_visible),
        "rotation_due": [
            {
                "credential_id": d.credential.id,
                "service": d.credential.service,
                "age_days": d.age_days,
            }
            for d in credentials_due_for_rotation(credentials, now)
        ],
    }
