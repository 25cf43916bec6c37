"""
Expiry & alert evaluator.

Two independent concerns:
  1. Client access state for a subscription (derived, never stored):
       blocked (debtor) / active / expiring_soon / critical / expired
     override_expiration collapses everything back to active.
  2. Credential age alert: shared logins of some services are rotated on a
     fixed cycle, warn before the cycle ends.

`now` is always passed in explicitly.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from app.domain.subscription import MergedClient, compute_expiry
from app.utils.dates import as_utc

STATE_ACTIVE = "active"
STATE_EXPIRING_SOON = "expiring_soon"
STATE_CRITICAL = "critical"
STATE_EXPIRED = "expired"
STATE_BLOCKED = "blocked"

CRITICAL_DAYS = 2
EXPIRING_SOON_DAYS = 5

STATE_LABELS: dict[str, str] = {
    STATE_ACTIVE: "Status Ativo",
    STATE_EXPIRING_SOON: "Renovação Próxima",
    STATE_CRITICAL: "Vencimento Crítico",
    STATE_EXPIRED: "Plano Vencido",
    STATE_BLOCKED: "Conta Pendente",
}

_DAY = timedelta(days=1)


@dataclass(frozen=True)
class RotationRule:
    service_pattern: str
    alert_after_days: int
    message: str


# Viki: 14-day cycle, warn one day before. Kocowa: 30-day cycle.
ROTATION_RULES: tuple[RotationRule, ...] = (
    RotationRule("viki", 13, "⚠️ Esta conta vence amanhã ou já venceu (Ciclo de 14 dias)."),
    RotationRule("kocowa", 28, "⚠️ Esta conta vence em breve (Ciclo de 30 dias)."),
)


@dataclass(frozen=True)
class AccessStatus:
    state: str
    expiry: datetime | None
    days_left: int | None

    @property
    def is_active(self) -> bool:
        return self.state in (STATE_ACTIVE, STATE_EXPIRING_SOON, STATE_CRITICAL)

    @property
    def label(self) -> str:
        return STATE_LABELS[self.state]


def days_left(expiry: datetime, now: datetime) -> int:
    """ceil((expiry - now) / 1 day); negative once expired."""
    return math.ceil((as_utc(expiry) - as_utc(now)) / _DAY)


def evaluate_access(
    purchase_date: datetime | None,
    duration_months: int,
    now: datetime,
    is_debtor: bool = False,
    override_expiration: bool = False,
) -> AccessStatus:
    expiry = compute_expiry(purchase_date, duration_months)
    left = days_left(expiry, now) if expiry is not None else None

    if override_expiration:
        return AccessStatus(STATE_ACTIVE, expiry, left)
    if is_debtor:
        return AccessStatus(STATE_BLOCKED, expiry, left)
    if expiry is None or as_utc(now) > as_utc(expiry):
        return AccessStatus(STATE_EXPIRED, expiry, left)
    if left <= CRITICAL_DAYS:
        return AccessStatus(STATE_CRITICAL, expiry, left)
    if left <= EXPIRING_SOON_DAYS:
        return AccessStatus(STATE_EXPIRING_SOON, expiry, left)
    return AccessStatus(STATE_ACTIVE, expiry, left)


def account_status(client: MergedClient, now: datetime) -> AccessStatus:
    """Account-level status from the primary (latest expiry) record."""
    return evaluate_access(
        client.purchase_date,
        client.duration_months,
        now,
        is_debtor=client.is_debtor,
        override_expiration=client.override_expiration,
    )


def service_status(client: MergedClient, service: str, now: datetime) -> AccessStatus:
    detail = client.detail_for(service)
    return evaluate_access(
        detail.purchase_date,
        detail.duration_months,
        now,
        is_debtor=client.is_debtor,
        override_expiration=client.override_expiration,
    )


def credential_age_days(published_at: datetime, now: datetime) -> int:
    return math.floor((as_utc(now) - as_utc(published_at)) / _DAY)


def rotation_rule_for(service: str) -> RotationRule | None:
    name = service.lower()
    for rule in ROTATION_RULES:
        if rule.service_pattern in name:
            return rule
    return None


def credential_age_alert(service: str, published_at: datetime, now: datetime) -> str | None:
    """Warning for credentials close to their rotation date, else None."""
    rule = rotation_rule_for(service)
    if rule is None:
        return None
    if credential_age_days(published_at, now) >= rule.alert_after_days:
        return rule.message
    return None
