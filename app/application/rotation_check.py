"""
Daily credential rotation check.

Clients already see the age warning next to the credential; this job logs the
same condition for the admin so the login is replaced before it expires.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.application.credentials import load_credentials
from app.domain.credential import Credential
from app.domain.expiry import credential_age_alert, credential_age_days
from app.utils.dates import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RotationDue:
    credential: Credential
    age_days: int
    message: str


def credentials_due_for_rotation(credentials: list[Credential], now: datetime) -> list[RotationDue]:
    due = []
    for cred in credentials:
        if not cred.is_visible:
            continue
        message = credential_age_alert(cred.service, cred.published_at, now)
        if message is not None:
            due.append(RotationDue(cred, credential_age_days(cred.published_at, now), message))
    return due


def check_credential_rotation(db: Session, now: datetime | None = None) -> int:
    """Log every visible credential past its rotation threshold. Returns count."""
    if now is None:
        now = utc_now()

    due = credentials_due_for_rotation(load_credentials(db), now)
    for item in due:
        logger.warning(
            "Credential id=%d (%s, %s) is %d days old: rotate it",
            item.credential.id, item.credential.service, item.credential.email, item.age_days,
        )
    if not due:
        logger.info("Credential rotation check: nothing to rotate")
    return len(due)
