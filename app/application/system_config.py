"""
Global banner + per-service status.

Stored out-of-band as JSON in the `email` column of the reserved
app_credentials row (service='SYSTEM_CONFIG', is_visible=false), so the
credential listing must always filter that row out.
"""
import logging
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.credential import SYSTEM_CONFIG_SERVICE
from app.infrastructure.db.models import AppCredentialModel
from app.utils.dates import utc_now

logger = logging.getLogger(__name__)

ServiceState = Literal["ok", "issues", "down"]


def _default_service_status() -> dict[str, ServiceState]:
    return {"Viki Pass": "ok", "Kocowa+": "ok", "IQIYI": "ok", "WeTV": "ok"}


class SystemConfig(BaseModel):
    """Kept in camelCase on disk: rows written by the previous storefront use it."""
    model_config = ConfigDict(populate_by_name=True)

    banner_text: str = Field("", alias="bannerText")
    banner_type: Literal["info", "warning", "error", "success"] = Field("info", alias="bannerType")
    banner_active: bool = Field(False, alias="bannerActive")
    service_status: dict[str, ServiceState] = Field(default_factory=dict, alias="serviceStatus")

    @classmethod
    def default(cls) -> "SystemConfig":
        return cls(service_status=_default_service_status())


def _config_row(db: Session) -> AppCredentialModel | None:
    return db.query(AppCredentialModel).filter(
        AppCredentialModel.service == SYSTEM_CONFIG_SERVICE,
    ).order_by(AppCredentialModel.id).first()


def get_system_config(db: Session) -> SystemConfig:
    """Stored config, or defaults when missing/corrupt/unreachable."""
    try:
        row = _config_row(db)
    except SQLAlchemyError:
        logger.warning("System config unavailable, using defaults", exc_info=True)
        db.rollback()
        return SystemConfig.default()

    if row is None or not row.email:
        return SystemConfig.default()
    try:
        return SystemConfig.model_validate_json(row.email)
    except ValidationError:
        logger.warning("Corrupt SYSTEM_CONFIG row id=%d, using defaults", row.id)
        return SystemConfig.default()


class SaveSystemConfigUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, config: SystemConfig, now: datetime | None = None) -> None:
        row = _config_row(self.db)
        if row is None:
            row = AppCredentialModel(service=SYSTEM_CONFIG_SERVICE)
            self.db.add(row)
        row.email = config.model_dump_json(by_alias=True)
        row.password = "CONFIG_IGNORED"
        row.is_visible = False
        row.published_at = now or utc_now()
        self.db.commit()
