"""
Tests for the banner/service-status slot in app_credentials
"""
import json
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from app.application.credentials import load_credentials
from app.application.system_config import SaveSystemConfigUseCase, SystemConfig, get_system_config
from app.domain.credential import SYSTEM_CONFIG_SERVICE
from app.infrastructure.db.models import AppCredentialModel


def test_defaults_when_row_missing(db_session):
    config = get_system_config(db_session)
    assert config.banner_active is False
    assert config.service_status["Viki Pass"] == "ok"


def test_save_writes_camel_case_json_into_hidden_row(db_session, now):
    config = SystemConfig(
        banner_text="Manutenção às 22h",
        banner_type="warning",
        banner_active=True,
        service_status={"IQIYI": "issues"},
    )

    SaveSystemConfigUseCase(db_session).execute(config, now)

    row = db_session.query(AppCredentialModel).one()
    assert row.service == SYSTEM_CONFIG_SERVICE
    assert row.is_visible is False
    stored = json.loads(row.email)
    assert stored["bannerText"] == "Manutenção às 22h"
    assert stored["serviceStatus"] == {"IQIYI": "issues"}
    assert get_system_config(db_session) == config
    assert load_credentials(db_session) == []


def test_save_twice_reuses_row(db_session, now):
    SaveSystemConfigUseCase(db_session).execute(SystemConfig.default(), now)
    SaveSystemConfigUseCase(db_session).execute(SystemConfig(banner_text="Oi"), now)

    assert db_session.query(AppCredentialModel).count() == 1
    assert get_system_config(db_session).banner_text == "Oi"


def test_reads_rows_written_by_previous_storefront(db_session, add_credential):
    add_credential(
        SYSTEM_CONFIG_SERVICE,
        '{"bannerText": "Promo", "bannerType": "success", "bannerActive": true, '
        '"serviceStatus": {"WeTV": "down"}}',
        is_visible=False,
    )

    config = get_system_config(db_session)

    assert config.banner_type == "success"
    assert config.service_status == {"WeTV": "down"}


def test_corrupt_row_falls_back_to_defaults(db_session, add_credential):
    add_credential(SYSTEM_CONFIG_SERVICE, '{"bannerType": "purple"', is_visible=False)
    assert get_system_config(db_session) == SystemConfig.default()


def test_store_failure_falls_back_to_defaults():
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))
    assert get_system_config(db) == SystemConfig.default()
