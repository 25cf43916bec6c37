"""
Tests for the credential store and assignment queries
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from app.application.credentials import (
    CredentialValidationError, DeleteCredentialUseCase, SaveCredentialUseCase,
    get_assigned_credential, get_clients_assigned_to_credential,
    get_users_count_for_credential, list_credentials_with_usage, load_credentials,
)
from app.domain.credential import SYSTEM_CONFIG_SERVICE
from app.infrastructure.db.models import AppCredentialModel

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
JAN_15 = datetime(2024, 1, 15, tzinfo=timezone.utc)


class TestSaveCredential:
    def test_create_and_update(self, db_session):
        use_case = SaveCredentialUseCase(db_session)
        cred_id = use_case.execute("IQIYI", " a@mail.com ", "pw", "2024-01-01")

        use_case.execute("IQIYI", "b@mail.com", "pw2", JAN_15, is_visible=False, credential_id=cred_id)

        row = db_session.query(AppCredentialModel).filter(AppCredentialModel.id == cred_id).one()
        assert row.email == "b@mail.com"
        assert row.password == "pw2"
        assert row.is_visible is False

    def test_reserved_service_rejected(self, db_session):
        with pytest.raises(CredentialValidationError, match="reservado"):
            SaveCredentialUseCase(db_session).execute(SYSTEM_CONFIG_SERVICE, "x", "y", JAN_1)

    @pytest.mark.parametrize("service,email,password,published,message", [
        (" ", "a@mail.com", "pw", JAN_1, "Serviço"),
        ("IQIYI", "", "pw", JAN_1, "Email"),
        ("IQIYI", "a@mail.com", " ", JAN_1, "Senha"),
        ("IQIYI", "a@mail.com", "pw", "ontem", "Data"),
    ])
    def test_validation(self, db_session, service, email, password, published, message):
        with pytest.raises(CredentialValidationError, match=message):
            SaveCredentialUseCase(db_session).execute(service, email, password, published)

    def test_update_unknown(self, db_session):
        with pytest.raises(CredentialValidationError, match="não encontrada"):
            SaveCredentialUseCase(db_session).execute("IQIYI", "a", "b", JAN_1, credential_id=5)


def test_delete_credential(db_session, add_credential):
    row = add_credential("IQIYI", "a@mail.com")
    DeleteCredentialUseCase(db_session).execute(row.id)
    assert db_session.query(AppCredentialModel).count() == 0


def test_delete_system_row_is_not_allowed(db_session, add_credential):
    row = add_credential(SYSTEM_CONFIG_SERVICE, "{}", is_visible=False)
    with pytest.raises(CredentialValidationError):
        DeleteCredentialUseCase(db_session).execute(row.id)


def test_load_credentials_skips_system_row(db_session, add_credential):
    add_credential(SYSTEM_CONFIG_SERVICE, "{}", is_visible=False)
    add_credential("IQIYI", "a@mail.com")

    assert [c.service for c in load_credentials(db_session)] == ["IQIYI"]


def test_load_credentials_store_failure():
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))
    assert load_credentials(db) == []


# ============================================================================
# Assignment queries
# ============================================================================


@pytest.fixture
def iqiyi_setup(add_client, add_credential):
    """Six IQIYI clients, two credentials: three clients each"""
    phones = [f"55119000000{i}" for i in range(6)]
    for phone in phones:
        add_client(phone, ["IQIYI"])
    cred_b = add_credential("IQIYI", "b@mail.com", published_at=JAN_15)
    cred_a = add_credential("IQIYI", "a@mail.com", published_at=JAN_1)
    return phones, cred_a, cred_b


def test_assigned_credential_follows_roster_order(db_session, iqiyi_setup, now):
    phones, cred_a, cred_b = iqiyi_setup

    got = [get_assigned_credential(db_session, p, "IQIYI", now).credential.id for p in phones]

    assert got == [cred_a.id] * 3 + [cred_b.id] * 3


def test_reverse_lookup_and_usage(db_session, iqiyi_setup):
    phones, cred_a, cred_b = iqiyi_setup

    users = get_clients_assigned_to_credential(db_session, cred_b.id)

    assert [c.normalized_phone for c in users] == phones[3:]
    assert get_users_count_for_credential(db_session, cred_a.id) == 3
    usage = {c.id: count for c, count in list_credentials_with_usage(db_session)}
    assert usage == {cred_a.id: 3, cred_b.id: 3}


def test_deleting_credential_reassigns_on_next_read(db_session, iqiyi_setup, now):
    phones, cred_a, cred_b = iqiyi_setup

    DeleteCredentialUseCase(db_session).execute(cred_a.id)

    got = {get_assigned_credential(db_session, p, "IQIYI", now).credential.id for p in phones}
    assert got == {cred_b.id}


def test_viki_alert_is_attached(db_session, add_client, add_credential, now):
    add_client("5511900000000", ["Viki Pass"])
    add_credential("Viki Pass", "v@mail.com", published_at=now - timedelta(days=14))

    result = get_assigned_credential(db_session, "5511900000000", "Viki Pass", now)

    assert result.credential.email == "v@mail.com"
    assert "14 dias" in result.alert


def test_no_credential_when_store_is_down(now):
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))

    result = get_assigned_credential(db, "5511900000000", "IQIYI", now)

    assert result.credential is None
    assert result.alert is None
