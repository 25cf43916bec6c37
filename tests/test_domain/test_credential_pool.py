"""
Tests for the credential pool projection
"""
from datetime import datetime, timezone

from app.domain.credential import (
    SYSTEM_CONFIG_SERVICE, UNKNOWN_SERVICE, Credential, index_of, list_visible,
    without_system_rows,
)


def _cred(id, service, day, is_visible=True):
    return Credential(
        id=id,
        service=service,
        email=f"acc{id}@mail.com",
        password="x",
        published_at=datetime(2024, 1, day, tzinfo=timezone.utc),
        is_visible=is_visible,
    )


def test_list_visible_filters_and_sorts_oldest_first():
    creds = [
        _cred(1, "Viki Pass", 20),
        _cred(2, "IQIYI", 5),
        _cred(3, "viki pass", 2),
        _cred(4, "Viki Pass", 1, is_visible=False),
    ]

    pool = list_visible(creds, "VIKI")

    assert [c.id for c in pool] == [3, 1]


def test_list_visible_ties_keep_storage_order():
    creds = [_cred(5, "WeTV", 3), _cred(2, "WeTV", 3), _cred(9, "WeTV", 1)]
    assert [c.id for c in list_visible(creds, "wetv")] == [9, 5, 2]


def test_list_visible_never_returns_system_row():
    creds = [_cred(1, SYSTEM_CONFIG_SERVICE, 1), _cred(2, "IQIYI", 2)]
    assert [c.id for c in list_visible(creds, "")] == [2]
    assert [c.id for c in without_system_rows(creds)] == [2]


def test_list_visible_unknown_service_is_empty():
    assert list_visible([_cred(1, "IQIYI", 1)], "Netflix") == []


def test_index_of():
    pool = [_cred(7, "IQIYI", 1), _cred(3, "IQIYI", 2)]
    assert index_of(pool, 3) == 1
    assert index_of(pool, 99) == -1


def test_from_mapping_defaults():
    cred = Credential.from_mapping({
        "id": 1,
        "service": None,
        "email": None,
        "password": None,
        "published_at": None,
        "is_visible": None,
    })
    assert cred.service == UNKNOWN_SERVICE
    assert cred.email == ""
    assert cred.is_visible is True
    assert cred.published_at == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_from_mapping_naive_timestamp_is_utc():
    cred = Credential.from_mapping({
        "id": 1, "service": "IQIYI", "published_at": datetime(2024, 1, 1, 9, 0),
    })
    assert cred.published_at == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
