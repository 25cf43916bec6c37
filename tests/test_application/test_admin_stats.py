"""
Tests for the admin overview readmodel
"""
from datetime import datetime, timedelta

from app.readmodels.admin_stats import get_overview_stats


def test_overview(db_session, add_client, add_credential, now):
    # active, 16 days left
    add_client("5511900000001", ["IQIYI"], datetime(2024, 6, 1), 1)
    # expires in 3 days
    add_client("5511900000002", ["IQIYI", "Viki Pass"], datetime(2024, 5, 18, 12), 1)
    # debtor
    add_client("5511900000003", ["Viki Pass"], datetime(2024, 6, 1), 1, is_debtor=True)
    # expired long ago, but overridden
    add_client("5511900000004", ["WeTV"], datetime(2023, 1, 1), 1, override_expiration=True)
    # removed
    add_client("5511900000005", ["WeTV"], datetime(2024, 6, 1), 1, deleted=True)

    add_credential("IQIYI", "i@mail.com")
    add_credential("Viki Pass", "v@mail.com", published_at=now - timedelta(days=20))
    add_credential("Viki Pass", "hidden@mail.com", is_visible=False)

    stats = get_overview_stats(db_session, now)

    assert stats["total_clients"] == 4
    assert stats["active_clients"] == 3
    assert stats["debtors"] == 1
    assert stats["expiring_soon"] == 1
    assert stats["states"] == {"active": 2, "expiring_soon": 1, "blocked": 1}
    assert stats["clients_per_service"] == {"IQIYI": 2, "Viki Pass": 2, "WeTV": 1}
    assert stats["total_credentials"] == 3
    assert stats["visible_credentials"] == 2
    assert [d["service"] for d in stats["rotation_due"]] == ["Viki Pass"]
    assert stats["rotation_due"][0]["age_days"] == 20


def test_overview_empty(db_session, now):
    stats = get_overview_stats(db_session, now)
    assert stats["total_clients"] == 0
    assert stats["rotation_due"] == []
