"""
Tests for the daily credential rotation check
"""
import logging
from datetime import timedelta

from app.application.rotation_check import check_credential_rotation, credentials_due_for_rotation
from app.application.credentials import load_credentials


def test_only_visible_old_credentials_are_due(db_session, add_credential, now):
    add_credential("Viki Pass", "old-viki@mail.com", published_at=now - timedelta(days=15))
    add_credential("Viki Pass", "new-viki@mail.com", published_at=now - timedelta(days=3))
    add_credential("Kocowa+", "hidden@mail.com", published_at=now - timedelta(days=40), is_visible=False)
    add_credential("IQIYI", "iqiyi@mail.com", published_at=now - timedelta(days=90))

    due = credentials_due_for_rotation(load_credentials(db_session), now)

    assert [d.credential.email for d in due] == ["old-viki@mail.com"]
    assert due[0].age_days == 15


def test_check_logs_each_due_credential(db_session, add_credential, now, caplog):
    add_credential("Viki Pass", "v@mail.com", published_at=now - timedelta(days=13))
    add_credential("Kocowa+", "k@mail.com", published_at=now - timedelta(days=29))

    with caplog.at_level(logging.WARNING, logger="app.application.rotation_check"):
        count = check_credential_rotation(db_session, now)

    assert count == 2
    assert "v@mail.com" in caplog.text
    assert "k@mail.com" in caplog.text


def test_check_with_nothing_due(db_session, add_credential, now):
    add_credential("Viki Pass", "v@mail.com", published_at=now - timedelta(days=1))
    assert check_credential_rotation(db_session, now) == 0
