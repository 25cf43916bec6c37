"""
Tests for phone normalization (client identity key)
"""
from app.domain.phone import is_same_client, normalize_phone, phone_variants


def test_normalize_strips_formatting():
    assert normalize_phone("+55 (11) 98765-4321") == "5511987654321"
    assert normalize_phone("11 98765 4321") == "11987654321"


def test_normalize_garbage_is_empty():
    assert normalize_phone("abc") == ""
    assert normalize_phone("") == ""
    assert normalize_phone(None) == ""


def test_normalize_is_idempotent():
    once = normalize_phone("(21) 9.8765-4321")
    assert normalize_phone(once) == once


def test_same_client_ignores_formatting():
    assert is_same_client("+55 11 98765-4321", "5511987654321")
    assert not is_same_client("5511987654321", "11987654321")


def test_empty_phone_never_matches():
    assert not is_same_client("", "")
    assert not is_same_client("---", "abc")


def test_variants_with_country_code():
    assert phone_variants("+55 (11) 98765-4321") == ["5511987654321", "11987654321"]


def test_variants_without_country_code():
    assert phone_variants("11987654321") == ["11987654321", "5511987654321"]


def test_variants_short_number_starting_with_55():
    """55 + 8 digits is a local number, not a country code"""
    assert phone_variants("5512345678") == ["5512345678", "555512345678"]


def test_variants_long_foreign_number_has_no_counterpart():
    assert phone_variants("351912345678") == ["351912345678"]


def test_variants_empty():
    assert phone_variants("n/a") == []
