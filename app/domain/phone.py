"""
Phone number normalization - identity key for clients.

Client identity is always compared on digits only, never on the display form.
Brazilian numbers are stored both with and without the 55 country code, so
store lookups probe both variants.
"""
import re

COUNTRY_CODE = "55"

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: str | None) -> str:
    """Strip everything but digits. Garbage → "" (never matches)."""
    if not raw:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def is_same_client(a: str | None, b: str | None) -> bool:
    na = normalize_phone(a)
    if not na:
        return False
    return na == normalize_phone(b)


def phone_variants(raw: str | None) -> list[str]:
    """
    Normalized digits plus the national/international counterpart.

    Example:
        >>> phone_variants("+55 (11) 98765-4321")
        ['5511987654321', '11987654321']
        >>> phone_variants("11987654321")
        ['11987654321', '5511987654321']
    """
    clean = normalize_phone(raw)
    if not clean:
        return []

    variants = [clean]
    if clean.startswith(COUNTRY_CODE) and len(clean) > 10:
        variants.append(clean[len(COUNTRY_CODE):])
    elif len(clean) <= 11:
        variants.append(f"{COUNTRY_CODE}{clean}")
    return variants
