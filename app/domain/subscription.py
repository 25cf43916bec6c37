"""
Subscription merger - one logical client out of many raw `clients` rows.

Renewals create new rows instead of updating old ones, so a single phone
number may own several records. Merge rules:
  - services        = union over non-deleted records
  - per-service     = (purchase_date, duration_months) of the record with the
                      LATEST computed expiry for that service
  - is_debtor       = any record blocks
  - override        = any record unblocks
  - name            = last non-empty client_name
  - primary record  = single latest expiry overall (fallback dates)

Month arithmetic clamps to the last day of the target month:
2024-01-31 + 1 month = 2024-02-29.
"""
import calendar
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from app.domain.phone import normalize_phone
from app.utils.dates import parse_timestamp

SERVICE_DELIMITER = "+"
DEFAULT_CLIENT_NAME = "Dorameira"


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, n: int) -> date:
    """Add n months; day-of-month overflow clamps to the month's last day."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, last_day_of_month(year, month))
    return d.replace(year=year, month=month, day=day)


def compute_expiry(purchase_date: datetime | None, duration_months: int) -> datetime | None:
    if purchase_date is None:
        return None
    return add_months(purchase_date, duration_months)


def _clean_service(raw: str) -> str:
    return raw.strip().strip('"').strip()


def parse_services(value: Any) -> list[str]:
    """
    Normalize the `subscriptions` column.

    Stored either as a real list or as a "+"-joined string
    ('Viki Pass+IQIYI', '"WeTV"'). Unknown shapes give [], never raises.
    """
    if isinstance(value, str):
        items = value.split(SERVICE_DELIMITER) if SERVICE_DELIMITER in value else [value]
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
    else:
        return []

    services: list[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        cleaned = _clean_service(item)
        if cleaned and cleaned not in services:
            services.append(cleaned)
    return services


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class RawClientRecord:
    """One row of the client store, already parsed at the storage boundary."""
    id: int | None
    phone_number: str
    client_name: str | None
    services: tuple[str, ...]
    purchase_date: datetime | None
    duration_months: int
    is_debtor: bool = False
    override_expiration: bool = False
    deleted: bool = False
    has_password: bool = False

    @property
    def expiry(self) -> datetime | None:
        return compute_expiry(self.purchase_date, self.duration_months)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "RawClientRecord":
        """
        Build from a store row (dict with the `clients` column names).

        Tolerates missing keys and malformed values.
        """
        return cls(
            id=row.get("id"),
            phone_number=str(row.get("phone_number") or ""),
            client_name=row.get("client_name"),
            services=tuple(parse_services(row.get("subscriptions"))),
            purchase_date=parse_timestamp(row.get("purchase_date")),
            duration_months=_to_int(row.get("duration_months")),
            is_debtor=bool(row.get("is_debtor")),
            override_expiration=bool(row.get("override_expiration")),
            deleted=bool(row.get("deleted")),
            has_password=bool((row.get("client_password") or "").strip()),
        )


@dataclass(frozen=True)
class SubscriptionDetail:
    purchase_date: datetime | None
    duration_months: int

    @property
    def expiry(self) -> datetime | None:
        return compute_expiry(self.purchase_date, self.duration_months)


@dataclass
class MergedClient:
    """Logical client: all non-deleted records of one phone number."""
    id: int | None
    phone_number: str
    name: str
    services: list[str]
    subscription_details: dict[str, SubscriptionDetail]
    purchase_date: datetime | None
    duration_months: int
    is_debtor: bool
    override_expiration: bool
    record_ids: list[int] = field(default_factory=list)

    @property
    def normalized_phone(self) -> str:
        return normalize_phone(self.phone_number)

    @property
    def expiry(self) -> datetime | None:
        return compute_expiry(self.purchase_date, self.duration_months)

    def detail_for(self, service: str) -> SubscriptionDetail:
        """Per-service dates; falls back to the primary record."""
        detail = self.subscription_details.get(service)
        if detail is not None:
            return detail
        return SubscriptionDetail(self.purchase_date, self.duration_months)

    def has_service(self, service: str) -> bool:
        """Case-insensitive substring match, same rule as the roster."""
        needle = service.lower()
        return any(needle in s.lower() for s in self.services)


def _is_later(candidate: datetime | None, current: datetime | None) -> bool:
    """Strictly later; unknown expiry is older than any known one."""
    if candidate is None:
        return False
    if current is None:
        return True
    return candidate > current


def merge_client_records(
    records: list[RawClientRecord],
    default_name: str = DEFAULT_CLIENT_NAME,
) -> MergedClient | None:
    """Merge all records of one phone number. None if nothing survives."""
    active = [r for r in records if not r.deleted]
    if not active:
        return None

    name = default_name
    services: list[str] = []
    details: dict[str, SubscriptionDetail] = {}
    is_debtor = False
    override = False

    primary = active[0]
    primary_expiry = primary.expiry

    for record in active:
        if record.client_name and record.client_name.strip():
            name = record.client_name.strip()

        expiry = record.expiry
        for service in record.services:
            if service not in services:
                services.append(service)
            stored = details.get(service)
            if stored is None or _is_later(expiry, stored.expiry):
                details[service] = SubscriptionDetail(record.purchase_date, record.duration_months)

        is_debtor = is_debtor or record.is_debtor
        override = override or record.override_expiration

        if _is_later(expiry, primary_expiry):
            primary = record
            primary_expiry = expiry

    return MergedClient(
        id=primary.id,
        phone_number=primary.phone_number,
        name=name,
        services=services,
        subscription_details=details,
        purchase_date=primary.purchase_date,
        duration_months=primary.duration_months,
        is_debtor=is_debtor,
        override_expiration=override,
        record_ids=[r.id for r in active if r.id is not None],
    )


def group_by_phone(
    records: list[RawClientRecord],
    default_name: str = DEFAULT_CLIENT_NAME,
) -> list[MergedClient]:
    """Merge a whole table: one MergedClient per normalized phone."""
    groups: dict[str, list[RawClientRecord]] = {}
    for record in records:
        key = normalize_phone(record.phone_number)
        if not key:
            continue
        groups.setdefault(key, []).append(record)

    merged = []
    for group in groups.values():
        client = merge_client_records(group, default_name)
        if client is not None:
            merged.append(client)
    return merged
