"""
Immutable snapshot of a user's ledger.

Every aggregation in this package starts by calling ``snapshot`` on whatever
it was handed (ORM rows, dicts decoded from a backup, or entries from an
earlier snapshot).  Records whose amount or kind cannot be used are dropped
with a warning; records whose timestamp cannot be parsed are kept with
``occurred_at=None`` so the all-time totals still see them.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from analytics.money import ZERO, to_decimal
from config import MAX_AMOUNT

logger = logging.getLogger(__name__)

DEBIT = 'debit'
CREDIT = 'credit'
KINDS = (DEBIT, CREDIT)


@dataclass(frozen=True)
class LedgerEntry:
    id: int | None
    amount: Decimal
    kind: str
    category: str
    occurred_at: datetime | None
    note: str | None = None
    source: object = field(default=None, compare=False, repr=False)

    @property
    def is_debit(self):
        return self.kind == DEBIT

    @property
    def signed_amount(self):
        return -self.amount if self.is_debit else self.amount


def read_field(record, name, *aliases):
    for key in (name, *aliases):
        if isinstance(record, Mapping):
            if key in record:
                return record[key]
        elif hasattr(record, key):
            return getattr(record, key)
    return None


def parse_timestamp(value):
    """Return a naive local datetime, or None if ``value`` is not a usable timestamp."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def to_entry(record):
    if isinstance(record, LedgerEntry):
        return record
    amount = to_decimal(read_field(record, 'amount'))
    kind = read_field(record, 'kind', 'type')
    if amount is None or not ZERO < amount <= MAX_AMOUNT or kind not in KINDS:
        logger.warning('Skipping malformed ledger record %r (amount=%r, kind=%r)',
                       read_field(record, 'id'), read_field(record, 'amount'), kind)
        return None
    raw_ts = read_field(record, 'occurred_at', 'createdAt')
    occurred_at = parse_timestamp(raw_ts)
    if occurred_at is None:
        logger.warning('Ledger record %r has unusable timestamp %r; it only counts towards all-time totals',
                       read_field(record, 'id'), raw_ts)
    category = read_field(record, 'category')
    note = read_field(record, 'note')
    return LedgerEntry(
        id=read_field(record, 'id'),
        amount=amount,
        kind=kind,
        category=category.strip() if isinstance(category, str) else '',
        occurred_at=occurred_at,
        note=note if isinstance(note, str) else None,
        source=record,
    )


def snapshot(transactions):
    """Freeze ``transactions`` into a tuple of LedgerEntry, dropping unusable records."""
    entries = []
    for record in transactions or ():
        entry = to_entry(record)
        if entry is not None:
            entries.append(entry)
    return tuple(entries)


def day_index(moment):
    """Calendar-day index of a local timestamp (consecutive days differ by one)."""
    return moment.date().toordinal()
