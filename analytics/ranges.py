"""
User-selected date ranges for the transaction list.

A range only narrows what the list (and its own summary) shows; period
summaries, category totals, budgets, goals and streaks always see the full
ledger.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from analytics.ledger import KINDS, parse_timestamp, read_field
from analytics.periods import MONTH, WEEK, YEAR, end_of_period, in_bounds, start_of_period
from analytics.summaries import summarize

PRESET_NONE = 'none'
PRESET_CUSTOM = 'custom'
PRESETS = ('today', 'this_week', 'this_month', 'this_year', 'last_30', PRESET_CUSTOM, PRESET_NONE)


@dataclass(frozen=True)
class DateRange:
    start_day: date | None = None
    end_day: date | None = None

    @property
    def is_unbounded(self):
        return self.start_day is None and self.end_day is None

    def bounds(self):
        start = datetime.combine(self.start_day, datetime.min.time()) if self.start_day else None
        end = None
        if self.end_day:
            # inclusive of the whole end day
            end = datetime.combine(self.end_day, datetime.min.time()) + timedelta(days=1)
        return start, end

    def contains(self, moment):
        start, end = self.bounds()
        return in_bounds(moment, start, end)

    def to_dict(self):
        return {
            'from': self.start_day.isoformat() if self.start_day else None,
            'to': self.end_day.isoformat() if self.end_day else None,
        }


def parse_day(value):
    """Parse a YYYY-MM-DD string; blank means no bound."""
    if value is None or isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    return datetime.strptime(value, '%Y-%m-%d').date()


def preset_range(name, now, start_day=None, end_day=None):
    today = now.date()
    if name == PRESET_NONE:
        return DateRange()
    if name == PRESET_CUSTOM:
        return DateRange(start_day, end_day)
    if name == 'today':
        return DateRange(today, today)
    if name == 'last_30':
        return DateRange(today - timedelta(days=29), today)
    period = {'this_week': WEEK, 'this_month': MONTH, 'this_year': YEAR}.get(name)
    if period is None:
        raise ValueError(f'Unknown range preset: {name!r}')
    start = start_of_period(period, now).date()
    end = end_of_period(period, now).date() - timedelta(days=1)
    return DateRange(start, end)


def _timestamp(record):
    return parse_timestamp(read_field(record, 'occurred_at', 'createdAt'))


def filter_by_range(transactions, date_range):
    transactions = list(transactions or ())
    if date_range is None or date_range.is_unbounded:
        return transactions
    return [tx for tx in transactions if date_range.contains(_timestamp(tx))]


def range_summary(transactions, date_range):
    """PeriodSummary of the range, or None when no range is selected."""
    if date_range is None or date_range.is_unbounded:
        return None
    return summarize(filter_by_range(transactions, date_range))


def filter_transactions(transactions, kind='all', category_query='', date_range=None):
    """The transaction list as shown to the user: filtered, newest first."""
    if kind not in ('all', *KINDS):
        raise ValueError(f'Unknown transaction type filter: {kind!r}')
    needle = (category_query or '').strip().lower()
    rows = []
    for tx in filter_by_range(transactions, date_range):
        if kind != 'all' and read_field(tx, 'kind', 'type') != kind:
            continue
        if needle and needle not in (read_field(tx, 'category') or '').lower():
            continue
        rows.append(tx)
    rows.sort(key=lambda tx: _timestamp(tx) or datetime.min, reverse=True)
    return rows
