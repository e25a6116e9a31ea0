from datetime import timedelta

from analytics.ledger import snapshot
from analytics.money import ZERO, format_money
from analytics.periods import start_of_day
from config import DEBIT_CHART_DAYS, NET_TREND_DAYS


def _daily_buckets(transactions, now, days):
    """[debit, credit] totals per day for the last ``days`` days, oldest first."""
    first_day = start_of_day(now).date() - timedelta(days=days - 1)
    buckets = {first_day + timedelta(days=offset): [ZERO, ZERO] for offset in range(days)}
    for entry in snapshot(transactions):
        if entry.occurred_at is None:
            continue
        bucket = buckets.get(entry.occurred_at.date())
        if bucket is None:
            continue
        bucket[0 if entry.is_debit else 1] += entry.amount
    return buckets


def daily_debit_totals(transactions, now, days=DEBIT_CHART_DAYS):
    buckets = _daily_buckets(transactions, now, days)
    return [{'day': day.isoformat(), 'total': format_money(debit)}
            for day, (debit, _) in buckets.items()]


def daily_net_totals(transactions, now, days=NET_TREND_DAYS):
    buckets = _daily_buckets(transactions, now, days)
    return [{'day': day.isoformat(), 'net': format_money(credit - debit)}
            for day, (debit, credit) in buckets.items()]
