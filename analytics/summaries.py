"""
Period summaries, monthly category totals and budget progress.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from analytics.ledger import read_field, snapshot
from analytics.money import ZERO, clamp_ratio, format_currency, format_money, round_percent, to_decimal
from analytics.periods import ALL_TIME, MONTH, PERIODS, in_bounds, period_bounds
from config import (
    Config,
    DEFAULT_QUICK_CATEGORIES,
    QUICK_CATEGORY_COUNT,
    TOP_CATEGORY_COUNT,
    UNCATEGORIZED_LABEL,
)

logger = logging.getLogger(__name__)


@dataclass
class PeriodSummary:
    debit_total: Decimal = ZERO
    credit_total: Decimal = ZERO

    @property
    def net(self):
        return self.credit_total - self.debit_total

    def add(self, entry):
        if entry.is_debit:
            self.debit_total += entry.amount
        else:
            self.credit_total += entry.amount

    def to_dict(self):
        return {
            'debitTotal': format_money(self.debit_total),
            'creditTotal': format_money(self.credit_total),
            'net': format_money(self.net),
        }


def summarize(transactions):
    """Debit/credit/net over every usable transaction, regardless of date."""
    summary = PeriodSummary()
    for entry in snapshot(transactions):
        summary.add(entry)
    return summary


def compute_period_summaries(transactions, now):
    """
    Summaries for today, this week, this month, this year and all time.

    Transactions without a usable timestamp only count towards ``all_time``.
    """
    entries = snapshot(transactions)
    bounds = {kind: period_bounds(kind, now) for kind in PERIODS if kind != ALL_TIME}
    summaries = {kind: PeriodSummary() for kind in PERIODS}

    for entry in entries:
        summaries[ALL_TIME].add(entry)
        if entry.occurred_at is None:
            continue
        for kind, (start, end) in bounds.items():
            if in_bounds(entry.occurred_at, start, end):
                summaries[kind].add(entry)
    return summaries


def compute_category_totals(transactions, now):
    """Map category -> debit total for the calendar month containing ``now``."""
    start, end = period_bounds(MONTH, now)
    totals = {}
    for entry in snapshot(transactions):
        if not entry.is_debit or not in_bounds(entry.occurred_at, start, end):
            continue
        category = entry.category or UNCATEGORIZED_LABEL
        totals[category] = totals.get(category, ZERO) + entry.amount
    return totals


def rank_categories(totals):
    # sorted() is stable, so ties keep insertion order
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def category_breakdown(totals):
    """Ranked rows with each category's share of the month's spend."""
    grand_total = sum(totals.values(), ZERO)
    rows = []
    for category, amount in rank_categories(totals):
        share = (amount / grand_total * 100) if grand_total > 0 else ZERO
        rows.append({
            'category': category,
            'amount': format_money(amount),
            'percent': f'{share:.1f}',
        })
    return rows


def top_categories(totals, n=TOP_CATEGORY_COUNT):
    return category_breakdown(totals)[:n]


def quick_categories(totals, n=QUICK_CATEGORY_COUNT):
    ranked = [category for category, _ in rank_categories(totals)[:n]]
    return ranked or list(DEFAULT_QUICK_CATEGORIES)


# ---------------------- Budgets ----------------------
@dataclass
class BudgetStatus:
    category: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    used_ratio: Decimal
    currency: str = Config.CURRENCY_SYMBOL

    @property
    def over_budget(self):
        return self.remaining < 0

    @property
    def used_percent(self):
        return round_percent(self.used_ratio)

    @property
    def status_text(self):
        if self.remaining >= 0:
            return f'{format_currency(self.remaining, self.currency)} left'
        return f'Over by {format_currency(-self.remaining, self.currency)}'

    def to_dict(self):
        return {
            'category': self.category,
            'limit': format_money(self.limit),
            'spent': format_money(self.spent),
            'remaining': format_money(self.remaining),
            'usedRatio': float(self.used_ratio),
            'usedPercent': self.used_percent,
            'overBudget': self.over_budget,
            'status': self.status_text,
        }


def compute_budget_statuses(budgets, category_totals, currency=Config.CURRENCY_SYMBOL):
    statuses = []
    for budget in budgets or ():
        category = read_field(budget, 'category') or ''
        limit = to_decimal(read_field(budget, 'monthly_limit', 'monthlyBudget'))
        if limit is None:
            logger.warning('Budget %r has a non-numeric limit; treating it as zero', category)
            limit = ZERO
        spent = category_totals.get(category, ZERO)
        if limit > 0:
            used_ratio = clamp_ratio(spent / limit)
        else:
            used_ratio = ZERO
        statuses.append(BudgetStatus(
            category=category,
            limit=limit,
            spent=spent,
            remaining=limit - spent,
            used_ratio=used_ratio,
            currency=currency,
        ))
    statuses.sort(key=lambda status: status.category.lower())
    return statuses
