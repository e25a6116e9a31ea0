"""
CSV and JSON import/export of a user's ledger.

The JSON backup keeps the version 1 layout: ``user``, ``savingGoal``,
``categoryBudgets`` and ``transactions`` with camelCase keys.  Imports are
lenient: rows that cannot be used are skipped, never fatal.
"""
import csv
import io
import logging
from datetime import datetime

from analytics.ledger import KINDS, parse_timestamp
from analytics.money import format_money, parse_amount

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1
CSV_HEADER = ['id', 'amount', 'type', 'category', 'createdAt', 'note']
CSV_REQUIRED = {'amount', 'type', 'category'}


def _as_list(value):
    return value if isinstance(value, list) else []


def clean_note(value):
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def clean_row(row, default_time=None):
    """Turn one imported record into Transaction column values, or None to skip it."""
    if not isinstance(row, dict):
        return None
    amount = parse_amount(row.get('amount'))
    kind = row.get('type')
    kind = kind.strip().lower() if isinstance(kind, str) else None
    category = row.get('category').strip() if isinstance(row.get('category'), str) else ''
    if amount is None or kind not in KINDS or not category:
        return None
    occurred_at = parse_timestamp(row.get('createdAt') or row.get('date'))
    if occurred_at is None:
        occurred_at = default_time or datetime.now()
    return {
        'amount': amount,
        'kind': kind,
        'category': category,
        'occurred_at': occurred_at,
        'note': clean_note(row.get('note')),
    }


# ---------------------- CSV ----------------------
def transactions_to_csv(transactions):
    si = io.StringIO()
    writer = csv.writer(si, lineterminator='\r\n')
    writer.writerow(CSV_HEADER)
    for t in transactions:
        note = (t.note or '').replace('\r\n', ' ').replace('\n', ' ')
        writer.writerow([t.id, format_money(t.amount), t.kind, t.category, t.occurred_at.isoformat(), note])
    return si.getvalue()


def parse_csv_upload(text):
    """Returns (rows, skipped). Raises ValueError if the header is missing required columns."""
    reader = csv.DictReader(io.StringIO(text))
    headers = {h.strip() for h in (reader.fieldnames or []) if h}
    if not CSV_REQUIRED.issubset(headers):
        raise ValueError('CSV must have headers: ' + ', '.join(sorted(CSV_REQUIRED)))
    rows, skipped = [], 0
    for raw in reader:
        row = clean_row({(k or '').strip(): v for k, v in raw.items()})
        if row is None:
            skipped += 1
            continue
        rows.append(row)
    if skipped:
        logger.info('Skipped %d unusable CSV rows', skipped)
    return rows, skipped


# ---------------------- JSON ----------------------
def build_backup(user, saving_goal, budgets, transactions):
    return {
        'version': BACKUP_VERSION,
        'exportedAt': datetime.now().isoformat(),
        'user': {
            'username': user.username,
            'createdAt': user.created_at.isoformat() if user.created_at else None,
            'avatar': user.avatar or None,
        },
        'savingGoal': {'monthlyGoal': format_money(saving_goal)} if saving_goal is not None else None,
        'categoryBudgets': [b.to_dict() for b in budgets],
        'transactions': [t.to_dict() for t in transactions],
    }


def parse_backup(data):
    """Clean a decoded backup document into (saving_goal, budgets, transactions, avatar)."""
    if not isinstance(data, dict):
        raise ValueError('Invalid backup format.')

    saving_goal = None
    goal_doc = data.get('savingGoal')
    if isinstance(goal_doc, dict):
        saving_goal = parse_amount(goal_doc.get('monthlyGoal'), allow_zero=True)

    budgets = []
    for b in _as_list(data.get('categoryBudgets')):
        if not isinstance(b, dict) or not isinstance(b.get('category'), str):
            continue
        category = b['category'].strip()
        limit = parse_amount(b.get('monthlyBudget'))
        if category and limit is not None:
            budgets.append((category, limit))

    now = datetime.now()
    transactions = []
    raw_transactions = _as_list(data.get('transactions'))
    for t in raw_transactions:
        row = clean_row(t, default_time=now)
        if row is not None:
            transactions.append(row)
    if len(transactions) != len(raw_transactions):
        logger.info('Skipped %d unusable backup transactions', len(raw_transactions) - len(transactions))

    user_doc = data.get('user')
    avatar = user_doc.get('avatar') if isinstance(user_doc, dict) and isinstance(user_doc.get('avatar'), str) else None
    return saving_goal, budgets, transactions, avatar
