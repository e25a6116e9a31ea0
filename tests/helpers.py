from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

# Wednesday
NOW = datetime(2024, 5, 15, 12, 30)

_ids = iter(range(1, 100000))


def tx(amount, kind, category, when, note=None):
    """A ledger row shaped like the ORM model."""
    return SimpleNamespace(id=next(_ids), amount=Decimal(str(amount)), kind=kind,
                           category=category, occurred_at=when, note=note)


def backup_tx(amount, kind, category, created_at):
    """A ledger row shaped like a decoded JSON backup entry."""
    return {'id': next(_ids), 'amount': amount, 'type': kind, 'category': category, 'createdAt': created_at}
