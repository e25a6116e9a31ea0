from dataclasses import dataclass
from datetime import datetime

from analytics.ledger import day_index, snapshot
from config import ACTIVITY_WINDOW_DAYS


@dataclass
class ActivityStats:
    """Activity over the dated ledger; ``last_activity_id`` names the transaction behind ``last_activity``."""
    last_activity: datetime | None = None
    last_activity_id: int | None = None
    active_days_last_30: int = 0
    current_streak: int = 0
    best_streak: int = 0

    def to_dict(self):
        return {
            'lastActivity': self.last_activity.isoformat() if self.last_activity else None,
            'lastActivityId': self.last_activity_id,
            'activeDaysLast30': self.active_days_last_30,
            'currentStreak': self.current_streak,
            'bestStreak': self.best_streak,
        }


def _best_run(days):
    best = current = 1
    for previous, day in zip(days, days[1:]):
        if day == previous + 1:
            current += 1
            best = max(best, current)
        else:
            current = 1
    return best


def compute_activity_stats(transactions, now, window_days=ACTIVITY_WINDOW_DAYS):
    stats = ActivityStats()
    active_days = set()
    for entry in snapshot(transactions):
        if entry.occurred_at is None:
            continue
        active_days.add(day_index(entry.occurred_at))
        if stats.last_activity is None or entry.occurred_at > stats.last_activity:
            stats.last_activity = entry.occurred_at
            stats.last_activity_id = entry.id

    if not active_days:
        return stats

    today = day_index(now)
    cutoff = today - (window_days - 1)
    stats.active_days_last_30 = sum(1 for day in active_days if cutoff <= day <= today)
    stats.best_streak = _best_run(sorted(active_days))

    if today in active_days:
        streak = 0
        day = today
        while day in active_days:
            streak += 1
            day -= 1
        stats.current_streak = streak
    return stats
