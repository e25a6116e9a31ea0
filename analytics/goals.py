from dataclasses import dataclass
from decimal import Decimal

from analytics.money import ZERO, clamp_ratio, format_currency, format_money, round_percent, to_decimal
from config import Config

NOT_SET = 'not_set'
ZERO_GOAL = 'zero_goal'
NO_SAVINGS = 'no_savings'
REACHED = 'reached'
IN_PROGRESS = 'in_progress'


@dataclass
class GoalProgress:
    state: str
    message: str
    target: Decimal | None = None
    current_net: Decimal = ZERO
    ratio: Decimal = ZERO
    percent: int = 0
    remaining: Decimal | None = None
    excess: Decimal | None = None

    def to_dict(self):
        return {
            'state': self.state,
            'message': self.message,
            'target': format_money(self.target) if self.target is not None else None,
            'currentNet': format_money(self.current_net),
            'ratio': float(self.ratio),
            'percent': self.percent,
            'remaining': format_money(self.remaining) if self.remaining is not None else None,
            'excess': format_money(self.excess) if self.excess is not None else None,
        }


def compute_saving_goal_progress(target, current_month_net, currency=Config.CURRENCY_SYMBOL):
    """
    Progress of this month's net (credit - debit) towards the monthly saving goal.

    The checks run in a fixed order: unset goal, zero goal and non-positive
    net all return before any division happens.
    """
    net = to_decimal(current_month_net)
    if net is None:
        net = ZERO
    goal = to_decimal(target)

    if goal is None:
        return GoalProgress(NOT_SET, 'Not set. Set a goal to see your progress.', current_net=net)
    if goal == 0:
        return GoalProgress(ZERO_GOAL, 'Goal is zero. Any positive saving counts.', target=goal, current_net=net)
    if net <= 0:
        return GoalProgress(NO_SAVINGS, "No savings yet this month.", target=goal, current_net=net)

    ratio = clamp_ratio(net / goal)
    percent = round_percent(ratio)
    if net >= goal:
        excess = net - goal
        return GoalProgress(
            REACHED,
            f'Goal reached! You are {format_currency(excess, currency)} above your goal.',
            target=goal, current_net=net, ratio=ratio, percent=percent, excess=excess,
        )
    remaining = goal - net
    return GoalProgress(
        IN_PROGRESS,
        f'{format_currency(remaining, currency)} more to reach your goal. ({percent}% done)',
        target=goal, current_net=net, ratio=ratio, percent=percent, remaining=remaining,
    )
