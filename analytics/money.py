from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from config import MAX_AMOUNT

ZERO = Decimal('0')
CENT = Decimal('0.01')
ONE = Decimal('1')


def to_decimal(value):
    """Convert a stored or submitted amount to Decimal, or None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1 instead of 0.1000000000000000055...
        amount = Decimal(str(value))
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    if not amount.is_finite():
        return None
    return amount


def quantize(amount):
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # too many digits for the context; leave it as is
        return amount


def parse_amount(value, allow_zero=False):
    """
    Quantized amount ready for a ``Numeric(12, 2)`` column, or None when
    ``value`` is not a number in ``[0, MAX_AMOUNT]``.  Amounts that round to
    zero are rejected unless ``allow_zero`` is set.
    """
    amount = to_decimal(value)
    if amount is None or amount < ZERO or amount > MAX_AMOUNT:
        return None
    amount = quantize(amount)
    if amount == ZERO and not allow_zero:
        return None
    return amount


def format_money(amount):
    return str(quantize(amount if amount is not None else ZERO))


def format_currency(amount, symbol):
    return f'{symbol} {format_money(amount)}'


def clamp_ratio(ratio):
    return min(max(ratio, ZERO), ONE)


def round_percent(ratio):
    """Whole percent for a 0..1 ratio, rounding halves up."""
    return int((ratio * 100).quantize(ONE, rounding=ROUND_HALF_UP))
