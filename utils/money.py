# utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from utils.errors import InvalidAmount

Money = Decimal


def D(x) -> Money:
    if isinstance(x, Decimal):
        return x
    try:
        return Decimal(str(x if x is not None else "0"))
    except InvalidOperation:
        raise InvalidAmount(f"Not a monetary amount: {x!r}")


def round_money(x) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def non_negative(x, field: str) -> Money:
    # Convert and reject negatives in one go.
    value = D(x)
    if not value.is_finite() or value < 0:
        raise InvalidAmount(f"{field} must be a non-negative amount, got {x!r}")
    return value


def format_money(x) -> str:
    return f"¥{round_money(x):.2f}"
