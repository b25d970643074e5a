from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any


MONEY_QUANT = Decimal("0.01")
RATIO_QUANT = Decimal("0.000001")
ZERO = Decimal("0")


def quantize(value: Decimal | int | float | str, quant: Decimal) -> Decimal:
    """Round half-up to ``quant``, widening precision so large magnitudes keep every digit."""
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    if not amount.is_finite():
        return amount
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() - quant.as_tuple().exponent + 2)
        return amount.quantize(quant, rounding=ROUND_HALF_UP)


def money(value: Decimal | int | float | str) -> Decimal:
    return quantize(value, MONEY_QUANT)


def ratio(value: Decimal | int | float | str) -> Decimal:
    return quantize(value, RATIO_QUANT)


def to_decimal(value: Any, *, default: Decimal = ZERO) -> Decimal:
    """Coerce a loosely typed amount; anything unparseable or non-finite is ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def safe_divide(numerator: Decimal, denominator: Decimal, *, default: Decimal = ZERO) -> Decimal:
    if denominator == 0:
        return default
    return numerator / denominator
