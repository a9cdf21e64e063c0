"""
Fixed-point helpers for Sandglass market math.
All amounts and prices are Decimals evaluated in a single shared context so
that truncation points reproduce the on-chain integer results exactly.
"""
from decimal import Decimal, Context, ROUND_HALF_UP, ROUND_FLOOR, localcontext
from functools import wraps
from typing import Callable, Union

# Significant digits carried by every intermediate result
PRECISION = 20

MARKET_CONTEXT = Context(prec=PRECISION, rounding=ROUND_HALF_UP)

ZERO = Decimal(0)
ONE = Decimal(1)

Number = Union[Decimal, int, str, float]


def fixed_point(func: Callable) -> Callable:
    """Run the wrapped computation inside MARKET_CONTEXT."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        with localcontext(MARKET_CONTEXT):
            return func(*args, **kwargs)
    return wrapper


def to_decimal(value: Number) -> Decimal:
    """
    Convert a raw on-chain integer, string or oracle float to Decimal.

    Floats go through their shortest repr so 0.1 stays 0.1.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_down(value: Decimal) -> Decimal:
    """Floor to an integer, as u64 math on-chain does."""
    return value.to_integral_value(rounding=ROUND_FLOOR)


@fixed_point
def truncate(value: Decimal, price_base: Decimal) -> Decimal:
    """floor(value * price_base) / price_base"""
    return round_down(value * price_base) / price_base


@fixed_point
def dpow(base: Decimal, exponent: Decimal) -> Decimal:
    """
    Decimal power supporting non-integer exponents.

    Args:
        base: Non-negative base
        exponent: Any real exponent

    Returns:
        base ** exponent rounded to PRECISION digits
    """
    if exponent == ZERO:
        return ONE
    if base == ZERO and exponent > ZERO:
        return ZERO
    return base ** exponent


@fixed_point
def scale_down(raw_amount: Number, decimals: Number) -> Decimal:
    """Convert a raw token amount into human units."""
    return to_decimal(raw_amount) / (Decimal(10) ** to_decimal(decimals))
