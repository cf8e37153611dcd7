"""
Fixed-point helpers.

Every threshold comparison in the keeper happens on raw integers in the scale
of the value being compared:

- RAY (27 decimals): Aave interest rates, per-strategy interest thresholds
- 8 decimals: health factor (same scale as USD price feeds)
- 18 decimals: equity per share
"""

from decimal import Decimal, getcontext
from typing import Union

getcontext().prec = 80

RAY_DECIMALS = 27
RAY = 10 ** RAY_DECIMALS

HEALTH_FACTOR_DECIMALS = 8
HEALTH_FACTOR_SCALE = 10 ** HEALTH_FACTOR_DECIMALS

EPS_DECIMALS = 18
EPS_SCALE = 10 ** EPS_DECIMALS

MAX_UINT256 = 2 ** 256 - 1


def D(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x))


def parse_units(value: Union[str, int, float, Decimal], decimals: int) -> int:
    """
    Convert a human decimal ("1.1", "3.0") to a raw fixed-point integer.

    Rejects values with more precision than the target scale instead of
    silently truncating them.
    """
    scaled = D(value) * (Decimal(10) ** decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value} has more than {decimals} decimals")
    return int(scaled)


def format_units(raw: int, decimals: int) -> str:
    """Inverse of parse_units, as a plain decimal string."""
    if decimals <= 0:
        return str(raw)
    s = format(D(raw) / (Decimal(10) ** decimals), "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s

