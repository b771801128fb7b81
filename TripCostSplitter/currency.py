"""
Currency Module

Normalizes expense amounts into a trip's base currency.

Rates map a foreign currency code to how many units of that currency equal
one unit of the base currency, e.g. {"THB": 38.5} means 1 EUR = 38.5 THB.

Functions:
    to_decimal: Convert a number to Decimal without float artifacts.
    round_money: Round a Decimal to cents and return a float.
    convert_to_base_currency: Convert an amount into the base currency.
    conversion_factor: Ratio between a converted amount and its original.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert an int, float, str or Decimal into a Decimal."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> float:
    """
    Round a Decimal to 2 decimal places and convert to float.

    Args:
        value: Decimal value to round.

    Returns:
        float: Rounded value as float.
    """
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def convert_to_base_currency(
    amount,
    from_currency: str,
    to_currency: str,
    rates: Optional[dict] = None
) -> Decimal:
    """
    Convert an amount into the base currency.

    Args:
        amount: Amount in from_currency.
        from_currency: Currency code the amount is recorded in.
        to_currency: Base currency code.
        rates: Units of each foreign currency per one base unit.

    Returns:
        Decimal: Converted amount. When no usable rate exists (missing, zero,
        negative or not finite) the original amount is returned unconverted.
    """
    value = to_decimal(amount)
    if from_currency == to_currency:
        return value

    rate = (rates or {}).get(from_currency)
    rate = to_decimal(rate) if rate is not None else None
    if rate is None or not rate.is_finite() or rate <= 0:
        logger.debug(
            "No usable rate for %s -> %s, counting %s at face value",
            from_currency, to_currency, value
        )
        return value

    return value / rate


def conversion_factor(
    amount,
    from_currency: str,
    to_currency: str,
    rates: Optional[dict] = None
) -> Decimal:
    """Return converted/original for an amount, or 1 when the amount is zero."""
    value = to_decimal(amount)
    if value == 0:
        return Decimal("1")
    return convert_to_base_currency(value, from_currency, to_currency, rates) / value
