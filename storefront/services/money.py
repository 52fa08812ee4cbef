"""
Money Utilities - Safe Decimal operations for prices and cart totals.

Avoids float precision issues by using Decimal throughout; floats only
appear at display or JSON boundaries.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal, None]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

# Precision for integer-displayed currencies
INTEGER_PRECISION = Decimal("1")

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "RUB": "₽",
}

# Currencies shown without minor units
INTEGER_CURRENCIES = {"RUB"}


def to_decimal(value: Number) -> Decimal:
    """
    Convert any value to Decimal safely.

    Returns Decimal("0") for None or values that cannot be parsed.
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    if isinstance(value, bool):
        return Decimal("0")

    try:
        if isinstance(value, float):
            # Go through str to keep the printed precision
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number, to_int: bool = False) -> Decimal:
    """Round monetary value to 2 places (or to an integer)."""
    decimal_value = to_decimal(value)
    precision = INTEGER_PRECISION if to_int else MONEY_PRECISION
    return decimal_value.quantize(precision, rounding=ROUND_HALF_UP)


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def format_money(value: Number, currency: str = "INR") -> str:
    """
    Format monetary value with currency symbol.

    Whole amounts drop the fractional part: format_money(1200) -> "₹1,200".
    """
    decimal_value = round_money(value)
    symbol = CURRENCY_SYMBOLS.get(currency, currency)

    if currency in INTEGER_CURRENCIES or decimal_value == decimal_value.to_integral_value():
        formatted = f"{int(round_money(decimal_value, to_int=True)):,}"
    else:
        formatted = f"{decimal_value:,.2f}"

    if currency in CURRENCY_SYMBOLS and currency not in INTEGER_CURRENCIES:
        return f"{symbol}{formatted}"
    return f"{formatted} {symbol}"
