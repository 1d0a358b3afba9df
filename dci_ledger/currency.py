"""
Monetary Amount Module

Money is held as an integer count of minor units (cents) so that repeated
addition and subtraction never drift. Conversion to and from Decimal major
units happens only at the boundary. NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from dataclasses import dataclass
from typing import Union
import re

from .exceptions import InvalidAmountError


MINOR_UNIT_DIGITS = 2
MINOR_UNITS_PER_MAJOR = 10 ** MINOR_UNIT_DIGITS
QUANTUM = Decimal(1).scaleb(-MINOR_UNIT_DIGITS)  # Decimal('0.01')


def _round_minor_units(value: Decimal) -> int:
    """Round a Decimal count of minor units to an int (ROUND_HALF_UP)"""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Money:
    """
    Immutable money value in a single unit.

    Addition and subtraction are exact. Multiplication and division by a
    factor round half up to the nearest minor unit.
    """
    minor_units: int

    def __post_init__(self):
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise TypeError("Money must be built from an integer count of minor units")

    @classmethod
    def zero(cls) -> 'Money':
        return cls(0)

    @classmethod
    def from_decimal(cls, value: Union[Decimal, str, int]) -> 'Money':
        """Build Money from major units, rounding to the minor unit"""
        if not isinstance(value, Decimal):
            try:
                value = Decimal(str(value))
            except InvalidOperation:
                raise InvalidAmountError(value, "not a decimal number")
        if not value.is_finite():
            raise InvalidAmountError(value, "not a finite number")
        return cls(_round_minor_units(value * MINOR_UNITS_PER_MAJOR))

    @classmethod
    def parse(cls, value: str) -> 'Money':
        """Build Money from a user supplied decimal string"""
        return cls.from_decimal(decimal_from_string(value))

    @classmethod
    def coerce(cls, value: Union['Money', Decimal, str, int]) -> 'Money':
        """Accept any boundary representation of an amount"""
        if isinstance(value, Money):
            return value
        if isinstance(value, float):
            raise InvalidAmountError(value, "float amounts are not accepted, use a string or Decimal")
        if isinstance(value, str):
            return cls.parse(value)
        return cls.from_decimal(value)

    @property
    def amount(self) -> Decimal:
        """Value in major units"""
        return (Decimal(self.minor_units) / MINOR_UNITS_PER_MAJOR).quantize(QUANTUM)

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.minor_units + other.minor_units)

    def __sub__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.minor_units - other.minor_units)

    def __mul__(self, multiplier: Decimal) -> 'Money':
        if not isinstance(multiplier, Decimal):
            multiplier = Decimal(str(multiplier))
        return Money(_round_minor_units(Decimal(self.minor_units) * multiplier))

    def __truediv__(self, divisor: Decimal) -> 'Money':
        if not isinstance(divisor, Decimal):
            divisor = Decimal(str(divisor))
        return Money(_round_minor_units(Decimal(self.minor_units) / divisor))

    def __neg__(self) -> 'Money':
        return Money(-self.minor_units)

    def __abs__(self) -> 'Money':
        return Money(abs(self.minor_units))

    def __lt__(self, other: 'Money') -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.minor_units < other.minor_units

    def __le__(self, other: 'Money') -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.minor_units <= other.minor_units

    def __gt__(self, other: 'Money') -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.minor_units > other.minor_units

    def __ge__(self, other: 'Money') -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.minor_units >= other.minor_units

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.minor_units == 0

    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.minor_units > 0

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.minor_units < 0

    def __str__(self) -> str:
        return str(self.amount)

    def to_string(self) -> str:
        """Format for display"""
        return f"{self.amount:,.{MINOR_UNIT_DIGITS}f}"


CURRENCY_SYMBOLS = "$€£¥"

# 1,234,567.89
_GROUPED_AMOUNT = re.compile(r'^\d{1,3}(?:,\d{3})+(?:\.\d+)?$')
# 1234.56, 1234, .5
_PLAIN_AMOUNT = re.compile(r'^(?:\d+(?:\.\d*)?|\.\d+)$')
# 12,50 (comma as decimal separator)
_DECIMAL_COMMA_AMOUNT = re.compile(r'^\d+,\d{1,2}$')


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Accepts an optional sign, one leading currency symbol, well-formed
    thousands separators and a comma decimal separator. Anything else is
    refused rather than stripped.

    Args:
        value: String representation of number

    Returns:
        Decimal value

    Raises:
        InvalidAmountError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise InvalidAmountError(value, "must be a non-empty string")

    text = value.strip()
    sign = ''
    if text and text[0] in '+-':
        sign, text = text[0], text[1:].lstrip()
    if text and text[0] in CURRENCY_SYMBOLS:
        text = text[1:].lstrip()
        if not sign and text and text[0] in '+-':
            sign, text = text[0], text[1:]

    if _GROUPED_AMOUNT.match(text):
        text = text.replace(',', '')
    elif _DECIMAL_COMMA_AMOUNT.match(text):
        text = text.replace(',', '.')
    elif not _PLAIN_AMOUNT.match(text):
        raise InvalidAmountError(value, "not a decimal number")

    return Decimal(sign + text)
