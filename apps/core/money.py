# core/money.py

"""
Fixed-point money.

Amounts are held as integer minor units (cents). Every operation that can
produce a fraction of a cent (tax rates, division by installment counts)
is computed exactly with Fraction and rounded once, half-up, to the cent.
Decimal values only appear at the boundaries: model fields and JSON.
"""

from decimal import Decimal, InvalidOperation
from fractions import Fraction
from functools import total_ordering


def _round_half_up(value):
    """Round a Fraction to the nearest integer, ties away from zero"""
    numerator, denominator = value.numerator, value.denominator
    if numerator >= 0:
        return (2 * numerator + denominator) // (2 * denominator)
    return -((-2 * numerator + denominator) // (2 * denominator))


def _to_fraction(value):
    """Exact Fraction for Decimal/int/str/Fraction input. Floats are refused."""
    if isinstance(value, Money):
        return Fraction(value.cents, 100)
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Unsupported money input type: {type(value).__name__}")
    if isinstance(value, (int, Fraction)):
        return Fraction(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Invalid amount: {value}")
        return Fraction(value)
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}")
        if not parsed.is_finite():
            raise ValueError(f"Invalid amount: {value!r}")
        return Fraction(parsed)
    raise TypeError(f"Unsupported money input type: {type(value).__name__}")


def _rate_factor(rate):
    """1 + rate as an exact Fraction"""
    return 1 + _to_fraction(rate)


@total_ordering
class Money:
    """
    Currency amount in minor units.

    Example:
        >>> Money.round('100').multiply_by_rate(Decimal('0.13'))
        Money('113.00')
    """

    __slots__ = ('cents',)

    def __init__(self, cents=0):
        if isinstance(cents, bool) or not isinstance(cents, int):
            raise TypeError("Money is built from integer cents; use Money.round() for decimals")
        object.__setattr__(self, 'cents', cents)

    def __setattr__(self, name, value):
        raise AttributeError(f"Money is immutable; cannot set {name!r}")

    def __delattr__(self, name):
        raise AttributeError(f"Money is immutable; cannot delete {name!r}")

    def __reduce__(self):
        return (Money, (self.cents,))

    # -------------------------------------------------------------------------
    # CONSTRUCTION
    # -------------------------------------------------------------------------

    @classmethod
    def round(cls, value):
        """Round any decimal amount to 2 places, half-up"""
        if isinstance(value, Money):
            return value
        return cls(_round_half_up(_to_fraction(value) * 100))

    @classmethod
    def from_decimal(cls, value):
        """Model-field boundary: None is treated as zero"""
        if value is None:
            return cls(0)
        return cls.round(value)

    @classmethod
    def parse(cls, value):
        """
        API boundary: accept a decimal string, Decimal or int.

        Raises ValueError for malformed or float input, since a float has
        already lost the exact amount the client typed.
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("Amount is required")
        if isinstance(value, float):
            raise ValueError("Amounts must be sent as decimal strings")
        try:
            return cls.round(value)
        except TypeError as e:
            raise ValueError(str(e))

    @classmethod
    def zero(cls):
        return cls(0)

    @classmethod
    def sum(cls, amounts):
        total = 0
        for amount in amounts:
            total += cls.round(amount).cents
        return cls(total)

    # -------------------------------------------------------------------------
    # ARITHMETIC
    # -------------------------------------------------------------------------

    def __add__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents + other.cents)

    def __sub__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents - other.cents)

    def __neg__(self):
        return Money(-self.cents)

    def multiply_by_rate(self, rate):
        """round(amount x (1 + rate))"""
        return Money(_round_half_up(Fraction(self.cents) * _rate_factor(rate)))

    def divide_by_rate(self, rate):
        """round(amount / (1 + rate))"""
        factor = _rate_factor(rate)
        if factor <= 0:
            raise ValueError(f"Rate {rate} gives a non-positive factor")
        return Money(_round_half_up(Fraction(self.cents) / factor))

    def multiply_by_int(self, count):
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError("count must be an integer")
        return Money(self.cents * count)

    def divide_by_int(self, count):
        """round(amount / count)"""
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError("count must be an integer")
        if count == 0:
            raise ZeroDivisionError("Cannot divide money by zero")
        return Money(_round_half_up(Fraction(self.cents, count)))

    # -------------------------------------------------------------------------
    # PREDICATES & COMPARISON
    # -------------------------------------------------------------------------

    def is_zero(self):
        return self.cents == 0

    def is_positive(self):
        return self.cents > 0

    def is_negative(self):
        return self.cents < 0

    def __eq__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return self.cents == other.cents

    def __lt__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return self.cents < other.cents

    def __hash__(self):
        return hash(self.cents)

    # -------------------------------------------------------------------------
    # BOUNDARY CONVERSION
    # -------------------------------------------------------------------------

    def to_decimal(self):
        """Decimal with exactly two places, e.g. Decimal('113.00')"""
        return Decimal(self.cents).scaleb(-2)

    def __str__(self):
        return str(self.to_decimal())

    def __repr__(self):
        return f"Money('{self}')"


def rate_from_percent(percent):
    """Tax percentage (13.00) -> rate (0.13) as an exact Decimal"""
    if percent is None:
        return Decimal('0')
    return Decimal(str(percent)) / Decimal('100')


def percent_of(part, whole):
    """
    part / whole x 100, rounded half-up to 2 places; 0 when whole is zero.

    Example:
        >>> percent_of(Money.round('13'), Money.round('100'))
        Decimal('13.00')
    """
    if whole.is_zero():
        return Decimal('0.00')
    hundredths = _round_half_up(Fraction(part.cents * 10000, whole.cents))
    return Decimal(hundredths).scaleb(-2)
