"""
Exact rational prices.

Prices on the order book contract are quote units per base unit expressed
as a (numerator, denominator) pair of unsigned integers. Every comparison
here is done by cross-multiplication on Python ints, which are arbitrary
precision, so no rounding or overflow can change the outcome.
"""

from dataclasses import dataclass
from typing import Any, Tuple


def _check_component(value: Any, name: str) -> int:
    # bool is a subclass of int and is never a valid amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Price {name} must be an integer, got: {value!r}")
    if value < 0:
        raise ValueError(f"Price {name} cannot be negative, got: {value}")
    return value


@dataclass(frozen=True)
class Price:
    """
    A non-negative rational price ``num / den`` with ``den > 0``.

    The fraction is kept exactly as given (not reduced), matching the
    values stored on the ledger.
    """

    num: int
    den: int

    def __post_init__(self):
        _check_component(self.num, "numerator")
        _check_component(self.den, "denominator")
        if self.den == 0:
            raise ValueError("Price denominator must be positive")

    @classmethod
    def parse(cls, num: Any, den: Any) -> "Price":
        """
        Build a price from ints or decimal-digit strings.

        Raises:
            ValueError: If either component is not an unsigned integer
        """
        return cls(parse_uint(num, "Price numerator"), parse_uint(den, "Price denominator"))

    def as_tuple(self) -> Tuple[int, int]:
        return self.num, self.den

    def __str__(self) -> str:
        return f"{self.num}/{self.den}"


def parse_uint(value: Any, name: str) -> int:
    """
    Parse an unsigned integer given as an int or a decimal-digit string.

    U128 amounts arrive from the ledger as strings. Floats are rejected,
    since large amounts cannot round-trip through them.

    Raises:
        ValueError: If the value is not an unsigned integer
    """
    if value is None:
        raise ValueError(f"{name} is required")
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise ValueError(f"Invalid {name} format: {value!r}")
        return int(text)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer or decimal string, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative: {value}")
    return value


def price_ge(a: Price, b: Price) -> bool:
    """Return True if ``a >= b``, i.e. ``a.num * b.den >= b.num * a.den``."""
    return a.num * b.den >= b.num * a.den


def price_le(a: Price, b: Price) -> bool:
    """Return True if ``a <= b``, i.e. ``a.num * b.den <= b.num * a.den``."""
    return a.num * b.den <= b.num * a.den


def compare_prices(a: Price, b: Price) -> int:
    """
    Three-way exact comparison of two prices.

    Returns:
        -1 if a < b, 0 if a == b, 1 if a > b
    """
    left = a.num * b.den
    right = b.num * a.den
    if left < right:
        return -1
    if left > right:
        return 1
    return 0
