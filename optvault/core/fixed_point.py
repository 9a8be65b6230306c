"""Fixed-point numbers and checked amount arithmetic.

A ``FixedPoint`` is ``value * 10**exponent`` with an integer ``value``. All
cross-scale products are carried out exactly as ``fractions.Fraction`` and
rounded once, at the end, with an explicit floor. Token amounts are plain
ints bounded by ``MAX_AMOUNT``; anything outside ``[1, MAX_AMOUNT]`` is
rejected rather than silently wrapped or truncated.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any

from .errors import InvalidAmount

# Shared upper bound for amounts and balances (2**128 - 1, a u128 word).
MAX_AMOUNT: int = (1 << 128) - 1
MAX_EXPONENT: int = 77


def pow10(exponent: int) -> Fraction:
    """Exact ``10**exponent`` for any signed exponent."""
    if exponent >= 0:
        return Fraction(10**exponent)
    return Fraction(1, 10 ** (-exponent))


def floor_fraction(x: Fraction) -> int:
    """Floor toward -inf (Python ``//`` semantics)."""
    return x.numerator // x.denominator


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_amount(value: Any, *, name: str = "amount") -> int:
    """Return ``value`` if it is an int in ``[1, MAX_AMOUNT]``, else raise ``InvalidAmount``."""
    if not is_int(value):
        raise InvalidAmount(f"{name} must be an int, got {type(value).__name__}")
    if value <= 0:
        raise InvalidAmount(f"{name} must be positive: {value}")
    if value > MAX_AMOUNT:
        raise InvalidAmount(f"{name} exceeds MAX_AMOUNT: {value}")
    return int(value)


def checked_add(a: int, b: int, *, name: str = "amount") -> int:
    """``a + b`` for non-negative ints, rejecting results above ``MAX_AMOUNT``."""
    total = a + b
    if total > MAX_AMOUNT:
        raise InvalidAmount(f"{name} would exceed MAX_AMOUNT: {a} + {b}")
    return total


@dataclass(frozen=True)
class FixedPoint:
    """``value * 10**exponent``."""

    value: int
    exponent: int = 0

    def __post_init__(self) -> None:
        if not is_int(self.value):
            raise TypeError(f"value must be an int, got {type(self.value).__name__}")
        if not is_int(self.exponent):
            raise TypeError(f"exponent must be an int, got {type(self.exponent).__name__}")
        if abs(self.exponent) > MAX_EXPONENT:
            raise ValueError(f"exponent out of range: {self.exponent}")

    @classmethod
    def parse(cls, raw: Any) -> "FixedPoint":
        """Build from a FixedPoint, an int, a decimal string, or a ``{value, exponent}`` mapping."""
        if isinstance(raw, FixedPoint):
            return raw
        if is_int(raw):
            return cls(int(raw), 0)
        if isinstance(raw, str):
            try:
                dec = Decimal(raw.strip())
            except InvalidOperation as exc:
                raise ValueError(f"not a decimal number: {raw!r}") from exc
            if not dec.is_finite():
                raise ValueError(f"not a finite number: {raw!r}")
            sign, digits, exp = dec.as_tuple()
            value = int("".join(str(d) for d in digits) or "0")
            return cls(-value if sign else value, int(exp))
        if isinstance(raw, dict):
            try:
                return cls(raw["value"], raw.get("exponent", 0))
            except KeyError as exc:
                raise ValueError("fixed-point mapping requires 'value'") from exc
        raise TypeError(f"cannot parse fixed-point value from {type(raw).__name__}")

    def to_fraction(self) -> Fraction:
        return self.value * pow10(self.exponent)

    def is_positive(self) -> bool:
        return self.value > 0

    def __str__(self) -> str:
        return str(Decimal(self.value).scaleb(self.exponent))
