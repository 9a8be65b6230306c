"""Pure arithmetic for the vault engines.

Every function is stateless and operates on ints and exact ``Fraction`` rates.
Rounding is explicit and happens once per result: amounts owed *to* a vault
holder (issuable debt, liquidation payout, cap) are floored.

Rates:
- ``collateral_rate``: strike smallest units per collateral smallest unit (oracle-derived),
- ``option_rate``: strike smallest units owed per option smallest unit (series-derived).
"""

from __future__ import annotations

from fractions import Fraction

from .fixed_point import FixedPoint, floor_fraction, pow10
from .series import OptionSeries


def option_to_strike_rate(series: OptionSeries) -> Fraction:
    """Strike smallest units per option smallest unit: ``strike_price * 10**(u_exp - s_exp)``."""
    return series.strike_price.to_fraction() * pow10(series.underlying_exp - series.strike_exp)


# -- Collateralization -------------------------------------------------------

def collateral_value(collateral: int, collateral_rate: Fraction) -> Fraction:
    """Collateral valued in strike smallest units."""
    return collateral * collateral_rate


def required_value(debt: int, option_rate: Fraction, min_ratio: FixedPoint) -> Fraction:
    """Strike value the collateral must cover for ``debt``: ``debt * option_rate * ratio``."""
    return debt * option_rate * min_ratio.to_fraction()


def is_safe(
    collateral: int,
    debt: int,
    collateral_rate: Fraction,
    option_rate: Fraction,
    min_ratio: FixedPoint,
) -> bool:
    """True when ``collateral * collateral_rate >= debt * option_rate * min_ratio``."""
    if debt == 0:
        return True
    return collateral_value(collateral, collateral_rate) >= required_value(debt, option_rate, min_ratio)


def max_issuable(
    collateral: int,
    collateral_rate: Fraction,
    option_rate: Fraction,
    min_ratio: FixedPoint,
) -> int:
    """Largest total debt the collateral supports: ``floor(c * rate / (ratio * option_rate))``."""
    return floor_fraction(
        collateral_value(collateral, collateral_rate) / (min_ratio.to_fraction() * option_rate)
    )


# -- Liquidation -------------------------------------------------------------

def payout_rate(collateral_rate: Fraction, option_rate: Fraction, incentive: FixedPoint) -> Fraction:
    """Collateral smallest units paid per option unit repaid, incentive included."""
    return option_rate / collateral_rate * (1 + incentive.to_fraction())


def collateral_payout(repay_amount: int, rate: Fraction) -> int:
    """``floor(repay_amount * rate)``."""
    return floor_fraction(repay_amount * rate)


def max_collateral_per_call(collateral: int, liquidation_factor: FixedPoint) -> int:
    """Collateral one liquidation call may take: ``floor(collateral * factor)``."""
    return floor_fraction(collateral * liquidation_factor.to_fraction())


def liquidation_cap(collateral: int, rate: Fraction, liquidation_factor: FixedPoint) -> int:
    """Largest repay amount whose payout stays within ``max_collateral_per_call``.

    ``floor(r * rate) <= M`` iff ``r < (M + 1) / rate``, so the cap is
    ``ceil((M + 1) / rate) - 1``.
    """
    limit = max_collateral_per_call(collateral, liquidation_factor)
    bound = (limit + 1) / rate
    return -floor_fraction(-bound) - 1
