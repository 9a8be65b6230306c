"""Option series and protocol parameters.

Units/conventions:
- one option-token smallest unit covers ``10**underlying_exp`` whole units of underlying,
- ``strike_price`` is whole strike-asset units per whole underlying unit,
- collateral and strike amounts are counted in smallest units of
  ``10**collateral_exp`` and ``10**strike_exp`` whole units respectively,
- timestamps are integer seconds.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .fixed_point import FixedPoint, is_int

AssetId = str


@dataclass(frozen=True)
class ProtocolParams:
    """Fixed protocol constants shared by every vault of a series."""

    min_collateralization_ratio: FixedPoint = field(default_factory=lambda: FixedPoint(16, -1))
    liquidation_factor: FixedPoint = field(default_factory=lambda: FixedPoint(5, -1))
    liquidation_incentive: FixedPoint = field(default_factory=lambda: FixedPoint(1, -2))

    def __post_init__(self) -> None:
        if self.min_collateralization_ratio.to_fraction() <= 1:
            raise ValueError(
                f"min_collateralization_ratio must be > 1: {self.min_collateralization_ratio}"
            )
        factor = self.liquidation_factor.to_fraction()
        if not (0 < factor < 1):
            raise ValueError(f"liquidation_factor must be in (0, 1): {self.liquidation_factor}")
        if self.liquidation_incentive.to_fraction() <= 0:
            raise ValueError(f"liquidation_incentive must be > 0: {self.liquidation_incentive}")


@dataclass(frozen=True)
class OptionSeries:
    """Immutable parameters of one option contract."""

    underlying: AssetId
    underlying_exp: int
    strike_asset: AssetId
    strike_exp: int
    strike_price: FixedPoint
    collateral_asset: AssetId
    collateral_exp: int
    expiry: int
    window_start: int

    def __post_init__(self) -> None:
        for name in ("underlying", "strike_asset", "collateral_asset"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{name} must be a non-empty string")
        for name in ("underlying_exp", "strike_exp", "collateral_exp", "expiry", "window_start"):
            if not is_int(getattr(self, name)):
                raise TypeError(f"{name} must be an int")
        if not self.strike_price.is_positive():
            raise ValueError(f"strike_price must be positive: {self.strike_price}")
        if self.expiry < 0:
            raise ValueError(f"expiry must be non-negative: {self.expiry}")
        if not (0 <= self.window_start <= self.expiry):
            raise ValueError(
                f"window_start must be in [0, expiry]: {self.window_start} (expiry {self.expiry})"
            )

    def is_expired(self, now: int) -> bool:
        return now >= self.expiry
