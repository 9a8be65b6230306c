"""`optvault`: collateralized options vault with a liquidation engine.

Users lock collateral in vaults to mint option tokens against a strike price;
anyone may liquidate an undercollateralized vault for a premium.

- deterministic, integer amounts with exact rational rates,
- immutable vault records in an append-only arena,
- fail-closed guards (typed ``VaultError`` subclasses) and invariant checks.

Public API:
- ``OptionsContract(series, oracle, ...)``
- ``OracleAdapter(feed)`` / ``StaticPriceFeed``
- ``OptionSeries`` / ``ProtocolParams`` / ``FixedPoint``
"""

from .core.contract import OptionsContract
from .core.errors import (
    ConfigError,
    ExceedsLiquidationCap,
    Expired,
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientCollateral,
    InsufficientDebt,
    InvalidAmount,
    NotFound,
    OracleUnavailable,
    Unauthorized,
    VaultError,
    VaultInvariantError,
    VaultSafe,
)
from .core.fixed_point import FixedPoint
from .core.oracle import OracleAdapter, PriceQuote, StaticPriceFeed
from .core.series import OptionSeries, ProtocolParams
from .state import Event, EventRecord, TokenLedger, Vault

__version__ = "0.1.0"

__all__ = [
    "OptionsContract",
    "OracleAdapter",
    "PriceQuote",
    "StaticPriceFeed",
    "OptionSeries",
    "ProtocolParams",
    "FixedPoint",
    "Event",
    "EventRecord",
    "TokenLedger",
    "Vault",
    "VaultError",
    "NotFound",
    "Unauthorized",
    "Expired",
    "InvalidAmount",
    "InsufficientCollateral",
    "InsufficientDebt",
    "InsufficientBalance",
    "InsufficientAllowance",
    "VaultSafe",
    "ExceedsLiquidationCap",
    "OracleUnavailable",
    "VaultInvariantError",
    "ConfigError",
]
