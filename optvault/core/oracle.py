"""Price oracle adapter.

The price feed is an external collaborator: ``feed.price(asset_id)`` returns a
point price in a common numeraire, either as a ``PriceQuote`` or as a plain
``(value, exponent)`` / ``(value, exponent, timestamp)`` tuple.

The adapter is fail-closed:
- it reads the feed on every call (nothing is cached),
- any feed error, missing quote, non-positive price, or stale/future quote is
  surfaced as ``OracleUnavailable``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Callable, Dict, Optional, Protocol

from .errors import OracleUnavailable
from .fixed_point import FixedPoint, is_int, pow10
from .series import AssetId, OptionSeries

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time())


@dataclass(frozen=True)
class PriceQuote:
    """Raw feed answer: ``value * 10**exponent`` observed at ``timestamp`` (if known)."""

    value: int
    exponent: int = 0
    timestamp: Optional[int] = None


class PriceFeed(Protocol):
    def price(self, asset_id: AssetId) -> Any: ...


def is_fresh(price_timestamp: int, current_timestamp: int, max_staleness_seconds: int) -> bool:
    """Return True if the price timestamp is within the max staleness window."""
    if current_timestamp < 0:
        raise ValueError(f"current_timestamp must be non-negative: {current_timestamp}")
    if price_timestamp > current_timestamp:
        return False
    return (current_timestamp - price_timestamp) <= max_staleness_seconds


def _coerce_quote(raw: Any) -> PriceQuote:
    if isinstance(raw, PriceQuote):
        return raw
    if isinstance(raw, tuple) and len(raw) in (2, 3):
        return PriceQuote(*raw)
    raise TypeError(f"unsupported quote type: {type(raw).__name__}")


class OracleAdapter:
    """Normalizes feed quotes into exact prices and cross rates."""

    def __init__(
        self,
        feed: PriceFeed,
        *,
        max_staleness_seconds: Optional[int] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if max_staleness_seconds is not None and max_staleness_seconds <= 0:
            raise ValueError(f"max_staleness_seconds must be positive: {max_staleness_seconds}")
        self.feed = feed
        self.max_staleness_seconds = max_staleness_seconds
        self.clock = clock or system_clock

    def current_price(self, asset_id: AssetId) -> FixedPoint:
        """Fresh price of ``asset_id`` in the feed's numeraire."""
        try:
            quote = _coerce_quote(self.feed.price(asset_id))
        except Exception as exc:
            logger.warning("price feed failed for %s: %s", asset_id, exc)
            raise OracleUnavailable(f"price feed failed for {asset_id}: {exc}") from exc

        if not is_int(quote.value) or not is_int(quote.exponent) or quote.value <= 0:
            logger.warning("invalid quote for %s: %r", asset_id, quote)
            raise OracleUnavailable(f"invalid price for {asset_id}: {quote.value!r}")

        if self.max_staleness_seconds is not None:
            if not is_int(quote.timestamp):
                raise OracleUnavailable(f"quote for {asset_id} has no timestamp")
            now = self.clock()
            if not is_fresh(quote.timestamp, now, self.max_staleness_seconds):
                logger.warning("stale quote for %s: ts=%s now=%s", asset_id, quote.timestamp, now)
                raise OracleUnavailable(f"stale price for {asset_id} (ts={quote.timestamp}, now={now})")

        try:
            return FixedPoint(quote.value, quote.exponent)
        except ValueError as exc:
            raise OracleUnavailable(f"invalid price for {asset_id}: {exc}") from exc

    def collateral_to_strike_rate(self, series: OptionSeries) -> Fraction:
        """Strike-asset smallest units per collateral-asset smallest unit."""
        collateral_price = self.current_price(series.collateral_asset).to_fraction()
        strike_price = self.current_price(series.strike_asset).to_fraction()
        return collateral_price / strike_price * pow10(series.collateral_exp - series.strike_exp)


class StaticPriceFeed:
    """In-memory price feed with explicit updates (deterministic fixture)."""

    def __init__(self, prices: Optional[Dict[AssetId, Any]] = None, *, clock: Optional[Clock] = None) -> None:
        self.clock = clock
        self._quotes: Dict[AssetId, PriceQuote] = {}
        for asset_id, raw in (prices or {}).items():
            if is_int(raw):
                self.update_price(asset_id, raw)
            else:
                fp = FixedPoint.parse(raw)
                self.update_price(asset_id, fp.value, fp.exponent)

    def update_price(self, asset_id: AssetId, value: int, exponent: int = 0, timestamp: Optional[int] = None) -> None:
        if timestamp is None and self.clock is not None:
            timestamp = self.clock()
        self._quotes[asset_id] = PriceQuote(value, exponent, timestamp)

    def price(self, asset_id: AssetId) -> PriceQuote:
        try:
            return self._quotes[asset_id]
        except KeyError:
            raise LookupError(f"no price for {asset_id}") from None
