"""
Fail-closed loader for contract configuration files.

A configuration file is YAML with a fixed schema tag, a ``series`` block and
optional ``params`` / ``oracle`` / ``contract`` blocks:

    schema: optvault/contract-config/v1
    series:
      underlying: ETH
      underlying_exp: -18
      strike_asset: DAI
      strike_exp: -17
      strike_price: "90"
      collateral_asset: ETH
      collateral_exp: -18
      expiry: 1577836800
      window_start: 1577836800
    params:
      min_collateralization_ratio: "1.6"
      liquidation_factor: "0.5"
      liquidation_incentive: "0.01"
    oracle:
      max_staleness_seconds: 3600

Fixed-point values may be decimal strings, ints, or ``{value, exponent}`` mappings.
Unknown keys are rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..core.contract import DEFAULT_CUSTODY_ACCOUNT, OptionsContract
from ..core.errors import ConfigError
from ..core.fixed_point import FixedPoint
from ..core.oracle import Clock, OracleAdapter, PriceFeed
from ..core.series import OptionSeries, ProtocolParams

logger = logging.getLogger(__name__)

CONFIG_SCHEMA = "optvault/contract-config/v1"

_SERIES_STR_KEYS = ("underlying", "strike_asset", "collateral_asset")
_SERIES_INT_KEYS = ("underlying_exp", "strike_exp", "collateral_exp", "expiry", "window_start")
_PARAM_KEYS = ("min_collateralization_ratio", "liquidation_factor", "liquidation_incentive")


@dataclass(frozen=True)
class ContractConfig:
    series: OptionSeries
    params: ProtocolParams = field(default_factory=ProtocolParams)
    max_staleness_seconds: Optional[int] = None
    custody_account: str = DEFAULT_CUSTODY_ACCOUNT


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be an object")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_int(obj: Any, *, name: str) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool):
        raise ConfigError(f"{name} must be an int")
    return int(obj)


def _require_fixed_point(obj: Any, *, name: str) -> FixedPoint:
    # YAML floats are rejected: they have already lost exactness.
    if isinstance(obj, (bool, float)):
        raise ConfigError(f"{name} must be a decimal string, int, or {{value, exponent}} mapping")
    try:
        return FixedPoint.parse(obj)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name}: {exc}") from exc


def _reject_unknown(block: dict[str, Any], allowed: tuple[str, ...], *, name: str) -> None:
    unknown = sorted(set(block) - set(allowed))
    if unknown:
        raise ConfigError(f"{name} has unknown keys: {', '.join(unknown)}")


def parse_config(root_obj: Any) -> ContractConfig:
    """Validate an already-decoded configuration mapping."""
    root = _require_mapping(root_obj, name="config")
    _reject_unknown(root, ("schema", "series", "params", "oracle", "contract"), name="config")

    schema = _require_str(root.get("schema"), name="config.schema")
    if schema != CONFIG_SCHEMA:
        raise ConfigError(f"unsupported config.schema: {schema}")

    raw_series = _require_mapping(root.get("series"), name="config.series")
    _reject_unknown(raw_series, _SERIES_STR_KEYS + _SERIES_INT_KEYS + ("strike_price",), name="config.series")
    series_kwargs: dict[str, Any] = {}
    for key in _SERIES_STR_KEYS:
        series_kwargs[key] = _require_str(raw_series.get(key), name=f"config.series.{key}")
    for key in _SERIES_INT_KEYS:
        series_kwargs[key] = _require_int(raw_series.get(key), name=f"config.series.{key}")
    series_kwargs["strike_price"] = _require_fixed_point(
        raw_series.get("strike_price"), name="config.series.strike_price"
    )

    raw_params = _require_mapping(root.get("params", {}), name="config.params")
    _reject_unknown(raw_params, _PARAM_KEYS, name="config.params")
    params_kwargs = {
        key: _require_fixed_point(raw_params[key], name=f"config.params.{key}")
        for key in _PARAM_KEYS
        if key in raw_params
    }

    raw_oracle = _require_mapping(root.get("oracle", {}), name="config.oracle")
    _reject_unknown(raw_oracle, ("max_staleness_seconds",), name="config.oracle")
    staleness = raw_oracle.get("max_staleness_seconds")
    if staleness is not None:
        staleness = _require_int(staleness, name="config.oracle.max_staleness_seconds")

    raw_contract = _require_mapping(root.get("contract", {}), name="config.contract")
    _reject_unknown(raw_contract, ("custody_account",), name="config.contract")
    custody = raw_contract.get("custody_account", DEFAULT_CUSTODY_ACCOUNT)
    custody = _require_str(custody, name="config.contract.custody_account")

    try:
        return ContractConfig(
            series=OptionSeries(**series_kwargs),
            params=ProtocolParams(**params_kwargs),
            max_staleness_seconds=staleness,
            custody_account=custody,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc


def load_config(path: Union[str, Path]) -> ContractConfig:
    """Read and validate a YAML configuration file."""
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
    config = parse_config(raw)
    logger.info(
        "loaded series %s/%s strike %s expiring %d from %s",
        config.series.underlying, config.series.strike_asset,
        config.series.strike_price, config.series.expiry, path,
    )
    return config


def build_contract(
    config: ContractConfig,
    feed: PriceFeed,
    *,
    clock: Optional[Clock] = None,
    strict_invariants: bool = False,
) -> OptionsContract:
    """Wire an ``OptionsContract`` from a config and a price feed."""
    oracle = OracleAdapter(feed, max_staleness_seconds=config.max_staleness_seconds, clock=clock)
    return OptionsContract(
        config.series,
        oracle,
        params=config.params,
        clock=clock,
        custody_account=config.custody_account,
        strict_invariants=strict_invariants,
    )
