from __future__ import annotations

import copy
from pathlib import Path

import pytest
import yaml

from optvault import ConfigError, FixedPoint, OracleUnavailable, StaticPriceFeed
from optvault.integration import build_contract, load_config, parse_config

from conftest import CREATOR, FakeClock

CONFIG_YAML = """\
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
  liquidation_incentive: {value: 1, exponent: -2}
oracle:
  max_staleness_seconds: 3600
"""


def _raw() -> dict:
    return yaml.safe_load(CONFIG_YAML)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "contract.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path, CONFIG_YAML))
    assert config.series.strike_price == FixedPoint(90)
    assert config.series.strike_exp == -17
    assert config.params.min_collateralization_ratio == FixedPoint(16, -1)
    assert config.params.liquidation_incentive == FixedPoint(1, -2)
    assert config.max_staleness_seconds == 3600
    assert config.custody_account == "optvault:custody"


def test_optional_blocks_default() -> None:
    raw = _raw()
    del raw["params"]
    del raw["oracle"]
    raw["contract"] = {"custody_account": "vault-escrow"}
    config = parse_config(raw)
    assert config.params.liquidation_factor == FixedPoint(5, -1)
    assert config.max_staleness_seconds is None
    assert config.custody_account == "vault-escrow"


def test_invalid_yaml(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_config(_write(tmp_path, "series: [unclosed"))


def test_empty_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="config must be an object"):
        load_config(_write(tmp_path, ""))


def test_wrong_schema() -> None:
    raw = _raw()
    raw["schema"] = "optvault/contract-config/v0"
    with pytest.raises(ConfigError, match="unsupported config.schema"):
        parse_config(raw)


@pytest.mark.parametrize(
    "path, value, message",
    [
        (("series", "expiry"), "soon", "config.series.expiry must be an int"),
        (("series", "expiry"), True, "config.series.expiry must be an int"),
        (("series", "underlying"), "", "config.series.underlying must be a non-empty string"),
        (("series", "strike_price"), 90.5, "config.series.strike_price must be a decimal string"),
        (("series", "strike_price"), "ninety", "config.series.strike_price"),
        (("params", "liquidation_factor"), 0.5, "config.params.liquidation_factor"),
        (("oracle", "max_staleness_seconds"), "1h", "max_staleness_seconds must be an int"),
    ],
)
def test_field_validation(path, value, message) -> None:
    raw = copy.deepcopy(_raw())
    raw[path[0]][path[1]] = value
    with pytest.raises(ConfigError, match=message):
        parse_config(raw)


def test_unknown_keys_rejected() -> None:
    raw = _raw()
    raw["series"]["strike_decimals"] = 18
    with pytest.raises(ConfigError, match="config.series has unknown keys: strike_decimals"):
        parse_config(raw)
    raw = _raw()
    raw["extra"] = {}
    with pytest.raises(ConfigError, match="config has unknown keys: extra"):
        parse_config(raw)


def test_domain_errors_surface_as_config_errors() -> None:
    raw = _raw()
    raw["series"]["window_start"] = raw["series"]["expiry"] + 1
    with pytest.raises(ConfigError, match="window_start"):
        parse_config(raw)
    raw = _raw()
    raw["params"]["min_collateralization_ratio"] = "1"
    with pytest.raises(ConfigError, match="min_collateralization_ratio must be > 1"):
        parse_config(raw)


def test_config_error_is_value_error() -> None:
    assert issubclass(ConfigError, ValueError)


def test_build_contract_wires_staleness(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path, CONFIG_YAML))
    clock = FakeClock()
    feed = StaticPriceFeed({"ETH": 200, "DAI": 1}, clock=clock)
    contract = build_contract(config, feed, clock=clock, strict_invariants=True)
    contract.collateral_token.mint(CREATOR, 20_000_000)
    index = contract.open_vault(CREATOR)
    contract.deposit_collateral(index, 20_000_000, CREATOR)
    assert contract.max_issuable(index) == 27_777_777

    clock.now += 3601
    with pytest.raises(OracleUnavailable, match="stale"):
        contract.max_issuable(index)
