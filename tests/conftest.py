"""Shared fixtures: a put-style ETH/DAI series matching the reference scenario."""

from __future__ import annotations

import pytest

from optvault import FixedPoint, OptionSeries, OptionsContract, OracleAdapter, StaticPriceFeed

EXPIRY = 1_577_836_800
NOW = 1_500_000_000

CREATOR = "creator"
FIRST_OWNER = "first_owner"
SECOND_OWNER = "second_owner"


class FakeClock:
    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


def make_series(**overrides) -> OptionSeries:
    fields = dict(
        underlying="ETH",
        underlying_exp=-18,
        strike_asset="DAI",
        strike_exp=-17,
        strike_price=FixedPoint(90),
        collateral_asset="ETH",
        collateral_exp=-18,
        expiry=EXPIRY,
        window_start=EXPIRY,
    )
    fields.update(overrides)
    return OptionSeries(**fields)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def feed() -> StaticPriceFeed:
    # ETH at 200 DAI: 1 collateral unit is worth 20 strike units, 1 option unit owes 9.
    return StaticPriceFeed({"ETH": 200, "DAI": 1})


@pytest.fixture
def contract(feed: StaticPriceFeed, clock: FakeClock) -> OptionsContract:
    c = OptionsContract(make_series(), OracleAdapter(feed), clock=clock, strict_invariants=True)
    for account in (CREATOR, FIRST_OWNER, SECOND_OWNER):
        c.collateral_token.mint(account, 10**12)
    return c


@pytest.fixture
def funded_vault(contract: OptionsContract) -> int:
    """Vault owned by CREATOR with 20_000_000 collateral and 27_777_767 debt."""
    index = contract.open_vault(CREATOR)
    contract.deposit_collateral(index, 20_000_000, CREATOR)
    contract.issue_debt(index, 27_777_777, CREATOR)
    contract.redeem_debt(index, 10, CREATOR)
    return index
