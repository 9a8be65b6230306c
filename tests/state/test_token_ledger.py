from __future__ import annotations

import pytest

from optvault.core.errors import InsufficientAllowance, InsufficientBalance, InvalidAmount
from optvault.core.fixed_point import MAX_AMOUNT
from optvault.state import TokenLedger


@pytest.fixture
def ledger() -> TokenLedger:
    t = TokenLedger("oETH")
    t.mint("alice", 1_000)
    return t


def test_mint_tracks_supply(ledger: TokenLedger) -> None:
    ledger.mint("bob", 5)
    assert ledger.balance_of("bob") == 5
    assert ledger.total_supply() == 1_005
    assert ledger.verify_supply()


def test_mint_rejects_supply_overflow(ledger: TokenLedger) -> None:
    with pytest.raises(InvalidAmount, match="total_supply"):
        ledger.mint("bob", MAX_AMOUNT)
    assert ledger.total_supply() == 1_000
    assert ledger.balance_of("bob") == 0


def test_burn(ledger: TokenLedger) -> None:
    ledger.burn("alice", 1_000)
    assert ledger.balance_of("alice") == 0
    assert ledger.total_supply() == 0
    assert ledger.get_all_balances() == {}


def test_burn_more_than_balance(ledger: TokenLedger) -> None:
    with pytest.raises(InsufficientBalance, match="alice holds 1000 oETH, needs 1001"):
        ledger.burn("alice", 1_001)
    assert ledger.total_supply() == 1_000


def test_transfer(ledger: TokenLedger) -> None:
    ledger.transfer("alice", "bob", 300)
    assert ledger.get_all_balances() == {"alice": 700, "bob": 300}
    assert ledger.total_supply() == 1_000


def test_transfer_to_self_is_noop(ledger: TokenLedger) -> None:
    ledger.transfer("alice", "alice", 300)
    assert ledger.balance_of("alice") == 1_000


def test_transfer_rejects_zero(ledger: TokenLedger) -> None:
    with pytest.raises(InvalidAmount):
        ledger.transfer("alice", "bob", 0)


def test_transfer_from_uses_allowance(ledger: TokenLedger) -> None:
    ledger.approve("alice", "bob", 500)
    ledger.transfer_from("bob", "alice", "carol", 200)
    assert ledger.allowance("alice", "bob") == 300
    assert ledger.balance_of("carol") == 200


def test_transfer_from_without_allowance(ledger: TokenLedger) -> None:
    with pytest.raises(InsufficientAllowance):
        ledger.transfer_from("bob", "alice", "carol", 1)
    assert ledger.balance_of("alice") == 1_000


def test_insufficient_allowance_is_a_balance_error() -> None:
    assert issubclass(InsufficientAllowance, InsufficientBalance)


def test_burn_from_by_holder_needs_no_allowance(ledger: TokenLedger) -> None:
    ledger.burn_from("alice", "alice", 10)
    assert ledger.balance_of("alice") == 990


def test_burn_from_spends_allowance(ledger: TokenLedger) -> None:
    ledger.approve("alice", "bob", 10)
    ledger.burn_from("bob", "alice", 10)
    assert ledger.allowance("alice", "bob") == 0
    assert ledger.total_supply() == 990
    with pytest.raises(InsufficientAllowance):
        ledger.burn_from("bob", "alice", 1)


def test_burn_from_checks_balance_before_allowance(ledger: TokenLedger) -> None:
    ledger.approve("alice", "bob", 5_000)
    with pytest.raises(InsufficientBalance, match="alice holds"):
        ledger.burn_from("bob", "alice", 2_000)
    assert ledger.allowance("alice", "bob") == 5_000


def test_approve_zero_revokes(ledger: TokenLedger) -> None:
    ledger.approve("alice", "bob", 10)
    ledger.approve("alice", "bob", 0)
    assert ledger.allowance("alice", "bob") == 0


def test_approve_replaces(ledger: TokenLedger) -> None:
    ledger.approve("alice", "bob", 10)
    ledger.approve("alice", "bob", 3)
    assert ledger.allowance("alice", "bob") == 3


def test_repr(ledger: TokenLedger) -> None:
    assert repr(ledger) == "TokenLedger('oETH', 1 holders, supply=1000)"
