"""Update functions for the vault engines.

Each takes a PRE-state vault (already guarded) and returns the POST-state
vault. No I/O, no ledger access.
"""

from __future__ import annotations

from dataclasses import replace

from .fixed_point import checked_add
from ..state.vaults import Vault


def apply_deposit(vault: Vault, amount: int) -> Vault:
    return replace(vault, collateral=checked_add(vault.collateral, amount, name="collateral"))


def apply_withdraw(vault: Vault, amount: int) -> Vault:
    return replace(vault, collateral=vault.collateral - amount)


def apply_issue(vault: Vault, amount: int) -> Vault:
    return replace(vault, issued_debt=checked_add(vault.issued_debt, amount, name="issued_debt"))


def apply_redeem(vault: Vault, amount: int) -> Vault:
    return replace(vault, issued_debt=vault.issued_debt - amount)


def apply_liquidate(vault: Vault, repay_amount: int, payout: int) -> Vault:
    return replace(
        vault,
        issued_debt=vault.issued_debt - repay_amount,
        collateral=vault.collateral - payout,
    )
