"""Guard functions for the vault engines.

One function per precondition group. Each inspects the PRE-state and either
returns ``None`` or raises the matching ``VaultError``. Guards never mutate;
the contract runs every guard of an operation before applying any update.
"""

from __future__ import annotations

from .errors import (
    ExceedsLiquidationCap,
    Expired,
    InsufficientBalance,
    InsufficientCollateral,
    InsufficientDebt,
    Unauthorized,
    VaultSafe,
)
from .series import OptionSeries
from ..state.balances import Account
from ..state.vaults import Vault


def guard_not_expired(series: OptionSeries, now: int) -> None:
    if series.is_expired(now):
        raise Expired(f"series expired at {series.expiry} (now {now})")


def guard_not_custody(custody_account: Account, caller: Account) -> None:
    if caller == custody_account:
        raise Unauthorized(f"custody account {caller} cannot act as a caller")


def guard_owner(vault: Vault, caller: Account) -> None:
    if caller != vault.owner:
        raise Unauthorized(f"{caller} does not own vault {vault.index}")


def guard_balance(balance: int, amount: int, *, holder: Account, asset: str) -> None:
    if balance < amount:
        raise InsufficientBalance(f"{holder} holds {balance} {asset}, needs {amount}")


def guard_issue(vault: Vault, amount: int, max_issuable: int) -> None:
    if vault.issued_debt + amount > max_issuable:
        raise InsufficientCollateral(
            f"vault {vault.index}: debt {vault.issued_debt} + {amount} exceeds max issuable {max_issuable}"
        )


def guard_redeem(vault: Vault, amount: int) -> None:
    if amount > vault.issued_debt:
        raise InsufficientDebt(f"vault {vault.index}: redeem {amount} exceeds debt {vault.issued_debt}")


def guard_withdraw(vault: Vault, amount: int, safe_after: bool) -> None:
    if amount > vault.collateral:
        raise InsufficientCollateral(
            f"vault {vault.index}: withdraw {amount} exceeds collateral {vault.collateral}"
        )
    if not safe_after:
        raise InsufficientCollateral(
            f"vault {vault.index}: withdrawing {amount} would breach the collateralization ratio"
        )


def guard_liquidate(vault: Vault, repay_amount: int, *, safe: bool, cap: int) -> None:
    """Safety, cap and debt checks, in that order."""
    if safe:
        raise VaultSafe(f"vault {vault.index} is safe")
    if repay_amount > cap:
        raise ExceedsLiquidationCap(
            f"vault {vault.index}: repay {repay_amount} exceeds per-call cap {cap}"
        )
    if repay_amount > vault.issued_debt:
        raise InsufficientDebt(
            f"vault {vault.index}: repay {repay_amount} exceeds debt {vault.issued_debt}"
        )


def guard_payout(vault: Vault, payout: int) -> None:
    if payout > vault.collateral:
        raise InsufficientCollateral(
            f"vault {vault.index}: payout {payout} exceeds collateral {vault.collateral}"
        )
