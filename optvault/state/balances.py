"""
Fungible token ledger with allowance semantics.

Implements TokenLedger[Account] -> Amount for one asset. The option token and
the collateral asset each get their own ledger.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..core.errors import InsufficientAllowance, InsufficientBalance
from ..core.fixed_point import checked_add, require_amount


# Type aliases
Account = str
Amount = int  # Non-negative integer (arbitrary precision, bounded by MAX_AMOUNT)


class TokenLedger:
    """
    Balance table mapping account -> amount, plus (owner, spender) -> allowance.

    Note: balances are stored in a plain dict and zero balances are dropped to
    keep the table sparse. Iteration helpers return sorted copies.
    """

    def __init__(self, asset: str):
        self.asset = asset
        self._balances: Dict[Account, Amount] = {}
        self._allowances: Dict[Tuple[Account, Account], Amount] = {}
        self._total_supply: Amount = 0

    def balance_of(self, account: Account) -> Amount:
        """Get balance for account. Returns 0 if not found."""
        return self._balances.get(account, 0)

    def total_supply(self) -> Amount:
        return self._total_supply

    def allowance(self, owner: Account, spender: Account) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def _set(self, account: Account, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(account, None)
        else:
            self._balances[account] = amount

    def _debit(self, account: Account, amount: Amount) -> None:
        current = self.balance_of(account)
        if current < amount:
            raise InsufficientBalance(
                f"{account} holds {current} {self.asset}, needs {amount}"
            )
        self._set(account, current - amount)

    def _spend_allowance(self, owner: Account, spender: Account, amount: Amount) -> None:
        if owner == spender:
            return
        current = self.allowance(owner, spender)
        if current < amount:
            raise InsufficientAllowance(
                f"{spender} may spend {current} {self.asset} of {owner}, needs {amount}"
            )
        if current - amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = current - amount

    def mint(self, recipient: Account, amount: Amount) -> None:
        """Create ``amount`` new tokens for ``recipient``."""
        amount = require_amount(amount)
        new_supply = checked_add(self._total_supply, amount, name="total_supply")
        self._set(recipient, self.balance_of(recipient) + amount)
        self._total_supply = new_supply

    def burn(self, holder: Account, amount: Amount) -> None:
        """
        Destroy ``amount`` of ``holder``'s tokens.

        Raises:
            InsufficientBalance: If holder has fewer than ``amount`` tokens
        """
        amount = require_amount(amount)
        self._debit(holder, amount)
        self._total_supply -= amount

    def burn_from(self, spender: Account, holder: Account, amount: Amount) -> None:
        """Burn on behalf of ``holder``; requires an allowance unless spender is the holder."""
        amount = require_amount(amount)
        if self.balance_of(holder) < amount:
            raise InsufficientBalance(
                f"{holder} holds {self.balance_of(holder)} {self.asset}, needs {amount}"
            )
        self._spend_allowance(holder, spender, amount)
        self.burn(holder, amount)

    def transfer(self, sender: Account, recipient: Account, amount: Amount) -> None:
        amount = require_amount(amount)
        self._debit(sender, amount)
        self._set(recipient, self.balance_of(recipient) + amount)

    def approve(self, owner: Account, spender: Account, amount: Amount) -> None:
        """Set (not add to) ``spender``'s allowance over ``owner``'s tokens. Zero revokes."""
        if amount != 0:
            amount = require_amount(amount)
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def transfer_from(self, spender: Account, owner: Account, recipient: Account, amount: Amount) -> None:
        amount = require_amount(amount)
        if self.balance_of(owner) < amount:
            raise InsufficientBalance(
                f"{owner} holds {self.balance_of(owner)} {self.asset}, needs {amount}"
            )
        self._spend_allowance(owner, spender, amount)
        self.transfer(owner, recipient, amount)

    def get_all_balances(self) -> Dict[Account, Amount]:
        """Get all non-zero balances, sorted by account."""
        return {k: self._balances[k] for k in sorted(self._balances)}

    def verify_supply(self) -> bool:
        """True if balances are non-negative and sum to the total supply."""
        return (
            all(amount >= 0 for amount in self._balances.values())
            and sum(self._balances.values()) == self._total_supply
        )

    def __repr__(self) -> str:
        return f"TokenLedger({self.asset!r}, {len(self._balances)} holders, supply={self._total_supply})"
