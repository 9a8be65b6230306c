"""Options contract: vault ledger plus issuance, redemption and liquidation engines.

Every public mutating operation:

1. Runs all guards against the PRE-state (raising a ``VaultError`` on the
   first failure, with no state touched). The custody account is never a
   valid caller.
2. With ``strict_invariants=True``, checks the invariants on the candidate
   POST-state and raises ``VaultInvariantError`` before anything is written.
3. Commits the POST-state vault to the ledger.
4. Performs the token-ledger calls (mint / burn / collateral transfer), whose
   preconditions were already checked in step 1.
5. Emits an ``EventRecord``.

Operations run under a re-entrant lock, so concurrent callers are serialized
and each sees the state left by the previous call. Oracle prices are read
fresh on every call that needs them.
"""

from __future__ import annotations

import functools
import logging
import threading
from fractions import Fraction
from typing import Callable, List, Optional, Tuple, TypeVar

from . import math as vmath
from .errors import VaultError, VaultInvariantError
from .fixed_point import checked_add, require_amount
from .guards import (
    guard_balance,
    guard_issue,
    guard_liquidate,
    guard_not_custody,
    guard_not_expired,
    guard_owner,
    guard_payout,
    guard_redeem,
    guard_withdraw,
)
from .invariants import check_all, check_transition
from .oracle import Clock, OracleAdapter, system_clock
from .series import OptionSeries, ProtocolParams
from .updates import apply_deposit, apply_issue, apply_liquidate, apply_redeem, apply_withdraw
from ..state.balances import Account, TokenLedger
from ..state.events import Event, EventLog, EventRecord
from ..state.vaults import Vault, VaultLedger

logger = logging.getLogger(__name__)

DEFAULT_CUSTODY_ACCOUNT = "optvault:custody"

F = TypeVar("F", bound=Callable)


def _operation(fn: F) -> F:
    """Serialize the call and log rejections."""

    @functools.wraps(fn)
    def wrapper(self: "OptionsContract", *args, **kwargs):
        with self._lock:
            try:
                return fn(self, *args, **kwargs)
            except VaultError as exc:
                logger.debug("%s rejected: %s: %s", fn.__name__, exc.code, exc)
                raise

    return wrapper  # type: ignore[return-value]


class OptionsContract:
    """One option series with its vaults, option token and collateral custody."""

    def __init__(
        self,
        series: OptionSeries,
        oracle: OracleAdapter,
        *,
        params: Optional[ProtocolParams] = None,
        option_token: Optional[TokenLedger] = None,
        collateral_token: Optional[TokenLedger] = None,
        clock: Optional[Clock] = None,
        custody_account: Account = DEFAULT_CUSTODY_ACCOUNT,
        strict_invariants: bool = False,
    ) -> None:
        self.series = series
        self.params = params or ProtocolParams()
        self.oracle = oracle
        self.option_token = option_token or TokenLedger(f"o{series.underlying}")
        self.collateral_token = collateral_token or TokenLedger(series.collateral_asset)
        if self.collateral_token.asset != series.collateral_asset:
            raise ValueError(
                f"collateral ledger holds {self.collateral_token.asset}, series needs {series.collateral_asset}"
            )
        self.clock = clock or system_clock
        self.custody_account = custody_account
        self.strict_invariants = strict_invariants

        self.vaults = VaultLedger()
        self.events = EventLog()
        self.option_rate = vmath.option_to_strike_rate(series)
        self._lock = threading.RLock()

    # -- Reads -----------------------------------------------------------------

    def now(self) -> int:
        return self.clock()

    def is_expired(self) -> bool:
        return self.series.is_expired(self.now())

    def get_vault(self, index: int) -> Vault:
        return self.vaults.get(index)

    def vaults_by_owner(self, owner: Account) -> Tuple[int, ...]:
        return self.vaults.by_owner(owner)

    def balance_of(self, account: Account) -> int:
        """Option-token balance of ``account``."""
        return self.option_token.balance_of(account)

    def max_issuable(self, index: int) -> int:
        """Total debt the vault's collateral supports at the current oracle price."""
        vault = self.vaults.get(index)
        return vmath.max_issuable(
            vault.collateral,
            self.oracle.collateral_to_strike_rate(self.series),
            self.option_rate,
            self.params.min_collateralization_ratio,
        )

    def liquidation_cap(self, index: int) -> int:
        """Largest repay amount a single liquidation call may use right now."""
        vault = self.vaults.get(index)
        rate = self._payout_rate()
        return vmath.liquidation_cap(vault.collateral, rate, self.params.liquidation_factor)

    def check_invariants(self) -> List[str]:
        return check_all(self)

    # -- Vault ledger ----------------------------------------------------------

    @_operation
    def open_vault(self, owner: Account) -> int:
        guard_not_custody(self.custody_account, owner)
        guard_not_expired(self.series, self.now())
        self._verify(None, Vault(index=len(self.vaults), owner=owner))

        vault = self.vaults.open(owner)
        self.events.emit(EventRecord(Event.VAULT_OPENED, vault.index, account=owner))
        logger.info("vault %d opened by %s", vault.index, owner)
        return vault.index

    @_operation
    def deposit_collateral(self, index: int, amount: int, caller: Account) -> Vault:
        """Credit ``amount`` collateral from ``caller`` to any vault."""
        guard_not_custody(self.custody_account, caller)
        vault = self.vaults.get(index)
        guard_not_expired(self.series, self.now())
        amount = require_amount(amount)
        guard_balance(
            self.collateral_token.balance_of(caller), amount,
            holder=caller, asset=self.collateral_token.asset,
        )

        new_vault = apply_deposit(vault, amount)
        self._verify(vault, new_vault, custody_delta=amount)
        self.vaults.replace(new_vault)
        self.collateral_token.transfer(caller, self.custody_account, amount)

        self._emit(Event.COLLATERAL_DEPOSITED, new_vault, caller, amount)
        logger.info("vault %d: %s deposited %d collateral", index, caller, amount)
        return new_vault

    @_operation
    def withdraw_collateral(self, index: int, amount: int, caller: Account) -> Vault:
        """Release collateral to the owner while keeping the vault safe."""
        guard_not_custody(self.custody_account, caller)
        vault = self.vaults.get(index)
        guard_owner(vault, caller)
        amount = require_amount(amount)
        remaining = vault.collateral - amount
        safe_after = remaining >= 0 and (
            vault.issued_debt == 0
            or vmath.is_safe(
                remaining,
                vault.issued_debt,
                self.oracle.collateral_to_strike_rate(self.series),
                self.option_rate,
                self.params.min_collateralization_ratio,
            )
        )
        guard_withdraw(vault, amount, safe_after)

        new_vault = apply_withdraw(vault, amount)
        self._verify(vault, new_vault, custody_delta=-amount)
        self.vaults.replace(new_vault)
        self.collateral_token.transfer(self.custody_account, caller, amount)

        self._emit(Event.COLLATERAL_WITHDRAWN, new_vault, caller, amount)
        logger.info("vault %d: %s withdrew %d collateral", index, caller, amount)
        return new_vault

    # -- Issuance / redemption -------------------------------------------------

    @_operation
    def issue_debt(self, index: int, amount: int, caller: Account) -> Vault:
        """Mint ``amount`` option tokens to the owner against the vault's collateral."""
        guard_not_custody(self.custody_account, caller)
        vault = self.vaults.get(index)
        guard_owner(vault, caller)
        guard_not_expired(self.series, self.now())
        amount = require_amount(amount)
        guard_issue(vault, amount, self.max_issuable(index))
        checked_add(self.option_token.total_supply(), amount, name="total_supply")

        new_vault = apply_issue(vault, amount)
        self._verify(vault, new_vault, supply_delta=amount)
        self.vaults.replace(new_vault)
        self.option_token.mint(caller, amount)

        self._emit(Event.DEBT_ISSUED, new_vault, caller, amount)
        logger.info("vault %d: issued %d (debt now %d)", index, amount, new_vault.issued_debt)
        return new_vault

    @_operation
    def redeem_debt(self, index: int, amount: int, caller: Account) -> Vault:
        """Burn ``amount`` of the owner's option tokens against the vault's debt."""
        guard_not_custody(self.custody_account, caller)
        vault = self.vaults.get(index)
        guard_owner(vault, caller)
        guard_not_expired(self.series, self.now())
        amount = require_amount(amount)
        guard_redeem(vault, amount)
        guard_balance(
            self.option_token.balance_of(caller), amount,
            holder=caller, asset=self.option_token.asset,
        )

        new_vault = apply_redeem(vault, amount)
        self._verify(vault, new_vault, supply_delta=-amount)
        self.vaults.replace(new_vault)
        self.option_token.burn(caller, amount)

        self._emit(Event.DEBT_REDEEMED, new_vault, caller, amount)
        logger.info("vault %d: redeemed %d (debt now %d)", index, amount, new_vault.issued_debt)
        return new_vault

    @_operation
    def transfer_options(self, sender: Account, recipient: Account, amount: int) -> None:
        """Move option tokens between holders under the contract lock."""
        amount = require_amount(amount)
        guard_balance(
            self.option_token.balance_of(sender), amount,
            holder=sender, asset=self.option_token.asset,
        )
        self.option_token.transfer(sender, recipient, amount)

    # -- Liquidation -----------------------------------------------------------

    @_operation
    def is_unsafe(self, index: int) -> bool:
        """Evaluate the collateralization inequality at the current price and record the result."""
        vault = self.vaults.get(index)
        unsafe = not vmath.is_safe(
            vault.collateral,
            vault.issued_debt,
            self.oracle.collateral_to_strike_rate(self.series),
            self.option_rate,
            self.params.min_collateralization_ratio,
        )
        self.events.emit(EventRecord(
            Event.UNSAFE_EVALUATED, index,
            collateral_after=vault.collateral, debt_after=vault.issued_debt, unsafe=unsafe,
        ))
        return unsafe

    @_operation
    def liquidate(self, index: int, repay_amount: int, caller: Account) -> EventRecord:
        """Repay part of an unsafe vault's debt in exchange for premium-priced collateral."""
        repay_amount = require_amount(repay_amount, name="repay_amount")
        guard_not_custody(self.custody_account, caller)
        vault = self.vaults.get(index)
        collateral_rate = self.oracle.collateral_to_strike_rate(self.series)
        safe = vmath.is_safe(
            vault.collateral,
            vault.issued_debt,
            collateral_rate,
            self.option_rate,
            self.params.min_collateralization_ratio,
        )
        rate = vmath.payout_rate(collateral_rate, self.option_rate, self.params.liquidation_incentive)
        cap = vmath.liquidation_cap(vault.collateral, rate, self.params.liquidation_factor)
        guard_liquidate(vault, repay_amount, safe=safe, cap=cap)
        guard_balance(
            self.option_token.balance_of(caller), repay_amount,
            holder=caller, asset=self.option_token.asset,
        )
        payout = vmath.collateral_payout(repay_amount, rate)
        guard_payout(vault, payout)

        new_vault = apply_liquidate(vault, repay_amount, payout)
        self._verify(vault, new_vault, supply_delta=-repay_amount, custody_delta=-payout)
        self.vaults.replace(new_vault)
        self.option_token.burn(caller, repay_amount)
        if payout > 0:
            self.collateral_token.transfer(self.custody_account, caller, payout)

        record = self.events.emit(EventRecord(
            Event.LIQUIDATED, index,
            account=caller,
            amount=repay_amount,
            collateral_after=new_vault.collateral,
            debt_after=new_vault.issued_debt,
            repay_amount=repay_amount,
            collateral_payout=payout,
        ))
        logger.info(
            "vault %d liquidated by %s: repaid %d, paid out %d collateral",
            index, caller, repay_amount, payout,
        )
        return record

    # -- Helpers ---------------------------------------------------------------

    def _verify(
        self,
        before: Optional[Vault],
        after: Vault,
        *,
        supply_delta: int = 0,
        custody_delta: int = 0,
    ) -> None:
        if not self.strict_invariants:
            return
        violations = check_transition(
            self, before, after, supply_delta=supply_delta, custody_delta=custody_delta
        )
        if violations:
            logger.error("vault %d: candidate state violates %s", after.index, violations)
            raise VaultInvariantError(violations)

    def _payout_rate(self) -> Fraction:
        return vmath.payout_rate(
            self.oracle.collateral_to_strike_rate(self.series),
            self.option_rate,
            self.params.liquidation_incentive,
        )

    def _emit(self, event: Event, vault: Vault, caller: Account, amount: int) -> EventRecord:
        return self.events.emit(EventRecord(
            event, vault.index,
            account=caller,
            amount=amount,
            collateral_after=vault.collateral,
            debt_after=vault.issued_debt,
        ))
