"""Structured event records emitted by the vault engines.

Records are append-only and numbered in emission order. They are the
observability surface consumed by indexers; engines never read them back.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, unique
from typing import Any, Dict, List, Optional, Tuple


@unique
class Event(Enum):
    VAULT_OPENED = "VaultOpened"
    COLLATERAL_DEPOSITED = "CollateralDeposited"
    COLLATERAL_WITHDRAWN = "CollateralWithdrawn"
    DEBT_ISSUED = "DebtIssued"
    DEBT_REDEEMED = "DebtRedeemed"
    UNSAFE_EVALUATED = "UnsafeEvaluated"
    LIQUIDATED = "Liquidated"


@dataclass(frozen=True)
class EventRecord:
    """One emitted record. Unused fields default to 0/False/""."""

    event: Event
    vault_index: int
    account: str = ""            # caller (owner, depositor or liquidator)
    amount: int = 0              # collateral or debt delta of the operation
    collateral_after: int = 0
    debt_after: int = 0
    repay_amount: int = 0        # liquidate
    collateral_payout: int = 0   # liquidate
    unsafe: bool = False         # is_unsafe
    sequence: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event.value,
            "vault_index": self.vault_index,
            "account": self.account,
            "amount": self.amount,
            "collateral_after": self.collateral_after,
            "debt_after": self.debt_after,
            "repay_amount": self.repay_amount,
            "collateral_payout": self.collateral_payout,
            "unsafe": self.unsafe,
            "sequence": self.sequence,
        }


class EventLog:
    def __init__(self) -> None:
        self._records: List[EventRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def emit(self, record: EventRecord) -> EventRecord:
        numbered = replace(record, sequence=len(self._records))
        self._records.append(numbered)
        return numbered

    def events(self, kind: Optional[Event] = None, *, vault_index: Optional[int] = None) -> Tuple[EventRecord, ...]:
        """Records in emission order, optionally filtered by kind and/or vault."""
        return tuple(
            r
            for r in self._records
            if (kind is None or r.event is kind) and (vault_index is None or r.vault_index == vault_index)
        )

    def last(self, kind: Optional[Event] = None) -> Optional[EventRecord]:
        matching = self.events(kind)
        return matching[-1] if matching else None
