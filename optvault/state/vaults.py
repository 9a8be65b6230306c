"""
Vault arena and owner index.

Vaults are immutable records addressed by a stable integer handle (their
position in the arena). A mutation replaces the record at its handle; no
vault is ever removed, so handles stay valid forever. The owner index is
append-only and preserves opening order.

Round-trip property (tested): ``VaultLedger.from_dict(ledger.to_dict())`` reproduces the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple

from ..core.errors import NotFound
from ..core.fixed_point import MAX_AMOUNT, is_int
from .balances import Account


@dataclass(frozen=True)
class Vault:
    """One collateral position."""

    index: int
    owner: Account
    collateral: int = 0
    issued_debt: int = 0

    def __post_init__(self) -> None:
        if not is_int(self.index) or self.index < 0:
            raise ValueError(f"index must be a non-negative int: {self.index!r}")
        if not isinstance(self.owner, str) or not self.owner:
            raise ValueError("owner must be a non-empty string")
        if not is_int(self.collateral) or not (0 <= self.collateral <= MAX_AMOUNT):
            raise ValueError(f"collateral out of range: {self.collateral!r}")
        if not is_int(self.issued_debt) or not (0 <= self.issued_debt <= MAX_AMOUNT):
            raise ValueError(f"issued_debt out of range: {self.issued_debt!r}")


class VaultLedger:
    """Arena of vaults plus the owner -> [index] index."""

    def __init__(self) -> None:
        self._vaults: List[Vault] = []
        self._by_owner: Dict[Account, List[int]] = {}

    def __len__(self) -> int:
        return len(self._vaults)

    def open(self, owner: Account) -> Vault:
        """Append a zero-balance vault for ``owner`` and return it."""
        vault = Vault(index=len(self._vaults), owner=owner)
        self._vaults.append(vault)
        self._by_owner.setdefault(owner, []).append(vault.index)
        return vault

    def get(self, index: int) -> Vault:
        if not is_int(index) or not (0 <= index < len(self._vaults)):
            raise NotFound(f"no vault at index {index!r}")
        return self._vaults[index]

    def replace(self, vault: Vault) -> None:
        """Store ``vault`` at its handle. Ownership cannot change."""
        current = self.get(vault.index)
        if current.owner != vault.owner:
            raise ValueError(f"vault {vault.index} owner is immutable")
        self._vaults[vault.index] = vault

    def by_owner(self, owner: Account) -> Tuple[int, ...]:
        return tuple(self._by_owner.get(owner, ()))

    def all(self) -> Tuple[Vault, ...]:
        return tuple(self._vaults)

    def total_debt(self) -> int:
        return sum(v.issued_debt for v in self._vaults)

    def total_collateral(self) -> int:
        return sum(v.collateral for v in self._vaults)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to plain JSON-compatible data (owner index keys sorted)."""
        return {
            "vaults": [
                {
                    "index": v.index,
                    "owner": v.owner,
                    "collateral": v.collateral,
                    "issued_debt": v.issued_debt,
                }
                for v in self._vaults
            ],
            "by_owner": {owner: list(self._by_owner[owner]) for owner in sorted(self._by_owner)},
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "VaultLedger":
        """Deserialize. Raises KeyError on missing fields, ValueError on an inconsistent owner index."""
        ledger = cls()
        for position, raw in enumerate(d["vaults"]):
            vault = Vault(
                index=raw["index"],
                owner=raw["owner"],
                collateral=raw["collateral"],
                issued_debt=raw["issued_debt"],
            )
            if vault.index != position:
                raise ValueError(f"vault at position {position} has index {vault.index}")
            ledger._vaults.append(vault)

        expected: Dict[Account, List[int]] = {}
        for vault in ledger._vaults:
            expected.setdefault(vault.owner, []).append(vault.index)
        by_owner = {owner: list(indices) for owner, indices in d["by_owner"].items()}
        if by_owner != expected:
            raise ValueError("owner index does not match vault owners")
        ledger._by_owner = by_owner
        return ledger
