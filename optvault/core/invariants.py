"""Invariant checkers for the options vault.

Each ``inv_*`` function returns True when the invariant holds, and
``check_all()`` returns the list of violated invariant IDs (empty = all pass).

``check_transition()`` evaluates the same invariants on a candidate
post-state (one replaced vault plus the token deltas the operation is about
to apply) without touching any ledger. With ``strict_invariants=True`` the
contract runs it before committing, so a violation rejects the operation with
state unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from ..state.vaults import Vault

if TYPE_CHECKING:
    from .contract import OptionsContract


def inv_vault_non_negative(v: Vault) -> bool:
    return v.collateral >= 0 and v.issued_debt >= 0


def inv_debt_matches_supply(c: "OptionsContract") -> bool:
    return c.vaults.total_debt() == c.option_token.total_supply()


def inv_custody_matches_collateral(c: "OptionsContract") -> bool:
    return c.vaults.total_collateral() == c.collateral_token.balance_of(c.custody_account)


def inv_option_ledger_consistent(c: "OptionsContract") -> bool:
    return c.option_token.verify_supply()


def inv_owner_index_complete(c: "OptionsContract") -> bool:
    seen: List[int] = []
    for vault in c.vaults.all():
        if vault.index not in c.vaults.by_owner(vault.owner):
            return False
        seen.append(vault.index)
    return seen == list(range(len(c.vaults)))


def check_all(c: "OptionsContract") -> List[str]:
    violations: List[str] = []
    for vault in c.vaults.all():
        if not inv_vault_non_negative(vault):
            violations.append(f"vault_non_negative:{vault.index}")
    if not inv_debt_matches_supply(c):
        violations.append("debt_matches_supply")
    if not inv_custody_matches_collateral(c):
        violations.append("custody_matches_collateral")
    if not inv_option_ledger_consistent(c):
        violations.append("option_ledger_consistent")
    if not inv_owner_index_complete(c):
        violations.append("owner_index_complete")
    return violations


def check_transition(
    c: "OptionsContract",
    before: Optional[Vault],
    after: Vault,
    *,
    supply_delta: int = 0,
    custody_delta: int = 0,
) -> List[str]:
    """Violations the post-state would have if ``after`` replaced ``before`` (None = new vault)."""
    violations: List[str] = []
    if not inv_vault_non_negative(after):
        violations.append(f"vault_non_negative:{after.index}")

    old_debt = before.issued_debt if before is not None else 0
    old_collateral = before.collateral if before is not None else 0
    total_debt = c.vaults.total_debt() - old_debt + after.issued_debt
    if total_debt != c.option_token.total_supply() + supply_delta:
        violations.append("debt_matches_supply")
    total_collateral = c.vaults.total_collateral() - old_collateral + after.collateral
    if total_collateral != c.collateral_token.balance_of(c.custody_account) + custody_delta:
        violations.append("custody_matches_collateral")

    if not inv_option_ledger_consistent(c):
        violations.append("option_ledger_consistent")
    if not inv_owner_index_complete(c):
        violations.append("owner_index_complete")
    return violations
