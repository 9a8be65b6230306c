"""
Operation parsing and replay for an ``OptionsContract``.

Operations are plain mappings (as decoded from JSON or YAML), e.g.

    {"op": "liquidate", "caller": "bob", "vault": 1, "amount": 11001100}

``apply_operation()`` is the single entry point. It dispatches to the
contract and returns an ``OperationResult`` (accepted, or rejected with the
error code). ``apply_operation_or_raise()`` re-raises instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..core.contract import OptionsContract
from ..core.errors import VaultError

logger = logging.getLogger(__name__)


@unique
class OperationKind(Enum):
    OPEN_VAULT = "open_vault"
    DEPOSIT_COLLATERAL = "deposit_collateral"
    WITHDRAW_COLLATERAL = "withdraw_collateral"
    ISSUE_DEBT = "issue_debt"
    REDEEM_DEBT = "redeem_debt"
    IS_UNSAFE = "is_unsafe"
    LIQUIDATE = "liquidate"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class Operation:
    """One parsed operation. Unused fields default to 0/""."""

    kind: OperationKind
    caller: str = ""
    vault: int = 0
    amount: int = 0
    recipient: str = ""    # transfer


@dataclass(frozen=True)
class OperationResult:
    accepted: bool
    value: Any = None
    rejection: Optional[str] = None


# Required fields per kind, beyond "op".
_REQUIRED: Dict[OperationKind, Tuple[str, ...]] = {
    OperationKind.OPEN_VAULT: ("caller",),
    OperationKind.DEPOSIT_COLLATERAL: ("caller", "vault", "amount"),
    OperationKind.WITHDRAW_COLLATERAL: ("caller", "vault", "amount"),
    OperationKind.ISSUE_DEBT: ("caller", "vault", "amount"),
    OperationKind.REDEEM_DEBT: ("caller", "vault", "amount"),
    OperationKind.IS_UNSAFE: ("vault",),
    OperationKind.LIQUIDATE: ("caller", "vault", "amount"),
    OperationKind.TRANSFER: ("caller", "recipient", "amount"),
}


def _require_str(value: Any, *, name: str, max_len: int = 256) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    if not value:
        raise ValueError(f"{name} must be non-empty")
    if len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")
    return int(value)


def parse_operation(obj: Any) -> Operation:
    """
    Parse one operation mapping.

    Raises:
        ValueError: If the mapping is malformed, has unknown fields, or misses a required field
    """
    if not isinstance(obj, Mapping):
        raise ValueError("operation must be an object")
    raw_kind = _require_str(obj.get("op"), name="op")
    try:
        kind = OperationKind(raw_kind)
    except ValueError:
        raise ValueError(f"unknown op: {raw_kind}") from None

    required = _REQUIRED[kind]
    unknown = sorted(set(obj) - {"op"} - set(required))
    if unknown:
        raise ValueError(f"{raw_kind}: unknown fields: {', '.join(unknown)}")
    missing = [k for k in required if k not in obj]
    if missing:
        raise ValueError(f"{raw_kind}: missing fields: {', '.join(missing)}")

    kwargs: Dict[str, Any] = {}
    for key in required:
        if key in ("caller", "recipient"):
            kwargs[key] = _require_str(obj[key], name=key)
        else:
            kwargs[key] = _require_int(obj[key], name=key)
    return Operation(kind=kind, **kwargs)


def parse_operations(objs: Iterable[Any]) -> List[Operation]:
    if isinstance(objs, (str, bytes, Mapping)):
        raise ValueError("operations must be a list")
    ops = []
    for i, obj in enumerate(objs):
        try:
            ops.append(parse_operation(obj))
        except ValueError as exc:
            raise ValueError(f"operations[{i}]: {exc}") from exc
    return ops


Handler = Callable[[OptionsContract, Operation], Any]

_DISPATCH: Dict[OperationKind, Handler] = {
    OperationKind.OPEN_VAULT: lambda c, op: c.open_vault(op.caller),
    OperationKind.DEPOSIT_COLLATERAL: lambda c, op: c.deposit_collateral(op.vault, op.amount, op.caller),
    OperationKind.WITHDRAW_COLLATERAL: lambda c, op: c.withdraw_collateral(op.vault, op.amount, op.caller),
    OperationKind.ISSUE_DEBT: lambda c, op: c.issue_debt(op.vault, op.amount, op.caller),
    OperationKind.REDEEM_DEBT: lambda c, op: c.redeem_debt(op.vault, op.amount, op.caller),
    OperationKind.IS_UNSAFE: lambda c, op: c.is_unsafe(op.vault),
    OperationKind.LIQUIDATE: lambda c, op: c.liquidate(op.vault, op.amount, op.caller),
    OperationKind.TRANSFER: lambda c, op: c.transfer_options(op.caller, op.recipient, op.amount),
}


def apply_operation(contract: OptionsContract, op: Operation) -> OperationResult:
    """Apply one operation. Rejections carry the ``VaultError`` code."""
    handler = _DISPATCH.get(op.kind)
    if handler is None:
        return OperationResult(accepted=False, rejection=f"unknown_op:{op.kind}")
    try:
        value = handler(contract, op)
    except VaultError as exc:
        return OperationResult(accepted=False, rejection=exc.code)
    return OperationResult(accepted=True, value=value)


def apply_operation_or_raise(contract: OptionsContract, op: Operation) -> OperationResult:
    """Like ``apply_operation()`` but lets the ``VaultError`` propagate."""
    handler = _DISPATCH[op.kind]
    return OperationResult(accepted=True, value=handler(contract, op))


def replay(contract: OptionsContract, objs: Iterable[Any]) -> List[OperationResult]:
    """Parse all operations up front, then apply them in order; rejections do not stop the replay."""
    ops = parse_operations(objs)
    results = [apply_operation(contract, op) for op in ops]
    rejected = sum(1 for r in results if not r.accepted)
    logger.info("replayed %d operations (%d rejected)", len(results), rejected)
    return results
