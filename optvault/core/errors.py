"""Exception types for the options vault engine.

Every rejection is raised immediately and leaves state unchanged. Each class
carries a stable ``code`` used as the rejection reason by
``optvault.integration.operations.apply_operation()``.
"""

from __future__ import annotations


class VaultError(Exception):
    """Base class for every rejected vault operation."""

    code = "VaultError"


class NotFound(VaultError):
    """Raised when a vault index is out of range."""

    code = "NotFound"


class Unauthorized(VaultError):
    """Raised when a non-owner attempts an owner-only operation."""

    code = "Unauthorized"


class Expired(VaultError):
    """Raised when an operation is attempted at or after series expiration."""

    code = "Expired"


class InvalidAmount(VaultError):
    """Raised for non-positive or out-of-domain amounts."""

    code = "InvalidAmount"


class InsufficientCollateral(VaultError):
    """Raised when issuance, withdrawal or a liquidation payout exceeds what the collateral supports."""

    code = "InsufficientCollateral"


class InsufficientDebt(VaultError):
    """Raised when a redeem or liquidate amount exceeds the vault's debt."""

    code = "InsufficientDebt"


class InsufficientBalance(VaultError):
    """Raised by a token ledger when a holder lacks the tokens to burn or move."""

    code = "InsufficientBalance"


class InsufficientAllowance(InsufficientBalance):
    """Raised when a spender's allowance does not cover the amount."""

    code = "InsufficientAllowance"


class VaultSafe(VaultError):
    """Raised when liquidation is attempted on a safe vault."""

    code = "VaultSafe"


class ExceedsLiquidationCap(VaultError):
    """Raised when a liquidation amount exceeds the per-call cap."""

    code = "ExceedsLiquidationCap"


class OracleUnavailable(VaultError):
    """Raised when the price feed fails or returns an unusable quote."""

    code = "OracleUnavailable"


class VaultInvariantError(VaultError):
    """Raised when a candidate post-state violates one or more invariants."""

    code = "VaultInvariantError"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


class ConfigError(ValueError):
    """Raised when a contract configuration file is malformed."""
