"""
State tables for the options vault.
"""

from .balances import TokenLedger
from .events import Event, EventLog, EventRecord
from .vaults import Vault, VaultLedger

__all__ = [
    "TokenLedger",
    "Event",
    "EventLog",
    "EventRecord",
    "Vault",
    "VaultLedger",
]
