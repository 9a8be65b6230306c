"""
Configuration loading and operation replay around ``OptionsContract``.
"""

from .config import ContractConfig, build_contract, load_config, parse_config
from .operations import (
    Operation,
    OperationKind,
    OperationResult,
    apply_operation,
    apply_operation_or_raise,
    parse_operation,
    parse_operations,
    replay,
)

__all__ = [
    "ContractConfig",
    "build_contract",
    "load_config",
    "parse_config",
    "Operation",
    "OperationKind",
    "OperationResult",
    "apply_operation",
    "apply_operation_or_raise",
    "parse_operation",
    "parse_operations",
    "replay",
]
