"""Share accounting, fees and compounding."""

from vault_ledger.accounting.compound import (
    CompoundEngine,
    CompoundOutcome,
    CompoundResult,
)
from vault_ledger.accounting.fees import (
    MAX_PERFORMANCE_FEE,
    MAX_WITHDRAWAL_FEE,
    performance_fee,
    validate_fee_bounds,
    withdrawal_fee,
    withdrawal_fee_for,
)
from vault_ledger.accounting.registry import VaultRegistry
from vault_ledger.accounting.shares import LedgerSnapshot, ShareLedger

__all__ = [
    "CompoundEngine",
    "CompoundOutcome",
    "CompoundResult",
    "MAX_PERFORMANCE_FEE",
    "MAX_WITHDRAWAL_FEE",
    "performance_fee",
    "validate_fee_bounds",
    "withdrawal_fee",
    "withdrawal_fee_for",
    "VaultRegistry",
    "LedgerSnapshot",
    "ShareLedger",
]
