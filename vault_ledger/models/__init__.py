"""Data models for the vault ledger."""

from vault_ledger.models.events import (
    Compound,
    Deposit,
    EmergencyWithdraw,
    EventType,
    FeeRecipientUpdated,
    FeesUpdated,
    LedgerEvent,
    VaultAdded,
    VaultStatusChanged,
    Withdraw,
)
from vault_ledger.models.vault import (
    ZERO_ADDRESS,
    UserPosition,
    Vault,
    is_null_ref,
)

__all__ = [
    # Events
    "Compound",
    "Deposit",
    "EmergencyWithdraw",
    "EventType",
    "FeeRecipientUpdated",
    "FeesUpdated",
    "LedgerEvent",
    "VaultAdded",
    "VaultStatusChanged",
    "Withdraw",
    # Vault
    "ZERO_ADDRESS",
    "UserPosition",
    "Vault",
    "is_null_ref",
]
