"""Core ledger orchestration."""

from vault_ledger.core.events import EventBus
from vault_ledger.core.facade import AccountingFacade, create_facade
from vault_ledger.core.guard import VaultGuard, nonreentrant

__all__ = [
    "AccountingFacade",
    "create_facade",
    "EventBus",
    "VaultGuard",
    "nonreentrant",
]
