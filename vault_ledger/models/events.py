"""Domain event records emitted by the ledger."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class EventType(str, Enum):
    VAULT_ADDED = "vault_added"
    VAULT_STATUS_CHANGED = "vault_status_changed"
    FEES_UPDATED = "fees_updated"
    FEE_RECIPIENT_UPDATED = "fee_recipient_updated"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    COMPOUND = "compound"
    EMERGENCY_WITHDRAW = "emergency_withdraw"


@dataclass(frozen=True)
class LedgerEvent:
    """Base record for everything the ledger emits."""

    @property
    def event_type(self) -> EventType:
        raise NotImplementedError

    def to_log_line(self) -> str:
        """Render as a single pipe-separated line for the events log."""
        fields = [f"{k}={v}" for k, v in self.__dict__.items() if k != "timestamp"]
        return f"{self.event_type.value.upper()} | " + " | ".join(fields)


@dataclass(frozen=True)
class VaultAdded(LedgerEvent):
    vault_id: int
    name: str
    strategy: Any
    asset: Any
    performance_fee_bps: int
    withdrawal_fee_bps: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return EventType.VAULT_ADDED


@dataclass(frozen=True)
class VaultStatusChanged(LedgerEvent):
    vault_id: int
    active: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return EventType.VAULT_STATUS_CHANGED


@dataclass(frozen=True)
class FeesUpdated(LedgerEvent):
    vault_id: int
    performance_fee_bps: int
    withdrawal_fee_bps: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return EventType.FEES_UPDATED


@dataclass(frozen=True)
class FeeRecipientUpdated(LedgerEvent):
    fee_recipient: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return EventType.FEE_RECIPIENT_UPDATED


@dataclass(frozen=True)
class Deposit(LedgerEvent):
    account: str
    vault_id: int
    amount: int  # Amount actually received
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return EventType.DEPOSIT


@dataclass(frozen=True)
class Withdraw(LedgerEvent):
    account: str
    vault_id: int
    amount: int  # Net of withdrawal fee
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return EventType.WITHDRAW


@dataclass(frozen=True)
class Compound(LedgerEvent):
    vault_id: int
    profit: int  # Gross, before performance fee
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return EventType.COMPOUND


@dataclass(frozen=True)
class EmergencyWithdraw(LedgerEvent):
    account: str
    vault_id: int
    amount: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return EventType.EMERGENCY_WITHDRAW
