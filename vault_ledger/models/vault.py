"""Vault and user position data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from vault_ledger.strategy.port import AssetPort, StrategyPort

ZERO_ADDRESS = "0x" + "0" * 40


def is_null_ref(ref: Any) -> bool:
    """True for None, empty strings and the zero address."""
    if ref is None:
        return True
    if isinstance(ref, str):
        return ref == "" or ref.lower() == ZERO_ADDRESS
    return False


@dataclass
class Vault:
    """Represents one registered pool backed by a single strategy."""

    id: int
    name: str
    strategy: StrategyPort
    asset: AssetPort
    last_compound_time: datetime
    performance_fee_bps: int
    withdrawal_fee_bps: int
    active: bool = True
    total_shares: int = 0
    compound_count: int = 0

    @property
    def has_shares(self) -> bool:
        """Check if any shares are outstanding."""
        return self.total_shares > 0


@dataclass
class UserPosition:
    """An account's claim on a vault."""

    shares: int = 0
    last_deposit_time: datetime = datetime.min.replace(tzinfo=timezone.utc)
    reward_debt: int = 0  # Never written by deposit/withdraw

    @property
    def is_empty(self) -> bool:
        """Check if the position holds no shares."""
        return self.shares == 0
