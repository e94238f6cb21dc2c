"""Share accounting: conversions between assets and vault shares."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from threading import Lock
from typing import Dict, Optional

from vault_ledger.accounting.registry import VaultRegistry
from vault_ledger.exceptions import InsolventVaultError, InvalidShareAmountError
from vault_ledger.models import UserPosition, Vault

logger = logging.getLogger(__name__)


@dataclass
class LedgerSnapshot:
    """Copy of one vault's ledger state, used to undo a failed call."""

    vault: Vault
    positions: Dict[str, UserPosition]


class ShareLedger:
    """
    Tracks per-account shares and converts amounts to shares and back.

    Every conversion floors, so rounding always favors the pool.
    Positions are sparse: an unknown (vault, account) reads as zero.
    """

    def __init__(self, registry: VaultRegistry):
        """
        Initialize the ledger.

        Args:
            registry: Vault registry the share totals live on
        """
        self.registry = registry
        self._positions: Dict[int, Dict[str, UserPosition]] = {}
        self._total_users = 0
        self._users_lock = Lock()

    @property
    def total_users(self) -> int:
        return self._total_users

    def _vault_positions(self, vault_id: int) -> Dict[str, UserPosition]:
        return self._positions.setdefault(vault_id, {})

    def get_position(self, vault_id: int, account: str) -> UserPosition:
        """Return a copy of the account's position (zero if none)."""
        self.registry.get(vault_id)
        position = self._vault_positions(vault_id).get(account)
        if position is None:
            return UserPosition()
        return replace(position)

    def get_shares(self, vault_id: int, account: str) -> int:
        return self.get_position(vault_id, account).shares

    def positions(self, vault_id: int) -> Dict[str, UserPosition]:
        """All stored positions of a vault, keyed by account."""
        self.registry.get(vault_id)
        return {
            account: replace(position)
            for account, position in self._vault_positions(vault_id).items()
        }

    def shares_for_deposit(
        self, vault: Vault, amount: int, pool_balance: Optional[int] = None
    ) -> int:
        """
        Shares minted for depositing `amount`.

        Priced against the strategy's balance before the deposit lands, so
        accrued yield belongs to existing holders before the new deposit
        dilutes them.

        Args:
            vault: Target vault
            amount: Amount credited to the pool
            pool_balance: Strategy balance to price against (read live if None)
        """
        if not vault.has_shares:
            return amount
        balance = vault.strategy.balance_of() if pool_balance is None else pool_balance
        if balance <= 0:
            raise InsolventVaultError(
                f"Vault {vault.id} has {vault.total_shares} shares but no balance",
                vault_id=vault.id,
            )
        return amount * vault.total_shares // balance

    def amount_for_shares(self, vault: Vault, shares: int) -> int:
        """Underlying amount redeemable for `shares` (0 if no shares exist)."""
        if not vault.has_shares:
            return 0
        return shares * vault.strategy.balance_of() // vault.total_shares

    def mint(self, vault: Vault, account: str, shares: int, now: datetime) -> UserPosition:
        """
        Credit shares to an account and stamp its deposit time.

        The vault total and the position move together.
        """
        position = self._vault_positions(vault.id).setdefault(account, UserPosition())
        if position.shares == 0:
            with self._users_lock:
                self._total_users += 1
            logger.debug(f"New depositor {account} in vault {vault.id}")
        position.shares += shares
        position.last_deposit_time = now
        vault.total_shares += shares
        return replace(position)

    def burn(self, vault: Vault, account: str, shares: int) -> UserPosition:
        """
        Debit shares from an account.

        Raises:
            InvalidShareAmountError: If shares is not in 1..position.shares
        """
        position = self._vault_positions(vault.id).get(account, UserPosition())
        if shares <= 0 or shares > position.shares:
            raise InvalidShareAmountError(
                f"Cannot burn {shares} shares from {account} "
                f"(holds {position.shares}) in vault {vault.id}"
            )
        position.shares -= shares
        vault.total_shares -= shares
        return replace(position)

    def credit(self, vault: Vault, account: str, shares: int) -> UserPosition:
        """Give back shares for value returned to the pool after a failed payout."""
        position = self._vault_positions(vault.id).setdefault(account, UserPosition())
        position.shares += shares
        vault.total_shares += shares
        logger.warning(f"Re-credited {shares} shares to {account} in vault {vault.id}")
        return replace(position)

    def snapshot(self, vault_id: int) -> LedgerSnapshot:
        vault = self.registry.get(vault_id)
        return LedgerSnapshot(
            vault=replace(vault),
            positions={
                account: replace(position)
                for account, position in self._vault_positions(vault_id).items()
            },
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """Put a vault's record and positions back to a snapshot."""
        vault = self.registry.get(snapshot.vault.id)
        current = self._vault_positions(vault.id)
        new_users = sum(
            1
            for account, position in current.items()
            if position.shares > 0
            and snapshot.positions.get(account, UserPosition()).shares == 0
        )
        vault.__dict__.update(snapshot.vault.__dict__)
        self._positions[vault.id] = snapshot.positions
        with self._users_lock:
            self._total_users -= new_users
        logger.warning(f"Rolled back ledger state for vault {vault.id}")
