"""Registry of vaults and their configuration."""

import logging
from datetime import datetime
from threading import Lock
from typing import List

from vault_ledger.accounting.fees import validate_fee_bounds
from vault_ledger.exceptions import InvalidAddressError, InvalidVaultIdError
from vault_ledger.models import Vault, is_null_ref
from vault_ledger.strategy.port import AssetPort, StrategyPort

logger = logging.getLogger(__name__)


class VaultRegistry:
    """
    Owns the append-only list of vaults and the fee recipient.

    Vault ids are list ordinals; vaults are never removed, only
    deactivated, so ids stay stable for existing positions. Appends and
    fee recipient changes are serialized on one lock.
    """

    def __init__(self, fee_recipient: str):
        """
        Initialize the registry.

        Args:
            fee_recipient: Account that receives performance and withdrawal fees
        """
        if is_null_ref(fee_recipient):
            raise InvalidAddressError("Fee recipient must not be null")
        self._vaults: List[Vault] = []
        self._fee_recipient = fee_recipient
        self._lock = Lock()

    @property
    def fee_recipient(self) -> str:
        return self._fee_recipient

    def vault_count(self) -> int:
        return len(self._vaults)

    def vaults(self) -> List[Vault]:
        return list(self._vaults)

    def get(self, vault_id: int) -> Vault:
        """
        Look up a vault by id.

        Raises:
            InvalidVaultIdError: If the id is not an int in range
        """
        if (
            not isinstance(vault_id, int)
            or isinstance(vault_id, bool)
            or not 0 <= vault_id < len(self._vaults)
        ):
            raise InvalidVaultIdError(vault_id)
        return self._vaults[vault_id]

    def add_vault(
        self,
        strategy: StrategyPort,
        asset: AssetPort,
        name: str,
        performance_fee_bps: int,
        withdrawal_fee_bps: int,
        now: datetime,
    ) -> Vault:
        """
        Append a new active vault with no shares.

        Args:
            strategy: StrategyPort backing the vault
            asset: AssetPort the vault accounts in
            name: Display name
            performance_fee_bps: Fee on harvested profit
            withdrawal_fee_bps: Fee on withdrawals inside the lock window
            now: Creation time, used as the initial compound time

        Returns:
            The created Vault
        """
        if is_null_ref(strategy):
            raise InvalidAddressError("Strategy must not be null")
        if is_null_ref(asset):
            raise InvalidAddressError("Asset must not be null")
        validate_fee_bounds(performance_fee_bps, withdrawal_fee_bps)

        with self._lock:
            vault = Vault(
                id=len(self._vaults),
                name=name,
                strategy=strategy,
                asset=asset,
                last_compound_time=now,
                performance_fee_bps=performance_fee_bps,
                withdrawal_fee_bps=withdrawal_fee_bps,
            )
            self._vaults.append(vault)
        logger.info(
            f"Added vault {vault.id} ({name}): "
            f"performance={performance_fee_bps}bps, withdrawal={withdrawal_fee_bps}bps"
        )
        return vault

    def set_active(self, vault_id: int, active: bool) -> Vault:
        vault = self.get(vault_id)
        vault.active = active
        logger.info(f"Vault {vault_id} {'activated' if active else 'deactivated'}")
        return vault

    def set_fees(
        self, vault_id: int, performance_fee_bps: int, withdrawal_fee_bps: int
    ) -> Vault:
        vault = self.get(vault_id)
        validate_fee_bounds(performance_fee_bps, withdrawal_fee_bps)
        vault.performance_fee_bps = performance_fee_bps
        vault.withdrawal_fee_bps = withdrawal_fee_bps
        logger.info(
            f"Vault {vault_id} fees set: "
            f"performance={performance_fee_bps}bps, withdrawal={withdrawal_fee_bps}bps"
        )
        return vault

    def set_fee_recipient(self, fee_recipient: str) -> None:
        if is_null_ref(fee_recipient):
            raise InvalidAddressError("Fee recipient must not be null")
        with self._lock:
            self._fee_recipient = fee_recipient
        logger.info(f"Fee recipient set to {fee_recipient}")
