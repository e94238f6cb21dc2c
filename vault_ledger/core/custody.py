"""Value movement between accounts, the ledger and strategies."""

import logging

from vault_ledger.accounting.registry import VaultRegistry
from vault_ledger.models import Vault

logger = logging.getLogger(__name__)


class Custody:
    """
    Moves the underlying asset on the ledger's behalf.

    Every inbound leg is measured as the change in the ledger's own
    balance, so fee-on-transfer assets are credited what actually arrived.
    """

    def __init__(self, address: str, registry: VaultRegistry):
        """
        Initialize custody.

        Args:
            address: The ledger's holder id on every asset
            registry: Registry providing the current fee recipient
        """
        self.address = address
        self.registry = registry

    def held(self, vault: Vault) -> int:
        return vault.asset.balance_of(self.address)

    def pull(self, vault: Vault, account: str, amount: int) -> int:
        """Transfer from an account into custody; returns the amount received."""
        before = self.held(vault)
        vault.asset.transfer(account, self.address, amount)
        received = self.held(vault) - before
        if received != amount:
            logger.debug(f"Vault {vault.id}: requested {amount}, received {received}")
        return received

    def push(self, vault: Vault, recipient: str, amount: int) -> None:
        if amount > 0:
            vault.asset.transfer(self.address, recipient, amount)

    def forward_to_strategy(self, vault: Vault, amount: int) -> int:
        """Send custody funds to the vault's strategy; returns what the strategy gained."""
        before = vault.strategy.balance_of()
        self.push(vault, vault.strategy.address, amount)
        return vault.strategy.balance_of() - before

    def release_from_strategy(self, vault: Vault, amount: int) -> int:
        """Withdraw from the vault's strategy into custody; returns the amount received."""
        if amount <= 0:
            return 0
        before = self.held(vault)
        vault.strategy.withdraw(amount)
        return self.held(vault) - before

    def return_stranded(self, vault: Vault, baseline: int) -> int:
        """
        Forward custody funds above `baseline` back to the strategy.

        Used after a failed payout so nothing is left sitting in custody.

        Returns:
            Amount forwarded
        """
        stranded = self.held(vault) - baseline
        if stranded <= 0:
            return 0
        self.push(vault, vault.strategy.address, stranded)
        logger.warning(f"Vault {vault.id}: returned {stranded} stranded in custody to strategy")
        return stranded

    def route_fee(self, vault: Vault, fee: int) -> int:
        """Pull a fee out of the strategy and pay it to the fee recipient."""
        baseline = self.held(vault)
        received = self.release_from_strategy(vault, fee)
        try:
            self.push(vault, self.registry.fee_recipient, received)
        except Exception:
            self.return_stranded(vault, baseline)
            raise
        logger.debug(f"Vault {vault.id}: routed fee {received} to {self.registry.fee_recipient}")
        return received
