"""Public accounting surface of the vault ledger."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from config.settings import LedgerSettings
from vault_ledger.accounting import (
    CompoundEngine,
    CompoundResult,
    LedgerSnapshot,
    ShareLedger,
    VaultRegistry,
    withdrawal_fee_for,
)
from vault_ledger.core.custody import Custody
from vault_ledger.core.events import EventBus
from vault_ledger.core.guard import VaultGuard, nonreentrant
from vault_ledger.exceptions import (
    InactiveVaultError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidShareAmountError,
)
from vault_ledger.models import (
    Deposit,
    EmergencyWithdraw,
    FeeRecipientUpdated,
    FeesUpdated,
    UserPosition,
    Vault,
    VaultAdded,
    VaultStatusChanged,
    Withdraw,
    is_null_ref,
)
from vault_ledger.strategy import AssetPort, StrategyPort

logger = logging.getLogger(__name__)

PRICE_PRECISION = 10**18

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AccountingFacade:
    """
    Entry point for deposits, withdrawals and compounding.

    Every mutating call holds its vault's guard for its whole duration,
    including the calls out to strategies and assets, and compounds the
    vault before touching shares. Emergency withdrawal skips compounding.

    Usage:
        ledger = create_facade(settings.ledger)
        vault_id = ledger.add_vault(strategy, asset, "USDC", 1000, 50)
        shares = ledger.deposit(vault_id, 1_000, "alice")
        amount = ledger.withdraw(vault_id, shares, "alice")
    """

    def __init__(
        self,
        settings: LedgerSettings,
        clock: Optional[Clock] = None,
        events: Optional[EventBus] = None,
    ):
        """
        Initialize the facade and its components.

        Args:
            settings: Ledger configuration
            clock: Returns the current UTC time (defaults to the wall clock)
            events: Event bus (a new one is created if absent)
        """
        if is_null_ref(settings.ledger_address):
            raise InvalidAddressError("Ledger address must not be null")

        self.settings = settings
        self.clock = clock or utc_now
        self.events = events or EventBus(settings.event_history_size or None)
        self.guard = VaultGuard()
        self.withdrawal_fee_lock = timedelta(seconds=settings.withdrawal_fee_lock_seconds)

        self.registry = VaultRegistry(settings.fee_recipient)
        self.ledger = ShareLedger(self.registry)
        self.custody = Custody(settings.ledger_address, self.registry)
        self.engine = CompoundEngine(
            self.registry,
            route_fee=self.custody.route_fee,
            emit=self.events.emit,
            min_interval=timedelta(seconds=settings.min_compound_interval_seconds),
        )

    @property
    def address(self) -> str:
        return self.custody.address

    def _refund_deposit(
        self, vault: Vault, account: str, custody_before: int, pool_before: int
    ) -> int:
        """Recover a failed deposit from the strategy and custody and return it."""
        landed = vault.strategy.balance_of() - pool_before
        if landed > 0:
            self.custody.release_from_strategy(vault, landed)
        refund = self.custody.held(vault) - custody_before
        self.custody.push(vault, account, refund)
        logger.warning(f"Deposit into vault {vault.id} failed, refunded {refund} to {account}")
        return refund

    def _unwind_payout(
        self,
        vault: Vault,
        account: str,
        amount: int,
        snapshot: LedgerSnapshot,
        custody_before: int,
        pool_before: int,
    ) -> None:
        """
        Settle a redemption whose transfers failed part way.

        Anything still in custody goes back to the strategy. If the pool is
        then whole, the ledger state is restored outright. Otherwise the
        burn stands and the account is re-credited shares only for the part
        of `amount` that came back, priced so other holders keep their value.
        """
        self.custody.return_stranded(vault, custody_before)
        pool_now = vault.strategy.balance_of()
        paid_out = pool_before - pool_now
        if paid_out <= 0:
            self.ledger.restore(snapshot)
            return

        owed = amount - paid_out
        if owed > 0:
            remaining = pool_now - owed
            if vault.has_shares and remaining > 0:
                shares = owed * vault.total_shares // remaining
            else:
                shares = owed
            if shares:
                self.ledger.credit(vault, account, shares)
        logger.error(
            f"Payout from vault {vault.id} to {account} failed after {paid_out} "
            f"of {amount} left the pool"
        )

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def add_vault(
        self,
        strategy: StrategyPort,
        asset: AssetPort,
        name: str,
        performance_fee_bps: int,
        withdrawal_fee_bps: int,
    ) -> int:
        """
        Register a new vault.

        Returns:
            The new vault id
        """
        now = self.clock()
        vault = self.registry.add_vault(
            strategy, asset, name, performance_fee_bps, withdrawal_fee_bps, now
        )
        self.events.emit(
            VaultAdded(
                vault_id=vault.id,
                name=name,
                strategy=strategy,
                asset=asset,
                performance_fee_bps=performance_fee_bps,
                withdrawal_fee_bps=withdrawal_fee_bps,
                timestamp=now,
            )
        )
        return vault.id

    @nonreentrant
    def set_active(self, vault_id: int, active: bool) -> None:
        self.registry.set_active(vault_id, active)
        self.events.emit(
            VaultStatusChanged(vault_id=vault_id, active=active, timestamp=self.clock())
        )

    @nonreentrant
    def set_fees(
        self, vault_id: int, performance_fee_bps: int, withdrawal_fee_bps: int
    ) -> None:
        self.registry.set_fees(vault_id, performance_fee_bps, withdrawal_fee_bps)
        self.events.emit(
            FeesUpdated(
                vault_id=vault_id,
                performance_fee_bps=performance_fee_bps,
                withdrawal_fee_bps=withdrawal_fee_bps,
                timestamp=self.clock(),
            )
        )

    def set_fee_recipient(self, fee_recipient: str) -> None:
        self.registry.set_fee_recipient(fee_recipient)
        self.events.emit(
            FeeRecipientUpdated(fee_recipient=fee_recipient, timestamp=self.clock())
        )

    # ------------------------------------------------------------------
    # Accounting
    # ------------------------------------------------------------------

    @nonreentrant
    def deposit(self, vault_id: int, amount: int, account: str) -> int:
        """
        Deposit into a vault and mint shares for what actually arrived.

        Args:
            vault_id: Target vault
            amount: Requested amount to transfer from the account
            account: Depositing account

        Returns:
            Shares minted

        Raises:
            InvalidVaultIdError: Unknown vault
            InactiveVaultError: Vault is deactivated
            InvalidAmountError: Amount not positive or too small to mint shares
        """
        vault = self.registry.get(vault_id)
        if not vault.active:
            raise InactiveVaultError(vault_id)
        if amount <= 0:
            raise InvalidAmountError(f"Deposit amount must be positive, got {amount}")

        now = self.clock()
        self.engine.try_compound(vault_id, now)

        if self.ledger.shares_for_deposit(vault, amount) == 0:
            raise InvalidAmountError(
                f"Deposit of {amount} into vault {vault_id} is too small to mint shares"
            )

        custody_before = self.custody.held(vault)
        pool_before = vault.strategy.balance_of()
        try:
            received = self.custody.pull(vault, account, amount)
            credited = self.custody.forward_to_strategy(vault, received)
            shares = self.ledger.shares_for_deposit(vault, credited, pool_before)
            if shares == 0:
                raise InvalidAmountError(
                    f"Credited {credited} of {amount} into vault {vault_id}, "
                    f"too small to mint shares"
                )
        except Exception:
            self._refund_deposit(vault, account, custody_before, pool_before)
            raise
        self.ledger.mint(vault, account, shares, now)

        logger.info(
            f"Deposit: {account} -> vault {vault_id}: {credited} for {shares} shares "
            f"(total shares {vault.total_shares})"
        )
        self.events.emit(
            Deposit(account=account, vault_id=vault_id, amount=credited, timestamp=now)
        )
        return shares

    @nonreentrant
    def withdraw(self, vault_id: int, shares: int, account: str) -> int:
        """
        Burn shares and pay out their value, less any withdrawal fee.

        The fee applies only inside the lock window after the account's
        last deposit.

        Returns:
            Net amount paid to the account

        Raises:
            InvalidVaultIdError: Unknown vault
            InvalidShareAmountError: Shares zero or above the position
        """
        vault = self.registry.get(vault_id)
        position = self.ledger.get_position(vault_id, account)
        if shares <= 0 or shares > position.shares:
            raise InvalidShareAmountError(
                f"Cannot withdraw {shares} shares from vault {vault_id} "
                f"(holds {position.shares})"
            )

        now = self.clock()
        self.engine.try_compound(vault_id, now)

        amount = self.ledger.amount_for_shares(vault, shares)
        fee = withdrawal_fee_for(
            amount,
            vault.withdrawal_fee_bps,
            now,
            position.last_deposit_time,
            self.withdrawal_fee_lock,
        )
        snapshot = self.ledger.snapshot(vault_id)
        custody_before = self.custody.held(vault)
        pool_before = vault.strategy.balance_of()
        self.ledger.burn(vault, account, shares)
        try:
            received = self.custody.release_from_strategy(vault, amount)
            fee = min(fee, received)
            net = received - fee
            self.custody.push(vault, self.registry.fee_recipient, fee)
            self.custody.push(vault, account, net)
        except Exception:
            self._unwind_payout(
                vault, account, amount, snapshot, custody_before, pool_before
            )
            raise

        logger.info(
            f"Withdraw: {account} <- vault {vault_id}: {shares} shares for {amount} "
            f"(fee {fee}, net {net})"
        )
        self.events.emit(
            Withdraw(account=account, vault_id=vault_id, amount=net, timestamp=now)
        )
        return net

    @nonreentrant
    def compound(self, vault_id: int) -> CompoundResult:
        """Harvest the vault if it is out of its cooldown. Anyone may call."""
        return self.engine.try_compound(vault_id, self.clock())

    @nonreentrant
    def emergency_withdraw(self, vault_id: int, account: str) -> int:
        """
        Redeem all of the account's shares at the current, uncompounded
        price, with no withdrawal fee.

        Returns:
            Amount paid to the account
        """
        vault = self.registry.get(vault_id)
        position = self.ledger.get_position(vault_id, account)
        if position.shares == 0:
            raise InvalidShareAmountError(
                f"{account} holds no shares in vault {vault_id}"
            )

        now = self.clock()
        amount = self.ledger.amount_for_shares(vault, position.shares)
        snapshot = self.ledger.snapshot(vault_id)
        custody_before = self.custody.held(vault)
        pool_before = vault.strategy.balance_of()
        self.ledger.burn(vault, account, position.shares)
        try:
            received = self.custody.release_from_strategy(vault, amount)
            self.custody.push(vault, account, received)
        except Exception:
            self._unwind_payout(
                vault, account, amount, snapshot, custody_before, pool_before
            )
            raise

        logger.warning(
            f"Emergency withdraw: {account} <- vault {vault_id}: "
            f"{position.shares} shares for {received}"
        )
        self.events.emit(
            EmergencyWithdraw(
                account=account, vault_id=vault_id, amount=received, timestamp=now
            )
        )
        return received

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def pending_reward(self, vault_id: int, account: str) -> int:
        """Account's current entitlement minus its reward debt (0 when no shares)."""
        vault = self.registry.get(vault_id)
        position = self.ledger.get_position(vault_id, account)
        if position.shares == 0 or not vault.has_shares:
            return 0
        entitlement = self.ledger.amount_for_shares(vault, position.shares)
        return max(entitlement - position.reward_debt, 0)

    def vault_count(self) -> int:
        return self.registry.vault_count()

    def get_vault(self, vault_id: int) -> Vault:
        return replace(self.registry.get(vault_id))

    def get_user_shares(self, vault_id: int, account: str) -> int:
        return self.ledger.get_shares(vault_id, account)

    def get_position(self, vault_id: int, account: str) -> UserPosition:
        return self.ledger.get_position(vault_id, account)

    def total_users(self) -> int:
        return self.ledger.total_users

    def price_per_share(self, vault_id: int) -> int:
        """Underlying per PRICE_PRECISION shares (0 when no shares exist)."""
        vault = self.registry.get(vault_id)
        return self.ledger.amount_for_shares(vault, PRICE_PRECISION)

    def balance_of_underlying(self, vault_id: int, account: str) -> int:
        vault = self.registry.get(vault_id)
        return self.ledger.amount_for_shares(
            vault, self.ledger.get_shares(vault_id, account)
        )


def create_facade(
    settings: LedgerSettings,
    clock: Optional[Clock] = None,
    events: Optional[EventBus] = None,
) -> AccountingFacade:
    """
    Factory function to create the accounting facade.

    Args:
        settings: Ledger configuration
        clock: Optional clock override
        events: Optional shared event bus

    Returns:
        Configured AccountingFacade instance
    """
    return AccountingFacade(settings, clock=clock, events=events)
