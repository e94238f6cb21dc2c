"""Harvest cadence and performance fee bookkeeping."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from vault_ledger.accounting.fees import performance_fee
from vault_ledger.accounting.registry import VaultRegistry
from vault_ledger.models import Compound, LedgerEvent, Vault

logger = logging.getLogger(__name__)

MIN_COMPOUND_INTERVAL = timedelta(minutes=30)


class CompoundOutcome(str, Enum):
    COOLING = "cooling"  # Inside the minimum interval, nothing done
    NO_PROFIT = "no_profit"  # Harvested, balance did not grow
    PROFIT = "profit"  # Harvested, fee skimmed, cooldown reset


@dataclass
class CompoundResult:
    """Result of one compound attempt."""

    vault_id: int
    outcome: CompoundOutcome
    profit: int = 0
    fee: int = 0

    @property
    def compounded(self) -> bool:
        return self.outcome == CompoundOutcome.PROFIT


class CompoundEngine:
    """
    Harvests a vault's strategy at most once per interval with profit.

    Only a harvest that grows the balance resets the cooldown; a
    harvest that finds nothing leaves the vault eligible to retry.
    """

    def __init__(
        self,
        registry: VaultRegistry,
        route_fee: Callable[[Vault, int], None],
        emit: Callable[[LedgerEvent], None],
        min_interval: timedelta = MIN_COMPOUND_INTERVAL,
    ):
        """
        Initialize the engine.

        Args:
            registry: Vault registry
            route_fee: Pulls a fee out of the vault's strategy to the fee recipient
            emit: Event sink
            min_interval: Minimum time between profitable compounds
        """
        self.registry = registry
        self.route_fee = route_fee
        self.emit = emit
        self.min_interval = min_interval

    def is_cooling(self, vault: Vault, now: datetime) -> bool:
        return now < vault.last_compound_time + self.min_interval

    def next_eligible_time(self, vault_id: int) -> datetime:
        return self.registry.get(vault_id).last_compound_time + self.min_interval

    def try_compound(self, vault_id: int, now: datetime) -> CompoundResult:
        """
        Run one pass of the compound state machine for a vault.

        Args:
            vault_id: Vault to compound
            now: Current time

        Returns:
            CompoundResult describing what happened
        """
        vault = self.registry.get(vault_id)

        if self.is_cooling(vault, now):
            logger.debug(
                f"Vault {vault_id} cooling until "
                f"{vault.last_compound_time + self.min_interval:%Y-%m-%d %H:%M:%S}"
            )
            return CompoundResult(vault_id, CompoundOutcome.COOLING)

        balance_before = vault.strategy.balance_of()
        vault.strategy.harvest()
        balance_after = vault.strategy.balance_of()
        profit = balance_after - balance_before

        if profit <= 0:
            logger.debug(f"Vault {vault_id} harvest found no profit ({profit})")
            return CompoundResult(vault_id, CompoundOutcome.NO_PROFIT, profit=profit)

        fee = performance_fee(profit, vault.performance_fee_bps)
        if fee > 0:
            self.route_fee(vault, fee)

        vault.last_compound_time = max(vault.last_compound_time, now)
        vault.compound_count += 1
        logger.info(
            f"Compounded vault {vault_id}: profit={profit}, fee={fee}, "
            f"count={vault.compound_count}"
        )
        self.emit(Compound(vault_id=vault_id, profit=profit, timestamp=now))
        return CompoundResult(vault_id, CompoundOutcome.PROFIT, profit=profit, fee=fee)

