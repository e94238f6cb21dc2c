"""In-memory asset and strategy for simulations and tests."""

import logging
from collections import defaultdict
from typing import Callable, DefaultDict, List, Optional, Set

logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10_000

TransferHook = Callable[[str, str, int], None]


class InMemoryAsset:
    """
    Balance-map token.

    Supports a transfer tax (fee-on-transfer tokens), frozen holders whose
    transfers are refused outright, and post-transfer hooks that let tests
    model callbacks into the ledger.
    """

    def __init__(self, symbol: str = "TKN", transfer_fee_bps: int = 0):
        """
        Initialize the asset.

        Args:
            symbol: Display symbol
            transfer_fee_bps: Portion of each transfer burned in transit
        """
        self.symbol = symbol
        self.transfer_fee_bps = transfer_fee_bps
        self._balances: DefaultDict[str, int] = defaultdict(int)
        self._hooks: List[TransferHook] = []
        self._frozen: Set[str] = set()

    def __repr__(self) -> str:
        return f"InMemoryAsset({self.symbol})"

    def mint(self, holder: str, amount: int) -> None:
        self._balances[holder] += amount

    def burn(self, holder: str, amount: int) -> None:
        self._balances[holder] -= min(amount, self._balances.get(holder, 0))

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def freeze(self, holder: str) -> None:
        """Refuse every transfer to or from `holder`."""
        self._frozen.add(holder)

    def unfreeze(self, holder: str) -> None:
        self._frozen.discard(holder)

    def add_transfer_hook(self, hook: TransferHook) -> None:
        self._hooks.append(hook)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Transfer amount must be non-negative")
        for holder in (sender, recipient):
            if holder in self._frozen:
                raise PermissionError(f"{self.symbol} holder {holder} is frozen")
        if self._balances.get(sender, 0) < amount:
            raise ValueError(
                f"Insufficient {self.symbol} balance for {sender}: "
                f"{self._balances.get(sender, 0)} < {amount}"
            )
        tax = amount * self.transfer_fee_bps // BPS_DENOMINATOR
        self._balances[sender] -= amount
        self._balances[recipient] += amount - tax
        logger.debug(f"{self.symbol} transfer {sender} -> {recipient}: {amount} (tax {tax})")
        for hook in list(self._hooks):
            hook(sender, recipient, amount)


class SimulatedStrategy:
    """
    Strategy that holds the asset at its own address.

    Yield is queued with `accrue()` and lands in the balance on the next
    `harvest()`, or immediately with `grow()`.
    """

    def __init__(
        self,
        asset: InMemoryAsset,
        ledger_address: str,
        address: str = "strategy",
    ):
        """
        Initialize the strategy.

        Args:
            asset: Underlying asset
            ledger_address: Where withdrawals are delivered
            address: This strategy's holder id on the asset
        """
        self.asset = asset
        self.ledger_address = ledger_address
        self.address = address
        self.pending_yield = 0
        self.harvest_calls = 0
        self.on_harvest: Optional[Callable[[], None]] = None
        self.fail_next_withdraw = False

    def __repr__(self) -> str:
        return f"SimulatedStrategy({self.address})"

    def accrue(self, amount: int) -> None:
        """Queue yield to be realized by the next harvest."""
        self.pending_yield += amount

    def grow(self, amount: int) -> None:
        """Increase the balance without a harvest."""
        self.asset.mint(self.address, amount)

    def lose(self, amount: int) -> None:
        """Drop funds from the balance (strategy loss)."""
        self.asset.burn(self.address, amount)

    def harvest(self) -> None:
        self.harvest_calls += 1
        if self.pending_yield:
            self.asset.mint(self.address, self.pending_yield)
            self.pending_yield = 0
        if self.on_harvest is not None:
            self.on_harvest()

    def withdraw(self, amount: int) -> None:
        if self.fail_next_withdraw:
            self.fail_next_withdraw = False
            raise RuntimeError("Strategy withdraw failed")
        self.asset.transfer(self.address, self.ledger_address, amount)

    def balance_of(self) -> int:
        return self.asset.balance_of(self.address)
