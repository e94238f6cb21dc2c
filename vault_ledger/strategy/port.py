"""Interfaces of the external collaborators the ledger consults."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class StrategyPort(Protocol):
    """
    Capital deployment module backing one vault.

    The ledger only ever harvests, withdraws and reads the balance.
    Withdrawn funds are delivered to the ledger's custody address.
    """

    address: str

    def harvest(self) -> None:
        """Collect rewards into the reported balance."""
        ...

    def withdraw(self, amount: int) -> None:
        """Release `amount` of the underlying asset to the ledger."""
        ...

    def balance_of(self) -> int:
        """Total underlying managed for the vault."""
        ...


@runtime_checkable
class AssetPort(Protocol):
    """Unit-of-account token moved in and out of the ledger."""

    def balance_of(self, holder: str) -> int:
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        ...
