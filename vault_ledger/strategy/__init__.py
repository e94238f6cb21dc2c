"""Strategy and asset collaborators."""

from vault_ledger.strategy.port import AssetPort, StrategyPort
from vault_ledger.strategy.simulated import InMemoryAsset, SimulatedStrategy

__all__ = [
    "AssetPort",
    "StrategyPort",
    "InMemoryAsset",
    "SimulatedStrategy",
]
