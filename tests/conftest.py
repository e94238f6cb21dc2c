"""Shared fixtures: manual clock, in-memory collaborators, facade."""

from datetime import datetime, timedelta, timezone

import pytest

from config.settings import LedgerSettings
from vault_ledger.core import create_facade
from vault_ledger.strategy import InMemoryAsset, SimulatedStrategy

START = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
LEDGER = "vault-ledger"
TREASURY = "treasury"


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def asset() -> InMemoryAsset:
    token = InMemoryAsset("USD")
    for account in ("alice", "bob", "carol"):
        token.mint(account, 1_000_000)
    return token


@pytest.fixture
def strategy(asset) -> SimulatedStrategy:
    return SimulatedStrategy(asset, LEDGER)


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings(ledger_address=LEDGER, fee_recipient=TREASURY)


@pytest.fixture
def facade(settings, clock):
    return create_facade(settings, clock=clock)


@pytest.fixture
def vault_id(facade, strategy, asset) -> int:
    """Vault with a 10% performance fee and a 0.5% withdrawal fee."""
    return facade.add_vault(strategy, asset, "USD vault", 1000, 50)
