"""Tests for the vault registry."""

import threading

import pytest

from tests.conftest import START
from vault_ledger.accounting import VaultRegistry
from vault_ledger.exceptions import (
    FeeOutOfBoundsError,
    InvalidAddressError,
    InvalidVaultIdError,
)
from vault_ledger.models import ZERO_ADDRESS
from vault_ledger.strategy import AssetPort, StrategyPort


@pytest.fixture
def registry() -> VaultRegistry:
    return VaultRegistry("treasury")


class TestAddVault:
    def test_ids_are_ordinals(self, registry, strategy, asset) -> None:
        first = registry.add_vault(strategy, asset, "a", 0, 0, START)
        second = registry.add_vault(strategy, asset, "b", 0, 0, START)
        assert (first.id, second.id) == (0, 1)
        assert registry.vault_count() == 2

    def test_concurrent_adds_get_distinct_ordinals(self, registry, strategy, asset) -> None:
        def run(worker):
            for i in range(50):
                registry.add_vault(strategy, asset, f"w{worker}-{i}", 0, 0, START)

        threads = [threading.Thread(target=run, args=(w,)) for w in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        vaults = registry.vaults()
        assert len(vaults) == 400
        assert [v.id for v in vaults] == list(range(400))
        assert all(registry.get(v.id) is v for v in vaults)

    def test_initial_state(self, registry, strategy, asset) -> None:
        vault = registry.add_vault(strategy, asset, "a", 1000, 50, START)
        assert vault.active
        assert vault.total_shares == 0
        assert vault.compound_count == 0
        assert vault.last_compound_time == START
        assert vault.performance_fee_bps == 1000
        assert vault.withdrawal_fee_bps == 50

    def test_rejects_null_strategy(self, registry, asset) -> None:
        with pytest.raises(InvalidAddressError, match="Strategy"):
            registry.add_vault(None, asset, "a", 0, 0, START)

    def test_rejects_zero_address_asset(self, registry, strategy) -> None:
        with pytest.raises(InvalidAddressError, match="Asset"):
            registry.add_vault(strategy, ZERO_ADDRESS, "a", 0, 0, START)

    def test_rejects_fees_above_caps(self, registry, strategy, asset) -> None:
        with pytest.raises(FeeOutOfBoundsError):
            registry.add_vault(strategy, asset, "a", 2001, 0, START)
        with pytest.raises(FeeOutOfBoundsError):
            registry.add_vault(strategy, asset, "a", 0, 101, START)
        assert registry.vault_count() == 0

    def test_accepts_fees_at_caps(self, registry, strategy, asset) -> None:
        vault = registry.add_vault(strategy, asset, "a", 2000, 100, START)
        assert vault.id == 0


class TestLookup:
    @pytest.mark.parametrize("bad_id", [-1, 1, 99, True, "0", None])
    def test_invalid_ids(self, registry, strategy, asset, bad_id) -> None:
        registry.add_vault(strategy, asset, "a", 0, 0, START)
        with pytest.raises(InvalidVaultIdError):
            registry.get(bad_id)

    def test_empty_registry(self, registry) -> None:
        with pytest.raises(InvalidVaultIdError):
            registry.get(0)


class TestConfiguration:
    def test_deactivate_and_reactivate(self, registry, strategy, asset) -> None:
        registry.add_vault(strategy, asset, "a", 0, 0, START)
        assert not registry.set_active(0, False).active
        assert registry.set_active(0, True).active

    def test_set_fees(self, registry, strategy, asset) -> None:
        registry.add_vault(strategy, asset, "a", 0, 0, START)
        vault = registry.set_fees(0, 1500, 75)
        assert (vault.performance_fee_bps, vault.withdrawal_fee_bps) == (1500, 75)

    def test_rejected_fees_leave_vault_unchanged(self, registry, strategy, asset) -> None:
        registry.add_vault(strategy, asset, "a", 1000, 50, START)
        with pytest.raises(FeeOutOfBoundsError):
            registry.set_fees(0, 1000, 500)
        vault = registry.get(0)
        assert (vault.performance_fee_bps, vault.withdrawal_fee_bps) == (1000, 50)

    def test_set_fees_invalid_vault(self, registry) -> None:
        with pytest.raises(InvalidVaultIdError):
            registry.set_fees(3, 0, 0)

    def test_fee_recipient(self, registry) -> None:
        registry.set_fee_recipient("dao")
        assert registry.fee_recipient == "dao"

    @pytest.mark.parametrize("recipient", ["", None, ZERO_ADDRESS])
    def test_rejects_null_fee_recipient(self, registry, recipient) -> None:
        with pytest.raises(InvalidAddressError):
            registry.set_fee_recipient(recipient)
        assert registry.fee_recipient == "treasury"

    def test_constructor_rejects_null_fee_recipient(self) -> None:
        with pytest.raises(InvalidAddressError):
            VaultRegistry("")


class TestCollaboratorPorts:
    def test_simulated_collaborators_satisfy_ports(self, strategy, asset) -> None:
        assert isinstance(strategy, StrategyPort)
        assert isinstance(asset, AssetPort)
