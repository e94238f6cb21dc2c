"""Tests for fee calculations and bounds."""

import pytest
from datetime import timedelta

from tests.conftest import START
from vault_ledger.accounting.fees import (
    MAX_PERFORMANCE_FEE,
    MAX_WITHDRAWAL_FEE,
    is_within_fee_lock,
    performance_fee,
    validate_fee_bounds,
    withdrawal_fee,
    withdrawal_fee_for,
)
from vault_ledger.exceptions import FeeOutOfBoundsError


class TestFeeAmounts:
    def test_performance_fee(self) -> None:
        assert performance_fee(100, 1000) == 10

    def test_performance_fee_floors(self) -> None:
        assert performance_fee(99, 1000) == 9
        assert performance_fee(9, 1000) == 0

    def test_withdrawal_fee_floors(self) -> None:
        assert withdrawal_fee(1090, 50) == 5

    def test_zero_rate(self) -> None:
        assert performance_fee(1_000_000, 0) == 0
        assert withdrawal_fee(1_000_000, 0) == 0


class TestFeeLock:
    def test_inside_window(self) -> None:
        now = START + timedelta(hours=23, minutes=59, seconds=59)
        assert is_within_fee_lock(now, START)

    def test_boundary_is_outside(self) -> None:
        assert not is_within_fee_lock(START + timedelta(days=1), START)

    def test_after_window(self) -> None:
        assert not is_within_fee_lock(START + timedelta(days=2), START)

    def test_fee_charged_inside_window(self) -> None:
        fee = withdrawal_fee_for(10_000, 50, START + timedelta(hours=1), START)
        assert fee == 50

    def test_no_fee_after_window(self) -> None:
        fee = withdrawal_fee_for(10_000, 50, START + timedelta(days=1), START)
        assert fee == 0

    def test_custom_lock(self) -> None:
        lock = timedelta(hours=1)
        assert withdrawal_fee_for(10_000, 50, START + timedelta(minutes=30), START, lock) == 50
        assert withdrawal_fee_for(10_000, 50, START + timedelta(hours=1), START, lock) == 0


class TestFeeBounds:
    def test_accepts_caps(self) -> None:
        validate_fee_bounds(MAX_PERFORMANCE_FEE, MAX_WITHDRAWAL_FEE)

    def test_accepts_zero(self) -> None:
        validate_fee_bounds(0, 0)

    def test_rejects_performance_above_cap(self) -> None:
        with pytest.raises(FeeOutOfBoundsError, match="Performance"):
            validate_fee_bounds(2001, 0)

    def test_rejects_withdrawal_above_cap(self) -> None:
        with pytest.raises(FeeOutOfBoundsError, match="Withdrawal") as exc_info:
            validate_fee_bounds(0, 101)
        assert exc_info.value.fee_bps == 101
        assert exc_info.value.max_bps == 100

    def test_rejects_negative(self) -> None:
        with pytest.raises(FeeOutOfBoundsError):
            validate_fee_bounds(-1, 0)
