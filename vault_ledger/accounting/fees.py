"""Performance and withdrawal fee calculations."""

from datetime import datetime, timedelta

from vault_ledger.exceptions import FeeOutOfBoundsError

BPS_DENOMINATOR = 10_000
MAX_PERFORMANCE_FEE = 2_000  # 20%
MAX_WITHDRAWAL_FEE = 100  # 1%
WITHDRAWAL_FEE_LOCK = timedelta(days=1)


def performance_fee(profit: int, bps: int) -> int:
    """Fee skimmed from harvested profit, floored."""
    return profit * bps // BPS_DENOMINATOR


def withdrawal_fee(amount: int, bps: int) -> int:
    """Fee taken from a gross withdrawal amount, floored."""
    return amount * bps // BPS_DENOMINATOR


def is_within_fee_lock(
    now: datetime,
    last_deposit_time: datetime,
    lock: timedelta = WITHDRAWAL_FEE_LOCK,
) -> bool:
    """
    Check whether a withdrawal falls inside the post-deposit lock window.

    The window is half-open: exactly `lock` after the deposit is outside.
    """
    return now < last_deposit_time + lock


def withdrawal_fee_for(
    amount: int,
    bps: int,
    now: datetime,
    last_deposit_time: datetime,
    lock: timedelta = WITHDRAWAL_FEE_LOCK,
) -> int:
    """Withdrawal fee after applying the time-lock rule."""
    if not is_within_fee_lock(now, last_deposit_time, lock):
        return 0
    return withdrawal_fee(amount, bps)


def validate_fee_bounds(performance_fee_bps: int, withdrawal_fee_bps: int) -> None:
    """
    Reject fee configuration outside the protocol caps.

    Raises:
        FeeOutOfBoundsError: If either rate is negative or above its cap
    """
    if not 0 <= performance_fee_bps <= MAX_PERFORMANCE_FEE:
        raise FeeOutOfBoundsError(
            f"Performance fee {performance_fee_bps} bps outside 0..{MAX_PERFORMANCE_FEE}",
            fee_bps=performance_fee_bps,
            max_bps=MAX_PERFORMANCE_FEE,
        )
    if not 0 <= withdrawal_fee_bps <= MAX_WITHDRAWAL_FEE:
        raise FeeOutOfBoundsError(
            f"Withdrawal fee {withdrawal_fee_bps} bps outside 0..{MAX_WITHDRAWAL_FEE}",
            fee_bps=withdrawal_fee_bps,
            max_bps=MAX_WITHDRAWAL_FEE,
        )
