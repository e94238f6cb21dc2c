"""Custom exceptions for ledger operations."""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    pass


class VaultError(LedgerError):
    """Base class for vault-related errors."""

    def __init__(self, message: str, vault_id: Optional[int] = None):
        super().__init__(message)
        self.vault_id = vault_id


class InvalidVaultIdError(VaultError):
    """Vault id is not in the registry."""

    def __init__(self, vault_id):
        super().__init__(f"Invalid vault id: {vault_id!r}", vault_id=vault_id)


class InactiveVaultError(VaultError):
    """Deposit attempted against a deactivated vault."""

    def __init__(self, vault_id: int):
        super().__init__(f"Vault {vault_id} is not active", vault_id=vault_id)


class InsolventVaultError(VaultError):
    """Strategy reports no balance while shares are outstanding."""

    pass


class PositionError(LedgerError):
    """Base class for position-related errors."""

    pass


class InvalidShareAmountError(PositionError):
    """Share amount is zero or exceeds the account's position."""

    pass


class InvalidAmountError(PositionError):
    """Deposit amount is not positive or too small to mint shares."""

    pass


class ConfigurationError(LedgerError):
    """Invalid administrative configuration."""

    pass


class InvalidAddressError(ConfigurationError):
    """A required reference is null or the zero address."""

    pass


class FeeOutOfBoundsError(ConfigurationError):
    """Fee rate exceeds the protocol maximum."""

    def __init__(self, message: str, fee_bps: Optional[int] = None, max_bps: Optional[int] = None):
        super().__init__(message)
        self.fee_bps = fee_bps
        self.max_bps = max_bps


class ReentrancyError(LedgerError):
    """A mutating call re-entered a vault that is already in use."""

    def __init__(self, vault_id: int):
        super().__init__(f"Re-entrant call on vault {vault_id}")
        self.vault_id = vault_id
