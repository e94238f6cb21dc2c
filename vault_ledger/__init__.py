"""Share-based accounting ledger for auto-compounding vaults."""

__version__ = "0.1.0"
