"""Configuration management using Pydantic Settings."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file at module import time
load_dotenv()


class LedgerSettings(BaseSettings):
    """Ledger engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        extra="ignore",
    )

    # Custody
    ledger_address: str = Field(
        default="vault-ledger", min_length=1, description="Holder id of the ledger on every asset"
    )
    fee_recipient: str = Field(
        default="fee-recipient", description="Account receiving performance and withdrawal fees"
    )

    # Timing
    min_compound_interval_seconds: int = Field(
        default=1800, ge=0, description="Minimum time between profitable compounds"
    )
    withdrawal_fee_lock_seconds: int = Field(
        default=86400, ge=0, description="Withdrawals this soon after a deposit pay the withdrawal fee"
    )

    # Events
    event_history_size: int = Field(
        default=10000, ge=0, description="Events kept in memory (0 = unbounded)"
    )

    @field_validator("ledger_address", "fee_recipient")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip surrounding whitespace from identities."""
        return v.strip()


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    level: str = Field(default="INFO", description="Log level")
    file: Path = Field(default=Path("logs/ledger.log"), description="Log file path")
    events_file: Path = Field(
        default=Path("logs/events.log"), description="One line per ledger event"
    )
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0, description="Rotate log files at this size")
    backup_count: int = Field(default=5, ge=0, description="Rotated log files kept")


class Settings(BaseSettings):
    """Main settings container."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, config_path: Path = Path("config/config.yaml")) -> "Settings":
        """Load settings from YAML file, with env vars taking precedence."""
        yaml_config = {}
        if config_path.exists():
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}

        ledger_config = yaml_config.get("ledger", {})
        logging_config = yaml_config.get("logging", {})

        # Environment variables take precedence over YAML
        for key in list(ledger_config):
            if os.environ.get(f"LEDGER_{key.upper()}"):
                ledger_config.pop(key)
        for key in list(logging_config):
            if os.environ.get(f"LOG_{key.upper()}"):
                logging_config.pop(key)

        return cls(
            ledger=LedgerSettings(**ledger_config),
            logging=LoggingSettings(**logging_config),
        )


def load_settings(config_path: Path = Path("config/config.yaml")) -> Settings:
    """Load settings from config file and environment."""
    if config_path.exists():
        return Settings.from_yaml(config_path)
    return Settings()
