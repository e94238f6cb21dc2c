#!/usr/bin/env python3
"""Replay a deposit / compound / withdraw cycle against in-memory collaborators."""

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import LoggingSettings, load_settings
from vault_ledger.core import create_facade
from vault_ledger.strategy import InMemoryAsset, SimulatedStrategy


def _rotating_handler(
    path: Path, config: LoggingSettings, fmt: logging.Formatter
) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
    )
    handler.setFormatter(fmt)
    return handler


def setup_logging(config: LoggingSettings, log_level: str) -> None:
    """Send ledger logs to the console and a rotating file, events to their own file."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%H:%M:%S")
    )
    root_logger.addHandler(console_handler)

    root_logger.addHandler(
        _rotating_handler(
            config.file,
            config,
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ),
        )
    )

    # Event lines are already rendered by the bus, so only a timestamp is added
    events_logger = logging.getLogger("events")
    events_logger.addHandler(
        _rotating_handler(
            config.events_file,
            config,
            logging.Formatter("%(asctime)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"),
        )
    )
    events_logger.setLevel(logging.INFO)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Vault ledger simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_simulation.py                     # Defaults from config.yaml
  python scripts/run_simulation.py --yield 250         # Harvest 250 units of yield
  python scripts/run_simulation.py --log-level DEBUG   # Enable debug logging
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/config.yaml"),
        help="Path to config file (default: config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level from config",
    )
    parser.add_argument("--deposit", type=int, default=1000, help="Amount deposited")
    parser.add_argument("--yield", dest="yield_amount", type=int, default=100, help="Yield harvested")
    parser.add_argument("--performance-fee", type=int, default=1000, help="Performance fee in bps")
    parser.add_argument("--withdrawal-fee", type=int, default=50, help="Withdrawal fee in bps")

    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Load settings
    try:
        settings = load_settings(args.config)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Override log level if specified
    log_level = args.log_level or settings.logging.level

    # Setup logging
    setup_logging(settings.logging, log_level)
    logger = logging.getLogger(__name__)

    # Simulated time starts now and is advanced by hand
    current = [datetime.now(timezone.utc)]

    def clock() -> datetime:
        return current[0]

    asset = InMemoryAsset("USD")
    strategy = SimulatedStrategy(asset, settings.ledger.ledger_address)
    ledger = create_facade(settings.ledger, clock=clock)

    try:
        vault_id = ledger.add_vault(
            strategy, asset, "simulated", args.performance_fee, args.withdrawal_fee
        )

        asset.mint("alice", args.deposit)
        shares = ledger.deposit(vault_id, args.deposit, "alice")

        strategy.accrue(args.yield_amount)
        current[0] += timedelta(minutes=31)
        result = ledger.compound(vault_id)
        logger.info(
            f"Compound: {result.outcome.value}, profit={result.profit}, fee={result.fee}"
        )

        current[0] += timedelta(hours=1)
        net = ledger.withdraw(vault_id, shares, "alice")
    except Exception as e:
        logger.exception(f"Simulation failed: {e}")
        return 1

    logger.info("=" * 60)
    logger.info(f"Deposited:       {args.deposit}")
    logger.info(f"Received back:   {net}")
    logger.info(f"Fee recipient:   {asset.balance_of(settings.ledger.fee_recipient)}")
    logger.info(f"Events emitted:  {len(ledger.events.history())}")
    logger.info("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
