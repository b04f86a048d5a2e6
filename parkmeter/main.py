"""Composition root for the parkmeter allocation engine.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Interactive CLI loop
"""

import json
import logging
import sys
from datetime import timedelta
from typing import Any

from parkmeter.adapters.cli.commands import CLICommandHandler
from parkmeter.adapters.settlement.credit_card import CreditCardSettlementAdapter
from parkmeter.adapters.settlement.crypto import CryptoSettlementAdapter
from parkmeter.adapters.settlement.paypal import PayPalSettlementAdapter
from parkmeter.config import Settings, load_settings
from parkmeter.core.billing import FeeCalculator
from parkmeter.core.models import VehicleCategory, get_slot_class
from parkmeter.core.pool import AllocationPool
from parkmeter.core.ports import SettlementPort

logger = logging.getLogger(__name__)


def build_settlement(settings: Settings) -> SettlementPort:
    """Instantiate the settlement adapter selected by configuration."""
    if settings.settlement_backend == "credit_card":
        return CreditCardSettlementAdapter(credit_limit=settings.settlement_limit)
    if settings.settlement_backend == "paypal":
        return PayPalSettlementAdapter(balance=settings.settlement_limit)
    if settings.settlement_backend == "crypto":
        return CryptoSettlementAdapter(wallet_balance=settings.settlement_limit)
    raise ValueError(f"Unknown settlement backend: {settings.settlement_backend}")


def build_pool(settings: Settings) -> AllocationPool:
    """Create an allocation pool with the configured rates and layout."""
    fee_calculator = FeeCalculator(
        rates={
            VehicleCategory.BIKE: settings.bike_rate,
            VehicleCategory.CAR: settings.car_rate,
            VehicleCategory.TRUCK: settings.truck_rate,
        },
        default_rate=settings.default_rate,
        billing_unit=timedelta(minutes=settings.billing_unit_minutes),
    )
    pool = AllocationPool(fee_calculator=fee_calculator)
    for name in settings.slot_class_names():
        pool.add_slot(get_slot_class(name))
    return pool


def build_application(settings: Settings) -> CLICommandHandler:
    """Wire adapters and core services into a command handler."""
    settlement = build_settlement(settings)
    logger.info(f"Settlement adapter: {settings.settlement_backend}")

    pool = build_pool(settings)
    logger.info(f"Allocation pool initialized with {pool.stats().total_slots} slots")

    return CLICommandHandler(pool, settlement)


def execute_cli_command(
    cli_handler: CLICommandHandler,
    command: str,
    args: dict[str, Any],
    verbose: bool = False,
) -> dict[str, Any]:
    """Execute a CLI command.

    Raises:
        ValueError: If command is not recognized, the arguments are not a
            JSON object, or a required parameter is missing or not a string.
    """
    if not isinstance(args, dict):
        raise ValueError("Arguments must be a JSON object. Use 'help' for command syntax.")

    if command == "park":
        return cli_handler.park(
            _require_str(args, "label"), verbose=bool(args.get("verbose", verbose))
        )

    elif command == "leave":
        return cli_handler.leave(_require_str(args, "ticket"))

    elif command == "status":
        return cli_handler.status()

    elif command == "slots":
        return cli_handler.list_slots()

    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")


def _require_str(args: dict[str, Any], name: str) -> str:
    if name not in args:
        raise ValueError(f"Missing required parameter: {name}")
    value = args[name]
    if not isinstance(value, str):
        raise ValueError(f"Parameter {name} must be a string")
    return value


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  park
    Park a vehicle. Labels: bike, car, truck
    Required: label

    Example: park {"label": "car"}

  leave
    Release a parked vehicle and pay the fee.
    Required: ticket

    Example: leave {"ticket": "ticket-from-park"}

  status
    Show occupancy and revenue totals.

  slots
    List every slot and its occupant.

  help
    Show this help message.

  exit
    Exit the CLI.
    """
    print(help_text)


def run_cli_interactive(cli_handler: CLICommandHandler, verbose: bool = False) -> None:
    """Run interactive CLI loop."""
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    while True:
        try:
            command_line = input("parkmeter> ").strip()
        except EOFError:
            logger.info("EOF received, exiting CLI")
            break

        if not command_line:
            continue

        if command_line.lower() == "exit":
            logger.info("Exiting CLI")
            break

        if command_line.lower() == "help":
            _print_cli_help()
            continue

        parts = command_line.split(maxsplit=1)
        command = parts[0].lower()
        args_str = parts[1] if len(parts) > 1 else ""

        try:
            args = json.loads(args_str) if args_str else {}
        except json.JSONDecodeError:
            logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
            continue

        try:
            result = execute_cli_command(cli_handler, command, args, verbose=verbose)
        except ValueError as e:
            result = {"status": "error", "message": str(e)}
        except Exception as e:
            logger.error(f"Command execution error: {e}", exc_info=True)
            result = {"status": "error", "message": str(e)}
        print(json.dumps(result, indent=2, default=str))


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    logging.basicConfig(level=level, handlers=[handler])


class JsonLogFormatter(logging.Formatter):
    """Formats each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def bootstrap() -> None:
    """Load configuration, wire adapters, and start the interactive CLI."""
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    logger.info("Loading parkmeter...")

    cli_handler = build_application(settings)
    run_cli_interactive(cli_handler, verbose=settings.debug)


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    try:
        bootstrap()
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
