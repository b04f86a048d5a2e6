"""Integration tests for the composition root.

These tests verify that configuration loads and validates, and that the
bootstrap helpers wire the configured adapters into the pool.
"""

import builtins
import json
import logging
import os
import sys
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from parkmeter.adapters.cli.commands import CLICommandHandler
from parkmeter.adapters.settlement import (
    CreditCardSettlementAdapter,
    CryptoSettlementAdapter,
    PayPalSettlementAdapter,
)
from parkmeter.config import Settings, load_settings
from parkmeter.core.models import VehicleCategory
from parkmeter.main import (
    JsonLogFormatter,
    build_application,
    build_pool,
    build_settlement,
    run_cli_interactive,
)


class TestConfigurationLoading:
    """Test configuration loading and validation."""

    def test_load_settings_with_defaults(self) -> None:
        settings = load_settings()
        assert settings.settlement_backend == "credit_card"
        assert settings.slot_class_names() == ["small", "medium", "large"]
        assert settings.billing_unit_minutes == 60
        assert settings.car_rate == Decimal("2.00")
        assert settings.settlement_limit is None
        assert settings.log_level == "INFO"

    def test_load_settings_from_env(self) -> None:
        with patch.dict(
            os.environ,
            {
                "SETTLEMENT_BACKEND": "paypal",
                "SLOT_LAYOUT": "Large, small ,medium",
                "BILLING_UNIT_MINUTES": "30",
                "TRUCK_RATE": "4.50",
                "SETTLEMENT_LIMIT": "25",
                "LOG_LEVEL": "DEBUG",
            },
        ):
            settings = load_settings()
        assert settings.settlement_backend == "paypal"
        assert settings.slot_class_names() == ["Large", "small", "medium"]
        assert settings.billing_unit_minutes == 30
        assert settings.truck_rate == Decimal("4.50")
        assert settings.settlement_limit == Decimal("25")
        assert settings.log_level == "DEBUG"

    def test_load_settings_from_env_file(self, tmp_path) -> None:
        env_file = tmp_path / "test.env"
        env_file.write_text("SETTLEMENT_BACKEND=crypto\nBIKE_RATE=0.80\n")
        settings = load_settings(str(env_file))
        assert settings.settlement_backend == "crypto"
        assert settings.bike_rate == Decimal("0.80")

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("SLOT_LAYOUT", "small,oversize"),
            ("SLOT_LAYOUT", " , "),
            ("BILLING_UNIT_MINUTES", "0"),
            ("CAR_RATE", "-1"),
            ("SETTLEMENT_LIMIT", "-5"),
            ("SETTLEMENT_BACKEND", "cash"),
        ],
    )
    def test_invalid_settings_rejected(self, name: str, value: str) -> None:
        with patch.dict(os.environ, {name: value}):
            with pytest.raises(Exception):  # ValidationError
                load_settings()

    def test_unknown_slot_class_lists_registered_names(self) -> None:
        with patch.dict(os.environ, {"SLOT_LAYOUT": "small,oversize"}):
            with pytest.raises(ValidationError, match="registered: small, medium, large"):
                load_settings()


class TestWiring:
    @pytest.mark.parametrize(
        ("backend", "adapter_type"),
        [
            ("credit_card", CreditCardSettlementAdapter),
            ("paypal", PayPalSettlementAdapter),
            ("crypto", CryptoSettlementAdapter),
        ],
    )
    def test_build_settlement_selects_backend(self, backend: str, adapter_type: type) -> None:
        settings = Settings(settlement_backend=backend)
        assert isinstance(build_settlement(settings), adapter_type)

    def test_settlement_limit_is_passed_through(self) -> None:
        settings = Settings(settlement_backend="paypal", settlement_limit=Decimal("7"))
        adapter = build_settlement(settings)
        assert adapter.balance == Decimal("7")

    def test_build_pool_uses_layout_and_rates(self) -> None:
        settings = Settings(
            slot_layout="large,large,small",
            bike_rate=Decimal("0.50"),
            billing_unit_minutes=30,
        )
        pool = build_pool(settings)

        assert [v.slot_class for v in pool.slots()] == ["large", "large", "small"]
        assert pool.fee_calculator.rate(VehicleCategory.BIKE) == Decimal("0.50")
        assert pool.fee_calculator.billing_unit == timedelta(minutes=30)

    def test_build_application_returns_handler(self) -> None:
        handler = build_application(Settings())
        assert isinstance(handler, CLICommandHandler)
        assert handler.status()["total_slots"] == 3


class TestInteractiveCLI:
    def test_repl_runs_commands_until_exit(self, capsys: pytest.CaptureFixture[str]) -> None:
        handler = build_application(Settings())
        commands = iter([
            "help",
            "",
            'park {"label": "truck"}',
            "park not-json",
            "status",
            "fly",
            "exit",
        ])

        with patch.object(builtins, "input", lambda prompt: next(commands)):
            run_cli_interactive(handler)

        output = capsys.readouterr().out
        assert "Available Commands" in output
        assert '"slot_id": 3' in output
        assert '"occupied_slots": 1' in output
        assert "Unknown command: fly" in output

    def test_repl_exits_on_eof(self) -> None:
        handler = build_application(Settings())

        def raise_eof(prompt: str) -> str:
            raise EOFError

        with patch.object(builtins, "input", raise_eof):
            run_cli_interactive(handler)

        assert handler.status()["occupied_slots"] == 0

    @pytest.mark.parametrize(
        ("bad_line", "message"),
        [
            ("park 5", "must be a JSON object"),
            ('park "label"', "must be a JSON object"),
            ('park {"label": 5}', "label must be a string"),
            ('leave {"ticket": ["t"]}', "ticket must be a string"),
        ],
    )
    def test_repl_survives_malformed_arguments(
        self, bad_line: str, message: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        handler = build_application(Settings())
        commands = iter([bad_line, 'park {"label": "car"}', "exit"])

        with patch.object(builtins, "input", lambda prompt: next(commands)):
            run_cli_interactive(handler)

        output = capsys.readouterr().out
        assert message in output
        assert '"slot_id": 2' in output
        assert handler.status()["occupied_slots"] == 1

    def test_repl_reports_unexpected_handler_errors(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        handler = build_application(Settings())
        commands = iter(["status", 'park {"label": "bike"}', "exit"])

        with patch.object(handler, "status", side_effect=RuntimeError("stats unavailable")):
            with patch.object(builtins, "input", lambda prompt: next(commands)):
                run_cli_interactive(handler)

        output = capsys.readouterr().out
        assert "stats unavailable" in output
        assert '"slot_id": 1' in output


class TestLogging:
    def test_json_format_escapes_quotes(self) -> None:
        formatter = JsonLogFormatter()
        record = logging.LogRecord(
            name="parkmeter.core.pool",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg='Unknown vehicle type: "%s"',
            args=("van",),
            exc_info=None,
        )

        entry = json.loads(formatter.format(record))
        assert entry["message"] == 'Unknown vehicle type: "van"'
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "parkmeter.core.pool"

    def test_json_format_includes_exception(self) -> None:
        formatter = JsonLogFormatter()
        try:
            raise RuntimeError("gateway down")
        except RuntimeError:
            record = logging.LogRecord(
                name="parkmeter", level=logging.ERROR, pathname=__file__, lineno=1,
                msg="Settlement backend error", args=(), exc_info=sys.exc_info(),
            )

        entry = json.loads(formatter.format(record))
        assert "RuntimeError: gateway down" in entry["exc_info"]
