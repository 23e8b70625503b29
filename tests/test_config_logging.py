"""Tests for config and logging."""

import json
import logging
import os
import sys
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

from hafta_ledger.config import LedgerConfig, MessagingConfig, OutputConfig
from hafta_ledger.exceptions import ConfigurationError
from hafta_ledger.logging import JsonFormatter, get_logger, loan_context, setup_logging

ENV_VARS = [
    "SENDER_NAME",
    "DEFAULT_COUNTRY_CODE",
    "CURRENCY_SYMBOL",
    "OUTPUT_DIR",
    "PRETTY_JSON",
    "SEED",
    "LOG_LEVEL",
    "FAKER_LOCALE",
]


@pytest.fixture
def clean_env():
    """Environment without any hafta-ledger variables."""
    env = {k: v for k, v in os.environ.items() if k not in ENV_VARS}
    with patch.dict(os.environ, env, clear=True):
        yield


class TestMessagingConfig:
    """Tests for MessagingConfig."""

    def test_default_values(self) -> None:
        config = MessagingConfig()

        assert config.sender_name == "VickyFinance"
        assert config.default_country_code == "91"
        assert config.currency_symbol == "₹"


class TestOutputConfig:
    """Tests for OutputConfig."""

    def test_default_values(self) -> None:
        config = OutputConfig()

        assert config.json_output_dir == Path("output")
        assert config.pretty_json is False


class TestLedgerConfig:
    """Tests for LedgerConfig."""

    def test_default_values(self) -> None:
        config = LedgerConfig()

        assert isinstance(config.messaging, MessagingConfig)
        assert isinstance(config.output, OutputConfig)
        assert config.seed is None
        assert config.log_level == "INFO"
        assert config.locale == "en_IN"

    def test_from_env_default(self, clean_env) -> None:
        config = LedgerConfig.from_env()

        assert config.messaging.sender_name == "VickyFinance"
        assert config.output.json_output_dir == Path("output")
        assert config.seed is None
        assert config.log_level == "INFO"

    def test_from_env_custom(self, clean_env) -> None:
        env = {
            "SENDER_NAME": "Ledger Co",
            "DEFAULT_COUNTRY_CODE": "1",
            "CURRENCY_SYMBOL": "Rs.",
            "OUTPUT_DIR": "/data/ledger",
            "PRETTY_JSON": "TRUE",
            "SEED": "12345",
            "LOG_LEVEL": "DEBUG",
            "FAKER_LOCALE": "hi_IN",
        }
        with patch.dict(os.environ, env):
            config = LedgerConfig.from_env()

        assert config.messaging.sender_name == "Ledger Co"
        assert config.messaging.default_country_code == "1"
        assert config.messaging.currency_symbol == "Rs."
        assert config.output.json_output_dir == Path("/data/ledger")
        assert config.output.pretty_json is True
        assert config.seed == 12345
        assert config.log_level == "DEBUG"
        assert config.locale == "hi_IN"

    def test_from_env_invalid_seed(self, clean_env) -> None:
        with patch.dict(os.environ, {"SEED": "forty-two"}):
            with pytest.raises(ConfigurationError, match="SEED"):
                LedgerConfig.from_env()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self) -> None:
        setup_logging()

        assert logging.getLogger("hafta_ledger").level == logging.INFO

    def test_setup_logging_debug(self) -> None:
        setup_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_invalid_level(self) -> None:
        setup_logging(level="INVALID")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json_format(self) -> None:
        setup_logging(format_type="json")

        handlers = logging.getLogger().handlers
        assert any(isinstance(h.formatter, JsonFormatter) for h in handlers)

    def test_setup_logging_replaces_handlers(self) -> None:
        logger = logging.getLogger()
        logger.addHandler(logging.StreamHandler())
        logger.addHandler(logging.StreamHandler())

        setup_logging()

        assert len(logger.handlers) == 1

    def test_faker_logger_quieted(self) -> None:
        setup_logging(level="DEBUG")

        assert logging.getLogger("faker").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def _record(self, **kwargs) -> logging.LogRecord:
        return logging.LogRecord(
            name="test.logger",
            level=kwargs.get("level", logging.INFO),
            pathname="/path/to/file.py",
            lineno=42,
            msg=kwargs.get("msg", "Test message"),
            args=(),
            exc_info=kwargs.get("exc_info"),
        )

    def test_format_basic(self) -> None:
        data = json.loads(JsonFormatter().format(self._record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "timestamp" in data

    def test_format_with_exception(self) -> None:
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(self._record(level=logging.ERROR, exc_info=exc_info)))

        assert data["level"] == "ERROR"
        assert "ValueError" in data["exception"]

    def test_format_with_extra(self) -> None:
        record = self._record()
        record.extra = {"loan_id": "loan-001"}

        data = json.loads(JsonFormatter().format(record))

        assert data["loan_id"] == "loan-001"


class TestLoanContext:
    """Tests for loan_context."""

    def test_builds_extra_argument(self) -> None:
        ctx = loan_context("loan-1", amount_paid=Decimal("500"))
        assert ctx == {"extra": {"loan_id": "loan-1", "amount_paid": Decimal("500")}}

    def test_rendered_by_json_formatter(self) -> None:
        attrs = {"msg": "Payment recorded", "levelname": "INFO"}
        attrs.update(loan_context("loan-1", amount_paid=Decimal("500")))
        record = logging.makeLogRecord(attrs)
        data = json.loads(JsonFormatter().format(record))
        assert data["loan_id"] == "loan-1"
        assert data["amount_paid"] == "500"

    def test_attached_by_store_payment(self, caplog, store, borrower_id, now) -> None:
        loan_id = store.create_loan(borrower_id, Decimal("5000"), Decimal("500"), now=now)
        with caplog.at_level(logging.INFO, logger="hafta_ledger.store.ledger"):
            store.record_payment(loan_id, Decimal("500"), now=now)

        (record,) = [r for r in caplog.records if getattr(r, "extra", None)]
        assert record.extra["loan_id"] == loan_id
        assert record.extra["amount_paid"] == Decimal("500")


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger(self) -> None:
        logger = get_logger("test.module")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "test.module"

    def test_get_logger_same_instance(self) -> None:
        assert get_logger("test.same") is get_logger("test.same")


class TestPackageInit:
    """Tests for hafta_ledger __init__.py."""

    def test_version_exported(self) -> None:
        from hafta_ledger import __version__

        assert isinstance(__version__, str)
