"""
Tests for configuration and structured logging
"""

import json
import logging
from decimal import Decimal

from custodial_ledger.config import LedgerConfig, reload_config, get_config
from custodial_ledger.customers import Defaults
from custodial_ledger.logging_config import JSONFormatter, log_action, setup_logging


class TestLedgerConfig:
    """Test environment-based configuration"""

    def test_builtin_defaults(self):
        """Out of the box the bank uses the standard rates and limits"""
        defaults = LedgerConfig().defaults()

        assert defaults == Defaults(
            credit_interest_rate=Decimal('0.01'),
            credit_limit=Decimal('1000000'),
            debit_interest_rate=Decimal('0.05'),
            debit_limit=Decimal('1000')
        )

    def test_environment_overrides(self, monkeypatch):
        """LEDGER_ environment variables override settings"""
        monkeypatch.setenv("LEDGER_DEBIT_LIMIT", "2500")
        monkeypatch.setenv("LEDGER_EPOCH_LENGTH_SECONDS", "60")

        config = reload_config()
        try:
            assert get_config() is config
            assert config.epoch_length_seconds == 60
            assert config.defaults().debit_limit == Decimal('2500')
        finally:
            monkeypatch.delenv("LEDGER_DEBIT_LIMIT")
            monkeypatch.delenv("LEDGER_EPOCH_LENGTH_SECONDS")
            reload_config()


class TestLogging:
    """Test structured JSON logging"""

    def test_json_formatter(self):
        """Records render as JSON with structured fields"""
        logger = logging.getLogger("custodial_ledger.test")
        record = logger.makeRecord(logger.name, logging.INFO, __name__, 0, "deposit ok", (), None)
        record.customer_id = "cust-1"
        record.operation = "deposit"
        record.epoch = 7
        record.amount = Decimal('12.50')

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "deposit ok"
        assert entry["customer_id"] == "cust-1"
        assert entry["operation"] == "deposit"
        assert entry["epoch"] == 7
        assert entry["amount"] == "12.50"
        assert "pooled_funds" not in entry

    def test_log_action(self, capsys):
        """log_action emits one JSON line with the given fields"""
        logger = setup_logging("INFO", logger_name="custodial_ledger.test_action")

        log_action(logger, "info", "Customer marked as known", customer_id="cust-9",
                   operation="mark_known", epoch=3)

        entry = json.loads(capsys.readouterr().err.strip())
        assert entry["customer_id"] == "cust-9"
        assert entry["operation"] == "mark_known"
        assert entry["epoch"] == 3
        assert "extra" not in entry

    def test_log_action_respects_level(self, capsys):
        """Records below the logger level are dropped"""
        logger = setup_logging("WARNING", logger_name="custodial_ledger.test_level")

        log_action(logger, "info", "quiet")

        assert capsys.readouterr().err == ""

    def test_text_format_appends_fields(self, capsys):
        """The text format keeps the ledger fields as key=value pairs"""
        logger = setup_logging("INFO", logger_name="custodial_ledger.test_text", log_format="text")

        log_action(logger, "info", "Deposit", customer_id="cust-2", operation="deposit",
                   amount=Decimal('5'), pooled_funds=Decimal('105'))

        line = capsys.readouterr().err.strip()
        assert "INFO custodial_ledger.test_text: Deposit" in line
        assert line.endswith("customer_id=cust-2 operation=deposit amount=5 pooled_funds=105")
