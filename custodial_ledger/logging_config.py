"""
Structured Logging Configuration Module

Ledger events are logged with a fixed set of structured fields so every line
can be tied back to a customer, an operation and the epoch it ran in.
"""

import logging
import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional


# Record attributes carried by ledger log lines, in output order
LEDGER_FIELDS = ("customer_id", "operation", "epoch", "amount", "pooled_funds", "extra")


def ledger_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Structured ledger fields present on a record"""
    fields = {}
    for name in LEDGER_FIELDS:
        value = getattr(record, name, None)
        if value is None:
            continue
        fields[name] = str(value) if isinstance(value, Decimal) else value
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(ledger_fields(record))

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain lines with the ledger fields appended as key=value pairs"""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record):
        line = super().format(record)
        fields = ledger_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


def setup_logging(level: str = "INFO", logger_name: str = "custodial_ledger",
                  log_format: str = "json") -> logging.Logger:
    """
    Setup structured logging for the ledger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the logger
        log_format: "json" for structured output, "text" for key=value lines

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = "custodial_ledger") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               customer_id: Optional[str] = None, operation: Optional[str] = None,
               epoch: Optional[int] = None, amount: Optional[Decimal] = None,
               pooled_funds: Optional[Decimal] = None, extra: Optional[dict] = None):
    """
    Log a ledger operation with structured fields.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        customer_id: Identity key of the customer involved
        operation: Ledger operation name (register, deposit, ...)
        epoch: Epoch the operation was stamped with
        amount: Amount moved by the operation
        pooled_funds: Pooled fund after the operation
        extra: Any other structured data
    """
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    logger.log(levelno, message, extra={
        "customer_id": customer_id,
        "operation": operation,
        "epoch": epoch,
        "amount": amount,
        "pooled_funds": pooled_funds,
        "extra": extra,
    })
