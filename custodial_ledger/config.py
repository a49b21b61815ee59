"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal
from pydantic_settings import BaseSettings
from typing import Optional

from .customers import Defaults


class LedgerConfig(BaseSettings):
    """Custodial ledger configuration"""

    # Account defaults copied into every new customer account
    credit_interest_rate: str = "0.01"
    credit_limit: str = "1000000"
    debit_interest_rate: str = "0.05"
    debit_limit: str = "1000"

    # Clock configuration
    epoch_length_seconds: int = 3600

    # Storage configuration
    database_url: str = "memory"  # "memory" or "sqlite:///path/to/ledger.db"

    # Credential configuration
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    issuer_id: Optional[str] = None  # Random per bank when unset

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Feature flags
    enable_audit_logging: bool = True

    class Config:
        env_prefix = "LEDGER_"
        env_file = ".env"
        case_sensitive = False

    def defaults(self) -> Defaults:
        """Build the immutable account defaults from configuration"""
        return Defaults(
            credit_interest_rate=Decimal(self.credit_interest_rate),
            credit_limit=Decimal(self.credit_limit),
            debit_interest_rate=Decimal(self.debit_interest_rate),
            debit_limit=Decimal(self.debit_limit),
        )


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
