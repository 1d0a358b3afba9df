"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings


class LedgerConfig(BaseSettings):
    """Ledger configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    configure_logging: bool = False  # install the dci_ledger handler on first execute

    # Business rules configuration
    allow_direct_withdraw_overdraft: bool = True
    skip_zero_amount_transfers: bool = True
    transfer_out_narrative: str = "Transfer To {account_id}"
    transfer_in_narrative: str = "Transfer From {account_id}"

    class Config:
        env_prefix = "LEDGER_"
        env_file = ".env"
        case_sensitive = False


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
