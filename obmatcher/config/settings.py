"""
Configuration settings for the matching agent.

This module provides centralized configuration management
with environment variable support and validation.
"""

import os
from typing import Optional, Dict, Any


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Configuration settings for the matching agent.

    Supports environment variables and provides sensible defaults.
    """

    def __init__(self):
        """Initialize settings from environment variables."""
        # Ledger configuration
        self.contract_id = os.getenv("ORDERBOOK_CONTRACT_ID", "gloomyswamp.testnet")
        self.network_id = os.getenv("NEAR_ENV", "testnet")
        self.node_url = os.getenv("NEAR_NODE_URL", f"https://rpc.{self.network_id}.near.org")
        self.account_id = os.getenv("MATCHER_ACCOUNT_ID", "gloomyswamp.testnet")
        self.private_key = os.getenv("MATCHER_PRIVATE_KEY") or None
        self.credentials_dir = os.getenv("NEAR_CREDENTIALS_DIR", os.path.join("~", ".near-credentials"))

        # Poll loop configuration
        self.dry_run = _env_flag("DRY_RUN", "false")
        self.poll_interval_seconds = float(os.getenv("POLL_INTERVAL_SECONDS", "3"))
        self.fetch_page_limit = int(os.getenv("FETCH_PAGE_LIMIT", "200"))
        self.fetch_max_pages = int(os.getenv("FETCH_MAX_PAGES", "50"))
        self.quarantine_seconds = float(os.getenv("QUARANTINE_SECONDS", "30"))

        # Execute call budget
        self.execute_gas = int(os.getenv("EXECUTE_GAS", "150000000000000"))
        self.execute_deposit = int(os.getenv("EXECUTE_DEPOSIT", "1"))

        # Logging configuration
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_file = os.getenv("LOG_FILE", "logs/obmatcher.log") or None
        self.audit_log_file = os.getenv("AUDIT_LOG_FILE", "logs/audit.log") or None

        # Status API
        self.status_api_enabled = _env_flag("STATUS_API_ENABLED", "true")
        self.status_api_host = os.getenv("STATUS_API_HOST", "127.0.0.1")
        self.status_api_port = int(os.getenv("STATUS_API_PORT", "5000"))

        # Debug mode
        self.debug = _env_flag("DEBUG", "false")

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary. The private key is never included."""
        return {
            "contract_id": self.contract_id,
            "network_id": self.network_id,
            "node_url": self.node_url,
            "account_id": self.account_id,
            "has_private_key": self.private_key is not None,
            "credentials_dir": self.credentials_dir,
            "dry_run": self.dry_run,
            "poll_interval_seconds": self.poll_interval_seconds,
            "fetch_page_limit": self.fetch_page_limit,
            "fetch_max_pages": self.fetch_max_pages,
            "quarantine_seconds": self.quarantine_seconds,
            "execute_gas": str(self.execute_gas),
            "execute_deposit": str(self.execute_deposit),
            "log_level": self.log_level,
            "log_file": self.log_file,
            "audit_log_file": self.audit_log_file,
            "status_api_enabled": self.status_api_enabled,
            "status_api_host": self.status_api_host,
            "status_api_port": self.status_api_port,
            "debug": self.debug,
        }

    def validate(self) -> None:
        """Validate configuration settings."""
        errors = []

        if not self.contract_id:
            errors.append("Contract id cannot be empty")

        if not self.account_id:
            errors.append("Matcher account id cannot be empty")

        if not self.node_url:
            errors.append("Node URL cannot be empty")

        if self.poll_interval_seconds <= 0:
            errors.append(f"Poll interval must be positive: {self.poll_interval_seconds}")

        if self.fetch_page_limit <= 0:
            errors.append(f"Fetch page limit must be positive: {self.fetch_page_limit}")

        if self.fetch_max_pages <= 0:
            errors.append(f"Fetch max pages must be positive: {self.fetch_max_pages}")

        if self.quarantine_seconds < 0:
            errors.append(f"Quarantine window cannot be negative: {self.quarantine_seconds}")

        if self.execute_gas <= 0:
            errors.append(f"Execute gas must be positive: {self.execute_gas}")

        # The contract asserts exactly one attached yoctoNEAR
        if self.execute_deposit != 1:
            errors.append(f"Execute deposit must be 1 yoctoNEAR: {self.execute_deposit}")

        if not (1 <= self.status_api_port <= 65535):
            errors.append(f"Invalid status API port: {self.status_api_port}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.validate()
    return _settings


def reload_settings() -> Settings:
    """
    Reload settings from environment variables.

    Returns:
        New settings instance
    """
    global _settings
    _settings = Settings()
    _settings.validate()
    return _settings
