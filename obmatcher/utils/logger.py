"""
Logging configuration for the matching agent.

This module sets up console and rotating file logging, provides a
structured logger for poll-cycle events, and a dedicated audit trail for
execution attempts.
"""

import logging
import logging.handlers
import os
import sys
from typing import Optional


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> None:
    """
    Set up logging configuration for the matching agent.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        max_file_size: Maximum log file size in bytes
        backup_count: Number of backup files to keep
    """
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Create formatters
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        # Create logs directory if it doesn't exist
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        # Rotating file handler
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

    # Set specific logger levels
    for noisy in ('py_near', 'aiohttp', 'asyncio', 'werkzeug', 'urllib3'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    # Log startup message
    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized - Level: {level}, File: {log_file or 'Console only'}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class MatcherLogger:
    """
    Structured logger for poll-cycle events.

    Lines are pipe-delimited so they can be grepped and split easily.
    """

    def __init__(self, name: str = "obmatcher"):
        self.logger = logging.getLogger(name)
        self.snapshot_logger = logging.getLogger(f"{name}.snapshots")
        self.match_logger = logging.getLogger(f"{name}.matches")

    def log_snapshot(self, cycle: int, buys: int, sells: int) -> None:
        """Log a rebuilt mirror."""
        self.snapshot_logger.info(f"SNAPSHOT|{cycle}|buys={buys}|sells={sells}")

    def log_match(self, cycle: int, match_data: dict, mode: str) -> None:
        """Log a selected match and what is done with it (SUBMIT, DRY_RUN, QUARANTINED)."""
        self.match_logger.info(
            f"MATCH|{cycle}|{mode}|"
            f"maker={match_data.get('maker_id')}|taker={match_data.get('taker_id')}|"
            f"base_fill={match_data.get('base_fill')}|quote_paid={match_data.get('quote_paid')}"
        )

    def log_submission(self, cycle: int, match_data: dict, success: bool) -> None:
        """Log the outcome of a submission."""
        self.match_logger.info(
            f"SUBMIT|{cycle}|{'OK' if success else 'FAILED'}|"
            f"maker={match_data.get('maker_id')}|taker={match_data.get('taker_id')}"
        )

    def log_cycle_error(self, cycle: int, phase: str, error: str) -> None:
        """Log a failed cycle phase."""
        self.logger.error(f"CYCLE_ERROR|{cycle}|{phase}|{error}")


def create_audit_logger(log_file: Optional[str] = "logs/audit.log") -> logging.Logger:
    """
    Create a dedicated audit logger for execution attempts.

    Args:
        log_file: Path to audit log file; None keeps the audit logger
            without a file handler

    Returns:
        Audit logger instance
    """
    audit_logger = logging.getLogger("audit")
    audit_logger.setLevel(logging.INFO)
    audit_logger.propagate = False

    if log_file and not audit_logger.handlers:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        audit_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=50 * 1024 * 1024,  # 50MB
            backupCount=10
        )
        audit_handler.setFormatter(logging.Formatter(
            '%(asctime)s|%(levelname)s|%(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        audit_logger.addHandler(audit_handler)

    return audit_logger


def log_execution_audit(audit_logger: logging.Logger, outcome: str, match_data: dict, detail: str = "") -> None:
    """
    Log an execution attempt to the audit trail.

    Args:
        audit_logger: Audit logger instance
        outcome: SUBMITTED or FAILED
        match_data: Match data dictionary
        detail: Error text for failed attempts
    """
    audit_logger.info(
        f"EXECUTE_{outcome}|"
        f"MAKER:{match_data.get('maker_id', 'N/A')}|"
        f"TAKER:{match_data.get('taker_id', 'N/A')}|"
        f"BASE_FILL:{match_data.get('base_fill', 'N/A')}|"
        f"QUOTE_PAID:{match_data.get('quote_paid', 'N/A')}"
        + (f"|DETAIL:{detail}" if detail else "")
    )
