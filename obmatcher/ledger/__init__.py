"""
Ledger access for the matching agent.

This module provides the order book contract client, validation of the
order rows it returns, and submission of selected matches.
"""

from .client import (
    NearLedgerClient,
    LedgerError,
    LedgerInitError,
    LedgerFetchError,
    LedgerSubmitError,
    load_private_key,
)
from .submitter import ExecutionSubmitter
from .validators import validate_order_view

__all__ = [
    "NearLedgerClient",
    "LedgerError",
    "LedgerInitError",
    "LedgerFetchError",
    "LedgerSubmitError",
    "load_private_key",
    "ExecutionSubmitter",
    "validate_order_view",
]
