"""
Status API for the matching agent.

This module provides a read-only REST API over the poll loop state.
"""

from .rest_api import create_app
from .validators import validate_book_side, validate_depth

__all__ = [
    "create_app",
    "validate_book_side",
    "validate_depth",
]
