"""
Input validation for the status API.
"""

from typing import Any, Optional, Tuple

BOOK_SIDES = ("buy", "sell", "both")

DEFAULT_DEPTH = 50
MAX_DEPTH = 500


def validate_book_side(side: Any) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Validate the side filter of an order book query.

    Args:
        side: Requested side, None for both

    Returns:
        Tuple of (is_valid, error_message, parsed_side)
    """
    if side is None or side == "":
        return True, None, "both"

    if not isinstance(side, str):
        return False, "Side must be a string", None

    normalized = side.strip().lower()
    if normalized not in BOOK_SIDES:
        return False, f"Invalid side: {side}. Must be one of: {list(BOOK_SIDES)}", None

    return True, None, normalized


def validate_depth(depth: Any) -> Tuple[bool, Optional[str], Optional[int]]:
    """
    Validate the depth of an order book query.

    Returns:
        Tuple of (is_valid, error_message, parsed_depth)
    """
    if depth is None or depth == "":
        return True, None, DEFAULT_DEPTH

    try:
        depth = int(depth)
    except (ValueError, TypeError):
        return False, f"Invalid depth format: {depth}. Must be an integer", None

    if depth <= 0:
        return False, "Depth must be positive", None

    if depth > MAX_DEPTH:
        return False, f"Depth too large. Maximum: {MAX_DEPTH}", None

    return True, None, depth
