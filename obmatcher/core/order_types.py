"""
Order side and status definitions for the matching agent.

This module defines the enums used to describe orders as they are
reported by the order book contract.
"""

from enum import Enum
from typing import Any


class OrderSide(Enum):
    """
    Order sides for buy and sell orders.

    - BUY: Orders to purchase the base asset (takers in a match)
    - SELL: Orders to sell the base asset (makers in a match)
    """
    BUY = "buy"
    SELL = "sell"


class OrderStatus(Enum):
    """
    Order status as stored on the ledger.

    - OPEN: Order rests on the book with remaining base quantity
    - FILLED: Order completely executed
    - CANCELLED: Order cancelled by its owner
    """
    OPEN = "open"
    FILLED = "filled"
    CANCELLED = "cancelled"


def validate_order_side(side: Any) -> OrderSide:
    """
    Validate and convert an order side to the OrderSide enum.

    Strings are matched case-insensitively, so "Buy", "buy" and "BUY"
    all map to OrderSide.BUY.

    Args:
        side: OrderSide or string representation of a side

    Returns:
        OrderSide enum value

    Raises:
        ValueError: If side is invalid
    """
    if isinstance(side, OrderSide):
        return side
    if not isinstance(side, str):
        raise ValueError(f"Invalid order side: {side!r}. Must be a string")
    try:
        return OrderSide(side.strip().lower())
    except ValueError:
        raise ValueError(f"Invalid order side: {side}. Must be one of: {[s.value for s in OrderSide]}")


def validate_order_status(status: Any) -> OrderStatus:
    """
    Validate and convert an order status to the OrderStatus enum.

    Raises:
        ValueError: If status is invalid
    """
    if isinstance(status, OrderStatus):
        return status
    if not isinstance(status, str):
        raise ValueError(f"Invalid order status: {status!r}. Must be a string")
    try:
        return OrderStatus(status.strip().lower())
    except ValueError:
        raise ValueError(f"Invalid order status: {status}. Must be one of: {[s.value for s in OrderStatus]}")
