"""
Core matching components.

This module contains the order mirror, the exact price comparator and
the match selector of the matching agent.
"""

from .order import Order, Match
from .order_types import OrderSide, OrderStatus
from .price import Price, price_ge, price_le, compare_prices
from .order_book import OrderMirror
from .matching_engine import MatchSelector, pick_match

__all__ = [
    "Order",
    "Match",
    "OrderSide",
    "OrderStatus",
    "Price",
    "price_ge",
    "price_le",
    "compare_prices",
    "OrderMirror",
    "MatchSelector",
    "pick_match",
]
