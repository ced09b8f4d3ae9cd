"""
Crossing detection and fill computation.

This module scans the order mirror for one crossing pair and computes its
exact fill and settlement. Scan order is sells by ascending price against
buys by descending price; both orderings and the crossing test use the
exact rational comparator.
"""

import logging
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Optional

from .order import Match, Order
from .order_book import OrderMirror
from .price import compare_prices, price_ge

logger = logging.getLogger(__name__)

_ascending = cmp_to_key(lambda a, b: compare_prices(a.price, b.price))
_descending = cmp_to_key(lambda a, b: compare_prices(b.price, a.price))


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer division rounded toward positive infinity (non-negative operands)."""
    if denominator <= 0:
        raise ValueError(f"Denominator must be positive, got: {denominator}")
    return (numerator + denominator - 1) // denominator


def sort_sells(orders: Iterable[Order]) -> List[Order]:
    """Sell orders by ascending price; equal prices keep their input order."""
    return sorted(orders, key=_ascending)


def sort_buys(orders: Iterable[Order]) -> List[Order]:
    """Buy orders by descending price; equal prices keep their input order."""
    return sorted(orders, key=_descending)


def pick_match(mirror: OrderMirror) -> Optional[Match]:
    """
    Find the first crossing pair in scan order and compute its fill.

    Settlement is always at the maker's (sell order's) price, rounded up,
    so the maker never receives less than its quoted rate.

    Args:
        mirror: Snapshot to scan

    Returns:
        The match, or None if no pair crosses with a non-zero fill
    """
    sells = sort_sells(mirror.sells.values())
    buys = sort_buys(mirror.buys.values())

    for sell in sells:
        for buy in buys:
            if not price_ge(buy.price, sell.price):
                continue

            base_fill = min(sell.remaining_base, buy.remaining_base)
            if base_fill == 0:
                continue

            quote_paid = ceil_div(base_fill * sell.price.num, sell.price.den)
            return Match(
                maker_id=sell.order_id,
                taker_id=buy.order_id,
                base_fill=base_fill,
                quote_paid=quote_paid,
            )

    return None


class MatchSelector:
    """
    Stateful front for pick_match that keeps selection statistics.

    The selection itself is a pure function of the mirror passed in.
    """

    def __init__(self):
        """Initialize the selector."""
        self.selections_run = 0
        self.matches_found = 0
        self.last_match: Optional[Match] = None
        self.last_match_at: Optional[datetime] = None

        logger.info("Match selector initialized")

    def select(self, mirror: OrderMirror) -> Optional[Match]:
        """
        Select at most one match from the mirror.

        Args:
            mirror: Snapshot to scan

        Returns:
            The selected match or None
        """
        self.selections_run += 1
        match = pick_match(mirror)

        if match is None:
            logger.debug(f"No crossing pair among {len(mirror.buys)} buys and {len(mirror.sells)} sells")
            return None

        self.matches_found += 1
        self.last_match = match
        self.last_match_at = datetime.now(timezone.utc)
        logger.info(
            f"Selected match maker={match.maker_id} taker={match.taker_id} "
            f"base_fill={match.base_fill} quote_paid={match.quote_paid}"
        )
        return match

    def get_statistics(self) -> Dict[str, Any]:
        """Get selector statistics."""
        return {
            "selections_run": self.selections_run,
            "matches_found": self.matches_found,
            "last_match": self.last_match.to_dict() if self.last_match else None,
            "last_match_at": self.last_match_at.isoformat() if self.last_match_at else None,
        }
