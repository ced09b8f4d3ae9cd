"""
Local mirror of the on-ledger order book.

The mirror holds the latest fetched snapshot of open orders split by side.
It is rebuilt wholesale every poll cycle; there is no incremental diffing
and no staleness tracking between cycles.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from .order import Order
from .order_types import OrderSide, validate_order_side

logger = logging.getLogger(__name__)


class OrderMirror:
    """
    Snapshot of open orders keyed by order id, one mapping per side.

    An order id lives in at most one of ``buys`` and ``sells``.
    """

    def __init__(self):
        """Initialize an empty mirror."""
        self.buys: Dict[int, Order] = {}
        self.sells: Dict[int, Order] = {}

    def upsert(self, order: Order) -> None:
        """
        Insert or overwrite an order on the side it belongs to.

        Args:
            order: The order to store

        Raises:
            ValueError: If the order side is invalid
        """
        side = validate_order_side(order.side)
        if side == OrderSide.BUY:
            self.sells.pop(order.order_id, None)
            self.buys[order.order_id] = order
        else:
            self.buys.pop(order.order_id, None)
            self.sells[order.order_id] = order

    def remove(self, order_id: int) -> None:
        """Remove an order from both sides. No-op if it is absent."""
        self.buys.pop(order_id, None)
        self.sells.pop(order_id, None)

    def clear(self) -> None:
        """Empty both sides."""
        self.buys.clear()
        self.sells.clear()

    def rebuild(self, orders: Iterable[Order]) -> int:
        """
        Replace the mirror contents with a fresh snapshot.

        Orders without remaining base quantity are closed and are not
        mirrored.

        Args:
            orders: Orders of the freshly fetched snapshot

        Returns:
            Number of orders kept
        """
        self.clear()
        kept = 0
        for order in orders:
            if order.remaining_base == 0:
                logger.debug(f"Skipping closed order {order.order_id}: no remaining base")
                continue
            self.upsert(order)
            kept += 1
        return kept

    @classmethod
    def from_snapshot(cls, orders: Iterable[Order]) -> "OrderMirror":
        """Build a new mirror from a snapshot."""
        mirror = cls()
        mirror.rebuild(orders)
        return mirror

    def get_order(self, order_id: int) -> Optional[Order]:
        """Get an order by id from either side."""
        order = self.buys.get(order_id)
        if order is None:
            order = self.sells.get(order_id)
        return order

    def get_statistics(self) -> Dict[str, Any]:
        """Get mirror statistics."""
        return {
            "buy_orders": len(self.buys),
            "sell_orders": len(self.sells),
            "total_buy_base": str(sum(o.remaining_base for o in self.buys.values())),
            "total_sell_base": str(sum(o.remaining_base for o in self.sells.values())),
        }

    def __contains__(self, order_id: object) -> bool:
        return order_id in self.buys or order_id in self.sells

    def __len__(self) -> int:
        return len(self.buys) + len(self.sells)

    def __repr__(self) -> str:
        return f"OrderMirror(buys={len(self.buys)}, sells={len(self.sells)})"
