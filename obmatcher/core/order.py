"""
Order and Match data structures for the matching agent.

Orders mirror the rows reported by the order book contract. A Match is the
single execution the agent proposes per poll cycle. All amounts are plain
Python ints so that arithmetic on them is exact at any magnitude.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .order_types import OrderSide, OrderStatus, validate_order_side, validate_order_status
from .price import Price


def _check_amount(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got: {value!r}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got: {value}")


@dataclass
class Order:
    """
    An open resting order on the ledger.

    ``side`` may be given as an OrderSide or as a case-insensitive string;
    it is always stored as an OrderSide.
    """

    # Core order identification
    order_id: int
    owner: str
    side: OrderSide
    price: Price
    remaining_base: int

    # Ledger detail carried through from the contract view
    amount_base: int = 0
    locked_quote_remaining: int = 0
    locked_base_remaining: int = 0
    status: OrderStatus = OrderStatus.OPEN
    created_at: int = 0

    def __post_init__(self):
        """Validate order after initialization."""
        self.side = validate_order_side(self.side)
        self.status = validate_order_status(self.status)
        self._validate()

    def _validate(self) -> None:
        """
        Validate order fields.

        Raises:
            ValueError: If any field is invalid
        """
        _check_amount(self.order_id, "Order id")
        if not isinstance(self.owner, str):
            raise ValueError(f"Owner must be a string, got: {self.owner!r}")
        if not isinstance(self.price, Price):
            raise ValueError(f"Price must be a Price, got: {self.price!r}")
        _check_amount(self.remaining_base, "Remaining base")
        _check_amount(self.amount_base, "Amount base")
        _check_amount(self.locked_quote_remaining, "Locked quote remaining")
        _check_amount(self.locked_base_remaining, "Locked base remaining")
        _check_amount(self.created_at, "Created at")

    @property
    def is_closed(self) -> bool:
        """An order without remaining base quantity cannot be matched."""
        return self.remaining_base == 0 or self.status != OrderStatus.OPEN

    def to_dict(self) -> Dict[str, Any]:
        """Convert order to dictionary for serialization."""
        return {
            "id": self.order_id,
            "owner_id": self.owner,
            "side": self.side.value,
            "price_num": str(self.price.num),
            "price_den": str(self.price.den),
            "amount_base": str(self.amount_base),
            "remaining_base": str(self.remaining_base),
            "locked_quote_remaining": str(self.locked_quote_remaining),
            "locked_base_remaining": str(self.locked_base_remaining),
            "status": self.status.value,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class Match:
    """
    One crossing pair selected for execution.

    The maker is the resting sell order whose price governs settlement,
    the taker is the crossing buy order.
    """

    maker_id: int
    taker_id: int
    base_fill: int
    quote_paid: int

    def __post_init__(self):
        _check_amount(self.maker_id, "Maker id")
        _check_amount(self.taker_id, "Taker id")
        _check_amount(self.base_fill, "Base fill")
        _check_amount(self.quote_paid, "Quote paid")
        if self.maker_id == self.taker_id:
            raise ValueError("Maker and taker must be distinct orders")

    @property
    def fingerprint(self) -> Tuple[int, int, int, int]:
        return self.maker_id, self.taker_id, self.base_fill, self.quote_paid

    def to_execute_args(self) -> Dict[str, Any]:
        """Arguments of the contract's ``execute`` call; amounts as strings."""
        return {
            "maker_order_id": self.maker_id,
            "taker_order_id": self.taker_id,
            "base_fill": str(self.base_fill),
            "quote_paid": str(self.quote_paid),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert match to dictionary for serialization."""
        return {
            "maker_id": self.maker_id,
            "taker_id": self.taker_id,
            "base_fill": str(self.base_fill),
            "quote_paid": str(self.quote_paid),
        }
