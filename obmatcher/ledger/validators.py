"""
Validation of order rows returned by the order book contract.

The contract's ``get_orders`` view returns positional tuples, while other
tooling around the contract reports orders as JSON objects. Both shapes are
accepted here and turned into Order instances. U128 amounts arrive as
decimal strings and are parsed to exact ints.
"""

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple
import logging

from ..core.order import Order
from ..core.order_types import OrderSide, OrderStatus
from ..core.price import Price, parse_uint

logger = logging.getLogger(__name__)

# Positional layout of the contract's order view tuple
ORDER_VIEW_FIELDS = (
    "id",
    "owner_id",
    "side",
    "price_num",
    "price_den",
    "amount_base",
    "remaining_base",
    "locked_quote_remaining",
    "locked_base_remaining",
    "status",
    "created_at",
)


def validate_uint(value: Any, field: str) -> Tuple[bool, Optional[str], Optional[int]]:
    """
    Validate an unsigned integer given as an int or a decimal string.

    Args:
        value: Value to validate
        field: Field name used in the error message

    Returns:
        Tuple of (is_valid, error_message, parsed_value)
    """
    try:
        return True, None, parse_uint(value, field)
    except ValueError as e:
        return False, str(e), None


def validate_side(value: Any) -> Tuple[bool, Optional[str], Optional[OrderSide]]:
    """
    Validate an order side, case-insensitively.

    Returns:
        Tuple of (is_valid, error_message, parsed_side)
    """
    if not value:
        return False, "Order side is required", None

    if not isinstance(value, str):
        return False, "Order side must be a string", None

    try:
        side = OrderSide(value.strip().lower())
    except ValueError:
        return False, f"Invalid order side: {value}. Must be one of: {[s.value for s in OrderSide]}", None

    return True, None, side


def validate_status(value: Any) -> Tuple[bool, Optional[str], Optional[OrderStatus]]:
    """
    Validate an order status.

    Accepts the contract's lower-case strings ("open"), capitalized enum
    names ("Open") and the serde enum-object form ({"Open": null}).

    Returns:
        Tuple of (is_valid, error_message, parsed_status)
    """
    if isinstance(value, Mapping):
        if len(value) != 1:
            return False, f"Invalid order status: {value!r}", None
        value = next(iter(value))

    if not isinstance(value, str) or not value:
        return False, f"Invalid order status: {value!r}", None

    try:
        status = OrderStatus(value.strip().lower())
    except ValueError:
        return False, f"Invalid order status: {value}. Must be one of: {[s.value for s in OrderStatus]}", None

    return True, None, status


def _row_to_mapping(row: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    if isinstance(row, Mapping):
        data = dict(row)
        if "owner_id" not in data and "owner" in data:
            data["owner_id"] = data["owner"]
        return data, None

    if isinstance(row, Sequence) and not isinstance(row, (str, bytes)):
        if len(row) != len(ORDER_VIEW_FIELDS):
            return None, f"Order tuple must have {len(ORDER_VIEW_FIELDS)} fields, got {len(row)}"
        return dict(zip(ORDER_VIEW_FIELDS, row)), None

    return None, f"Unsupported order row type: {type(row).__name__}"


def validate_order_view(row: Any) -> Tuple[bool, Optional[str], Optional[Order]]:
    """
    Validate one order row from the ledger and build an Order.

    Args:
        row: Contract order tuple or order mapping

    Returns:
        Tuple of (is_valid, error_message, parsed_order)
    """
    try:
        data, error = _row_to_mapping(row)
        if error:
            return False, error, None

        # Validate required fields
        required_fields = ['id', 'owner_id', 'side', 'price_num', 'price_den', 'remaining_base']
        for field in required_fields:
            if field not in data:
                return False, f"Missing required field: {field}", None

        is_valid, error, order_id = validate_uint(data['id'], 'id')
        if not is_valid:
            return False, error, None

        owner = data['owner_id']
        if not isinstance(owner, str) or not owner:
            return False, f"Order {order_id}: owner_id must be a non-empty string", None

        is_valid, error, side = validate_side(data['side'])
        if not is_valid:
            return False, f"Order {order_id}: {error}", None

        try:
            price = Price.parse(data['price_num'], data['price_den'])
        except ValueError as e:
            return False, f"Order {order_id}: {e}", None

        is_valid, error, remaining_base = validate_uint(data['remaining_base'], 'remaining_base')
        if not is_valid:
            return False, f"Order {order_id}: {error}", None

        # Optional detail fields
        amounts = {}
        for field in ('amount_base', 'locked_quote_remaining', 'locked_base_remaining', 'created_at'):
            if data.get(field) is None:
                amounts[field] = 0
                continue
            is_valid, error, amounts[field] = validate_uint(data[field], field)
            if not is_valid:
                return False, f"Order {order_id}: {error}", None

        status = OrderStatus.OPEN
        if data.get('status') is not None:
            is_valid, error, status = validate_status(data['status'])
            if not is_valid:
                return False, f"Order {order_id}: {error}", None

        order = Order(
            order_id=order_id,
            owner=owner,
            side=side,
            price=price,
            remaining_base=remaining_base,
            amount_base=amounts['amount_base'],
            locked_quote_remaining=amounts['locked_quote_remaining'],
            locked_base_remaining=amounts['locked_base_remaining'],
            status=status,
            created_at=amounts['created_at'],
        )

        return True, None, order

    except ValueError as e:
        logger.error(f"Error validating order row: {str(e)}")
        return False, f"Validation error: {str(e)}", None
