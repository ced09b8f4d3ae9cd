"""
NEAR ledger client for the order book contract.

Wraps a py-near Account to read the contract's order list and to submit
``execute`` calls. Every network operation is a coroutine so the poll loop
suspends on it.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from py_near.account import Account

from ..core.order import Order
from .validators import validate_order_view

logger = logging.getLogger(__name__)

GET_ORDERS_METHOD = "get_orders"
EXECUTE_METHOD = "execute"


class LedgerError(Exception):
    """Base class for ledger access failures."""


class LedgerInitError(LedgerError):
    """The ledger identity or connection could not be established."""


class LedgerFetchError(LedgerError):
    """Reading the order list failed."""


class LedgerSubmitError(LedgerError):
    """A state-changing call failed or was rejected."""


def load_private_key(credentials_dir: str, network_id: str, account_id: str) -> str:
    """
    Load an account key from a NEAR CLI credentials directory.

    Keys live in ``<credentials_dir>/<network_id>/<account_id>.json``.

    Args:
        credentials_dir: Root credentials directory (e.g. ~/.near-credentials)
        network_id: Network name (testnet, mainnet)
        account_id: Account whose key to load

    Returns:
        The ``private_key`` value of the credentials file

    Raises:
        LedgerInitError: If the file is missing or malformed
    """
    path = os.path.join(os.path.expanduser(credentials_dir), network_id, f"{account_id}.json")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise LedgerInitError(f"Cannot read credentials file {path}: {e}") from e

    private_key = data.get("private_key") if isinstance(data, dict) else None
    if not private_key:
        raise LedgerInitError(f"Credentials file {path} has no private_key")
    return private_key


class NearLedgerClient:
    """
    Read/write access to one order book contract through one account.
    """

    def __init__(
        self,
        contract_id: str,
        account_id: str,
        rpc_addr: str,
        private_key: Optional[str] = None,
        page_limit: int = 200,
        max_pages: int = 50,
    ):
        """
        Initialize the client. No network access happens until connect().

        Args:
            contract_id: Order book contract account
            account_id: Account used for view and execute calls
            rpc_addr: NEAR RPC endpoint
            private_key: Signing key; only needed to submit executions
            page_limit: Orders requested per get_orders page
            max_pages: Upper bound on pages read per snapshot
        """
        self.contract_id = contract_id
        self.account_id = account_id
        self.rpc_addr = rpc_addr
        self.private_key = private_key
        self.page_limit = page_limit
        self.max_pages = max_pages
        self.account: Optional[Account] = None

    async def connect(self) -> None:
        """
        Create and start the underlying account.

        Raises:
            LedgerInitError: If the account cannot be started
        """
        try:
            account = Account(self.account_id, self.private_key, self.rpc_addr)
            await account.startup()
        except Exception as e:
            raise LedgerInitError(f"Cannot connect {self.account_id} to {self.rpc_addr}: {e}") from e

        self.account = account
        logger.info(f"Connected to {self.rpc_addr} as {self.account_id}, contract {self.contract_id}")

    def _require_account(self) -> Account:
        if self.account is None:
            raise LedgerInitError("Ledger client is not connected")
        return self.account

    async def get_orders_page(self, from_index: int, limit: int) -> List[Any]:
        """
        Read one page of the contract's order list.

        Raises:
            LedgerFetchError: On transport or query failure
        """
        account = self._require_account()
        try:
            response = await account.view_function(
                self.contract_id,
                GET_ORDERS_METHOD,
                {"from_index": from_index, "limit": limit},
            )
        except Exception as e:
            raise LedgerFetchError(f"get_orders(from_index={from_index}, limit={limit}) failed: {e}") from e

        rows = getattr(response, "result", response)
        if not isinstance(rows, list):
            raise LedgerFetchError(f"get_orders returned {type(rows).__name__}, expected a list")
        return rows

    async def fetch_open_orders(self) -> List[Order]:
        """
        Read the whole order list and keep open orders with remaining base.

        Pages are requested until a short page is returned or max_pages is
        reached. Rows that fail validation are logged and skipped.

        Returns:
            Open orders in ledger order

        Raises:
            LedgerFetchError: On transport or query failure
        """
        orders: List[Order] = []
        skipped = 0
        from_index = 0

        for page in range(self.max_pages):
            rows = await self.get_orders_page(from_index, self.page_limit)

            for row in rows:
                is_valid, error, order = validate_order_view(row)
                if not is_valid:
                    skipped += 1
                    logger.warning(f"Skipping invalid order row: {error}")
                    continue
                if order.is_closed:
                    continue
                orders.append(order)

            if len(rows) < self.page_limit:
                break
            from_index += len(rows)
        else:
            logger.warning(f"Stopped reading orders after {self.max_pages} pages; the snapshot may be incomplete")

        logger.debug(f"Fetched {len(orders)} open orders ({skipped} invalid rows skipped)")
        return orders

    async def execute(self, args: Dict[str, Any], gas: int, deposit: int) -> Any:
        """
        Call the contract's ``execute`` method.

        Args:
            args: Call arguments (see Match.to_execute_args)
            gas: Gas attached to the call
            deposit: Attached deposit in yoctoNEAR

        Returns:
            The transaction result reported by py-near

        Raises:
            LedgerSubmitError: If the call fails or the transaction reports a failure
        """
        account = self._require_account()
        try:
            result = await account.function_call(
                self.contract_id,
                EXECUTE_METHOD,
                args,
                gas=gas,
                amount=deposit,
            )
        except Exception as e:
            raise LedgerSubmitError(f"execute({args}) failed: {e}") from e

        status = getattr(result, "status", None)
        if isinstance(status, dict) and "Failure" in status:
            raise LedgerSubmitError(f"execute({args}) rejected: {status['Failure']}")

        return result
