"""
Submission of selected matches to the ledger.
"""

import logging
from typing import Any, Optional

from ..core.order import Match
from ..utils.logger import log_execution_audit
from .client import LedgerError, LedgerSubmitError

logger = logging.getLogger(__name__)

# 150 TGas, as used for the order book's execute call
DEFAULT_EXECUTE_GAS = 150_000_000_000_000
# execute asserts exactly one yoctoNEAR attached
DEFAULT_EXECUTE_DEPOSIT = 1


class ExecutionSubmitter:
    """
    Turns a Match into one ``execute`` call on the ledger.

    Each submit() makes exactly one attempt; retrying is left to the
    caller.
    """

    def __init__(
        self,
        ledger: Any,
        gas: int = DEFAULT_EXECUTE_GAS,
        deposit: int = DEFAULT_EXECUTE_DEPOSIT,
        audit_logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the submitter.

        Args:
            ledger: Object with an async ``execute(args, gas, deposit)``
            gas: Gas attached to each execute call
            deposit: Deposit attached to each execute call, in yoctoNEAR
            audit_logger: Optional audit trail for execution attempts
        """
        self.ledger = ledger
        self.gas = gas
        self.deposit = deposit
        self.audit_logger = audit_logger

    async def submit(self, match: Match) -> bool:
        """
        Submit a match for execution.

        Returns:
            True once the ledger accepted the call

        Raises:
            LedgerSubmitError: If the call failed
        """
        args = match.to_execute_args()
        logger.info(f"Submitting execute {args}")

        try:
            await self.ledger.execute(args, gas=self.gas, deposit=self.deposit)
        except LedgerError as e:
            self._audit("FAILED", match, str(e))
            if isinstance(e, LedgerSubmitError):
                raise
            raise LedgerSubmitError(str(e)) from e
        except Exception as e:
            self._audit("FAILED", match, str(e))
            raise LedgerSubmitError(f"execute({args}) failed: {e}") from e

        self._audit("SUBMITTED", match)
        return True

    def _audit(self, outcome: str, match: Match, detail: str = "") -> None:
        if self.audit_logger is not None:
            log_execution_audit(self.audit_logger, outcome, match.to_dict(), detail)
