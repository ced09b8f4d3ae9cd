"""
Short-lived memory of submitted matches.

The ledger may not reflect an execution by the time of the next poll, in
which case the same crossing pair is selected again. Submissions are
remembered by fingerprint for a fixed window and identical matches are not
resubmitted inside it.
"""

import time
import logging
from typing import Callable, Dict, Tuple

from ..core.order import Match

logger = logging.getLogger(__name__)

Fingerprint = Tuple[int, int, int, int]


class MatchQuarantine:
    """
    Fingerprints of recently submitted matches with their submission time.

    A window of 0 disables the quarantine.
    """

    def __init__(self, window_seconds: float = 30.0, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the quarantine.

        Args:
            window_seconds: How long a submitted match stays quarantined
            clock: Monotonic time source in seconds
        """
        if window_seconds < 0:
            raise ValueError(f"Quarantine window cannot be negative: {window_seconds}")
        self.window_seconds = window_seconds
        self.clock = clock
        self._entries: Dict[Fingerprint, float] = {}

    @property
    def enabled(self) -> bool:
        return self.window_seconds > 0

    def record(self, match: Match) -> None:
        """Remember a submission attempt for this match."""
        if not self.enabled:
            return
        self._entries[match.fingerprint] = self.clock()

    def is_quarantined(self, match: Match) -> bool:
        """True if an identical match was submitted within the window."""
        if not self.enabled:
            return False
        self.purge()
        return match.fingerprint in self._entries

    def purge(self) -> int:
        """
        Drop expired entries.

        Returns:
            Number of entries dropped
        """
        cutoff = self.clock() - self.window_seconds
        expired = [fp for fp, submitted_at in self._entries.items() if submitted_at <= cutoff]
        for fp in expired:
            del self._entries[fp]
        if expired:
            logger.debug(f"Released {len(expired)} quarantined match(es)")
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
