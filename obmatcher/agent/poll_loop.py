"""
Poll loop driving the matching agent.

Each cycle fetches the open orders, rebuilds the mirror from them, selects
at most one match and, unless running dry, submits it. Failures inside a
cycle are logged and the loop carries on after the usual delay.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..core.matching_engine import MatchSelector
from ..core.order import Match
from ..core.order_book import OrderMirror
from ..ledger.client import LedgerError
from ..utils.logger import MatcherLogger
from ..utils.performance import (
    LatencyTracker,
    PerformanceMonitor,
    get_performance_monitor,
    measure_latency,
)
from .quarantine import MatchQuarantine

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Outcome of one poll cycle."""

    cycle: int
    orders_fetched: int = 0
    match: Optional[Match] = None
    submitted: bool = False
    dry_run: bool = False
    quarantined: bool = False
    error_phase: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_phase is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": self.cycle,
            "orders_fetched": self.orders_fetched,
            "match": self.match.to_dict() if self.match else None,
            "submitted": self.submitted,
            "dry_run": self.dry_run,
            "quarantined": self.quarantined,
            "error_phase": self.error_phase,
            "error": self.error,
        }


class PollLoop:
    """
    Fetch, rebuild, select and maybe submit, forever.

    The mirror is owned by the loop: every cycle builds a new one from the
    fetched snapshot and swaps it in, so readers never see a half-built
    mirror. A failed fetch leaves the previous mirror in place.
    """

    def __init__(
        self,
        ledger: Any,
        submitter: Any = None,
        selector: Optional[MatchSelector] = None,
        dry_run: bool = False,
        poll_interval: float = 3.0,
        quarantine: Optional[MatchQuarantine] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ):
        """
        Initialize the poll loop.

        Args:
            ledger: Object with an async ``fetch_open_orders()``
            submitter: Object with an async ``submit(match)``; required unless dry_run
            selector: Match selector, a fresh one by default
            dry_run: Log selected matches instead of submitting them
            poll_interval: Delay between cycles in seconds
            quarantine: Recently submitted matches to hold back
            monitor: Performance monitor, the global one by default
        """
        if submitter is None and not dry_run:
            raise ValueError("A submitter is required unless running dry")
        if poll_interval < 0:
            raise ValueError(f"Poll interval cannot be negative: {poll_interval}")

        self.ledger = ledger
        self.submitter = submitter
        self.selector = selector or MatchSelector()
        self.dry_run = dry_run
        self.poll_interval = poll_interval
        self.quarantine = quarantine
        self.monitor = monitor or get_performance_monitor()
        self.matcher_logger = MatcherLogger()
        self.cycle_latency = LatencyTracker(max_samples=1000)

        self.mirror = OrderMirror()
        self.cycle_count = 0
        self.last_result: Optional[CycleResult] = None
        self.last_snapshot_at: Optional[datetime] = None
        self.running = False

        logger.info(f"Poll loop initialized (dry_run={dry_run}, interval={poll_interval}s)")

    async def run_cycle(self) -> CycleResult:
        """
        Run one fetch, rebuild, select, submit cycle.

        Never raises for failures inside the cycle; they are logged and
        reported in the returned result.
        """
        self.cycle_count += 1
        result = CycleResult(cycle=self.cycle_count, dry_run=self.dry_run)
        self.monitor.increment_counter("cycles")
        start_time = time.perf_counter()
        phase = "fetch"

        try:
            with measure_latency(self.monitor, "fetch"):
                orders = await self.ledger.fetch_open_orders()
            result.orders_fetched = len(orders)

            phase = "rebuild"
            self.mirror = OrderMirror.from_snapshot(orders)
            self.last_snapshot_at = datetime.now(timezone.utc)
            self.matcher_logger.log_snapshot(self.cycle_count, len(self.mirror.buys), len(self.mirror.sells))

            phase = "select"
            with measure_latency(self.monitor, "select"):
                match = self.selector.select(self.mirror)
            result.match = match

            if match is None:
                return result

            self.monitor.increment_counter("matches_found")

            if self.dry_run:
                self.monitor.increment_counter("dry_run_matches")
                self.matcher_logger.log_match(self.cycle_count, match.to_dict(), "DRY_RUN")
                return result

            if self.quarantine is not None and self.quarantine.is_quarantined(match):
                result.quarantined = True
                self.monitor.increment_counter("quarantined_matches")
                self.matcher_logger.log_match(self.cycle_count, match.to_dict(), "QUARANTINED")
                return result

            phase = "submit"
            self.matcher_logger.log_match(self.cycle_count, match.to_dict(), "SUBMIT")
            # A failed attempt may still land on the ledger, so record before submitting
            if self.quarantine is not None:
                self.quarantine.record(match)

            with measure_latency(self.monitor, "submit"):
                await self.submitter.submit(match)

            result.submitted = True
            self.monitor.increment_counter("submissions")
            self.matcher_logger.log_submission(self.cycle_count, match.to_dict(), True)

        except Exception as e:
            result.error_phase = phase
            result.error = str(e)
            self.monitor.increment_counter(f"{phase}_failures")

            if isinstance(e, LedgerError):
                logger.error(f"Ledger {phase} failed in cycle {self.cycle_count}: {str(e)}")
            else:
                logger.exception(f"Unexpected error during {phase} in cycle {self.cycle_count}")

            self.matcher_logger.log_cycle_error(self.cycle_count, phase, str(e))
            if phase == "submit" and result.match is not None:
                self.matcher_logger.log_submission(self.cycle_count, result.match.to_dict(), False)

        finally:
            latency_ms = (time.perf_counter() - start_time) * 1000
            self.monitor.record_metric("cycle_latency_ms", latency_ms)
            self.cycle_latency.record(latency_ms)
            self.last_result = result

        return result

    async def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """
        Run cycles separated by the poll interval until stopped.

        Args:
            max_cycles: Stop after this many cycles; None runs until stop()
                or process termination
        """
        self.running = True
        logger.info("Poll loop started")
        cycles = 0

        try:
            while self.running:
                await self.run_cycle()
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break
                if not self.running:
                    break
                await asyncio.sleep(self.poll_interval)
        finally:
            self.running = False
            logger.info(f"Poll loop stopped after {cycles} cycles")

    def stop(self) -> None:
        """Ask the loop to exit after the current cycle."""
        self.running = False

    def get_statistics(self) -> Dict[str, Any]:
        """Get loop statistics."""
        return {
            "running": self.running,
            "dry_run": self.dry_run,
            "poll_interval_seconds": self.poll_interval,
            "cycles": self.cycle_count,
            "last_snapshot_at": self.last_snapshot_at.isoformat() if self.last_snapshot_at else None,
            "last_cycle": self.last_result.to_dict() if self.last_result else None,
            "quarantined_matches": len(self.quarantine) if self.quarantine is not None else 0,
            "cycle_latency_ms": self.cycle_latency.get_percentiles(),
            "mirror": self.mirror.get_statistics(),
            "selector": self.selector.get_statistics(),
        }
