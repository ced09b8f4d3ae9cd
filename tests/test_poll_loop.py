"""
Tests for the poll loop, the match quarantine and the metric history cap.

The ledger is an in-memory double serving a scripted list of snapshots.
"""

import unittest

from obmatcher.agent.poll_loop import PollLoop
from obmatcher.agent.quarantine import MatchQuarantine
from obmatcher.core.order import Match, Order
from obmatcher.core.price import Price
from obmatcher.ledger.client import LedgerFetchError, LedgerSubmitError
from obmatcher.ledger.submitter import ExecutionSubmitter
from obmatcher.utils.performance import PerformanceMonitor


def make_order(order_id, side, num, den, remaining):
    return Order(
        order_id=order_id,
        owner=f"owner{order_id}.testnet",
        side=side,
        price=Price(num, den),
        remaining_base=remaining,
    )


CROSSING = [make_order(1, "sell", 3, 1, 10), make_order(2, "buy", 3, 1, 5)]
NOT_CROSSING = [make_order(1, "sell", 5, 1, 10), make_order(2, "buy", 4, 1, 5)]


class ScriptedLedger:
    """
    Serves snapshots in order, repeating the last one.

    A snapshot that is an exception instance is raised instead.
    """

    def __init__(self, snapshots, execute_errors=None):
        self.snapshots = list(snapshots)
        self.execute_errors = list(execute_errors or [])
        self.fetch_calls = 0
        self.executed = []

    async def fetch_open_orders(self):
        index = min(self.fetch_calls, len(self.snapshots) - 1)
        self.fetch_calls += 1
        snapshot = self.snapshots[index]
        if isinstance(snapshot, Exception):
            raise snapshot
        return list(snapshot)

    async def execute(self, args, gas, deposit):
        self.executed.append(args)
        if self.execute_errors:
            error = self.execute_errors.pop(0)
            if error is not None:
                raise error


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestMatchQuarantine(unittest.TestCase):
    """Test cases for the quarantine window."""

    def setUp(self):
        """Set up test fixtures."""
        self.clock = FakeClock()
        self.quarantine = MatchQuarantine(window_seconds=30, clock=self.clock)
        self.match = Match(1, 2, 5, 15)

    def test_recorded_match_is_quarantined_within_window(self):
        """Test that a recorded match is held back until the window passes."""
        self.assertFalse(self.quarantine.is_quarantined(self.match))

        self.quarantine.record(self.match)
        self.clock.now += 29
        self.assertTrue(self.quarantine.is_quarantined(self.match))

        self.clock.now += 1
        self.assertFalse(self.quarantine.is_quarantined(self.match))
        self.assertEqual(len(self.quarantine), 0)

    def test_fingerprint_covers_amounts(self):
        """Test that a different fill of the same pair is not quarantined."""
        self.quarantine.record(self.match)
        self.assertFalse(self.quarantine.is_quarantined(Match(1, 2, 4, 12)))

    def test_zero_window_disables(self):
        """Test that a zero window never quarantines."""
        quarantine = MatchQuarantine(window_seconds=0, clock=self.clock)
        quarantine.record(self.match)
        self.assertFalse(quarantine.is_quarantined(self.match))
        self.assertEqual(len(quarantine), 0)

    def test_negative_window_rejected(self):
        """Test window validation."""
        with self.assertRaises(ValueError):
            MatchQuarantine(window_seconds=-1)


class TestPerformanceMonitor(unittest.TestCase):
    """Test cases for the metric history cap."""

    def test_metric_keeps_newest_samples(self):
        """Test that old samples are dropped once the cap is reached."""
        monitor = PerformanceMonitor(max_samples=3)
        for value in range(10):
            monitor.record_metric("fetch_latency_ms", float(value))

        self.assertEqual(list(monitor.metrics["fetch_latency_ms"]), [7.0, 8.0, 9.0])

        stats = monitor.get_summary()["metrics"]["fetch_latency_ms"]
        self.assertEqual(stats["min"], 7.0)
        self.assertEqual(stats["max"], 9.0)
        self.assertEqual(stats["count"], 3)

    def test_max_samples_must_be_positive(self):
        """Test rejection of an empty history."""
        with self.assertRaises(ValueError):
            PerformanceMonitor(max_samples=0)


class TestPollLoop(unittest.IsolatedAsyncioTestCase):
    """Test cases for poll cycles."""

    def make_loop(self, ledger, dry_run=False, quarantine=None):
        self.monitor = PerformanceMonitor()
        return PollLoop(
            ledger=ledger,
            submitter=None if dry_run else ExecutionSubmitter(ledger),
            dry_run=dry_run,
            poll_interval=0,
            quarantine=quarantine,
            monitor=self.monitor,
        )

    async def test_cycle_submits_match(self):
        """Test a full fetch, select, submit cycle."""
        ledger = ScriptedLedger([CROSSING])
        loop = self.make_loop(ledger)

        result = await loop.run_cycle()

        # Assertions
        self.assertTrue(result.ok)
        self.assertTrue(result.submitted)
        self.assertEqual(result.orders_fetched, 2)
        self.assertEqual(result.match, Match(1, 2, 5, 15))
        self.assertEqual(ledger.executed, [{
            "maker_order_id": 1, "taker_order_id": 2, "base_fill": "5", "quote_paid": "15",
        }])
        self.assertEqual(self.monitor.get_counter("submissions"), 1)

    async def test_no_match_no_submission(self):
        """Test a cycle without a crossing pair."""
        ledger = ScriptedLedger([NOT_CROSSING])
        loop = self.make_loop(ledger)

        result = await loop.run_cycle()

        self.assertTrue(result.ok)
        self.assertIsNone(result.match)
        self.assertEqual(ledger.executed, [])

    async def test_dry_run_only_reports(self):
        """Test that dry-run never submits."""
        ledger = ScriptedLedger([CROSSING])
        loop = self.make_loop(ledger, dry_run=True)

        result = await loop.run_cycle()

        self.assertEqual(result.match, Match(1, 2, 5, 15))
        self.assertFalse(result.submitted)
        self.assertTrue(result.dry_run)
        self.assertEqual(ledger.executed, [])
        self.assertEqual(loop.selector.last_match, result.match)
        self.assertEqual(self.monitor.get_counter("dry_run_matches"), 1)

    async def test_submitter_required_unless_dry_run(self):
        """Test construction without a submitter."""
        with self.assertRaises(ValueError):
            PollLoop(ledger=ScriptedLedger([[]]), submitter=None, dry_run=False)

    async def test_fetch_failure_keeps_previous_mirror(self):
        """Test that a failed fetch is logged and the mirror is left alone."""
        ledger = ScriptedLedger([NOT_CROSSING, LedgerFetchError("rpc down"), NOT_CROSSING])
        loop = self.make_loop(ledger)

        await loop.run_cycle()
        mirror_before = loop.mirror

        with self.assertLogs("obmatcher.agent.poll_loop", level="ERROR"):
            result = await loop.run_cycle()

        self.assertFalse(result.ok)
        self.assertEqual(result.error_phase, "fetch")
        self.assertIs(loop.mirror, mirror_before)
        self.assertEqual(self.monitor.get_counter("fetch_failures"), 1)

        # The next cycle proceeds normally
        result = await loop.run_cycle()
        self.assertTrue(result.ok)

    async def test_submit_failure_is_swallowed(self):
        """Test that a failed submission does not escape the cycle."""
        ledger = ScriptedLedger([CROSSING], execute_errors=[LedgerSubmitError("maker not open")])
        loop = self.make_loop(ledger)

        result = await loop.run_cycle()

        self.assertEqual(result.error_phase, "submit")
        self.assertFalse(result.submitted)
        self.assertEqual(len(ledger.executed), 1)
        self.assertEqual(self.monitor.get_counter("submit_failures"), 1)

    async def test_unexpected_error_is_swallowed(self):
        """Test that any exception inside a cycle is contained."""
        ledger = ScriptedLedger([RuntimeError("bad payload")])
        loop = self.make_loop(ledger)

        result = await loop.run_cycle()

        self.assertEqual(result.error_phase, "fetch")
        self.assertEqual(result.error, "bad payload")

    async def test_mirror_is_rebuilt_wholesale(self):
        """Test that orders absent from a snapshot disappear."""
        ledger = ScriptedLedger([CROSSING, [make_order(9, "sell", 1, 1, 3)]])
        loop = self.make_loop(ledger, dry_run=True)

        await loop.run_cycle()
        self.assertEqual(set(loop.mirror.buys) | set(loop.mirror.sells), {1, 2})

        await loop.run_cycle()
        self.assertEqual(set(loop.mirror.sells), {9})
        self.assertEqual(loop.mirror.buys, {})

    async def test_quarantine_blocks_resubmission(self):
        """Test that an unchanged book is not executed twice within the window."""
        clock = FakeClock()
        ledger = ScriptedLedger([CROSSING])
        loop = self.make_loop(ledger, quarantine=MatchQuarantine(30, clock=clock))

        first = await loop.run_cycle()
        second = await loop.run_cycle()

        self.assertTrue(first.submitted)
        self.assertTrue(second.quarantined)
        self.assertFalse(second.submitted)
        self.assertEqual(len(ledger.executed), 1)

        clock.now += 31
        third = await loop.run_cycle()
        self.assertTrue(third.submitted)
        self.assertEqual(len(ledger.executed), 2)

    async def test_failed_submission_is_quarantined(self):
        """Test that a failed attempt is still held back, its outcome being uncertain."""
        clock = FakeClock()
        ledger = ScriptedLedger([CROSSING], execute_errors=[LedgerSubmitError("timeout")])
        loop = self.make_loop(ledger, quarantine=MatchQuarantine(30, clock=clock))

        await loop.run_cycle()
        second = await loop.run_cycle()

        self.assertTrue(second.quarantined)
        self.assertEqual(len(ledger.executed), 1)

    async def test_run_forever_bounded(self):
        """Test run_forever with a cycle limit."""
        ledger = ScriptedLedger([NOT_CROSSING, LedgerFetchError("rpc down"), NOT_CROSSING])
        loop = self.make_loop(ledger)

        await loop.run_forever(max_cycles=3)

        self.assertEqual(ledger.fetch_calls, 3)
        self.assertEqual(loop.cycle_count, 3)
        self.assertFalse(loop.running)

    async def test_stop_ends_loop(self):
        """Test that stop() ends the loop after the current cycle."""
        ledger = ScriptedLedger([NOT_CROSSING])
        loop = self.make_loop(ledger)

        fetch = ledger.fetch_open_orders

        async def fetch_then_stop():
            orders = await fetch()
            if ledger.fetch_calls == 2:
                loop.stop()
            return orders

        ledger.fetch_open_orders = fetch_then_stop
        await loop.run_forever()

        self.assertEqual(ledger.fetch_calls, 2)

    async def test_latency_history_is_bounded(self):
        """Test that per-cycle latency metrics keep only the newest samples."""
        monitor = PerformanceMonitor(max_samples=50)
        loop = PollLoop(ledger=ScriptedLedger([[]]), dry_run=True, poll_interval=0, monitor=monitor)

        for _ in range(120):
            await loop.run_cycle()

        self.assertEqual(monitor.get_counter("cycles"), 120)
        for name in ("cycle_latency_ms", "fetch_latency_ms", "select_latency_ms"):
            self.assertEqual(len(monitor.metrics[name]), 50, name)
        self.assertEqual(monitor.get_summary()["metrics"]["cycle_latency_ms"]["count"], 50)

    async def test_statistics(self):
        """Test the statistics snapshot."""
        loop = self.make_loop(ScriptedLedger([CROSSING]), dry_run=True)
        await loop.run_cycle()

        stats = loop.get_statistics()

        self.assertEqual(stats["cycles"], 1)
        self.assertTrue(stats["dry_run"])
        self.assertEqual(stats["mirror"]["buy_orders"], 1)
        self.assertEqual(stats["selector"]["matches_found"], 1)
        self.assertEqual(stats["last_cycle"]["match"]["quote_paid"], "15")
        self.assertIsNotNone(stats["last_snapshot_at"])


if __name__ == '__main__':
    unittest.main()
