"""
Performance monitoring utilities.

This module tracks counters, latency metrics and process resource usage
for the poll loop.
"""

import time
import psutil
import threading
from collections import deque
from contextlib import contextmanager
from typing import Deque, Dict, List, Any, Iterable
import logging

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring for the matching agent.

    Tracks named latency metrics, counters and process resources.
    Each metric keeps only its most recent ``max_samples`` values.
    Thread safe, since the status API reads it from another thread.
    """

    def __init__(self, max_samples: int = 1000):
        """
        Initialize performance monitor.

        Args:
            max_samples: Maximum number of samples kept per metric
        """
        if max_samples <= 0:
            raise ValueError(f"max_samples must be positive, got: {max_samples}")

        self.max_samples = max_samples
        self.metrics: Dict[str, Deque[float]] = {}
        self.counters: Dict[str, int] = {}
        self.start_time = time.time()
        self.lock = threading.Lock()

        self.process = psutil.Process()
        self.initial_memory = self.process.memory_info().rss

        logger.debug("Performance monitor initialized")

    def record_metric(self, name: str, value: float) -> None:
        """
        Record a performance metric.

        Args:
            name: Metric name
            value: Metric value
        """
        with self.lock:
            if name not in self.metrics:
                self.metrics[name] = deque(maxlen=self.max_samples)
            self.metrics[name].append(value)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """
        Increment a counter metric.

        Args:
            name: Counter name
            value: Increment value
        """
        with self.lock:
            self.counters[name] = self.counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        with self.lock:
            return self.counters.get(name, 0)

    def get_system_stats(self) -> Dict[str, Any]:
        """Get current process statistics."""
        try:
            memory_info = self.process.memory_info()

            return {
                "memory_rss_mb": memory_info.rss / 1024 / 1024,
                "memory_percent": self.process.memory_percent(),
                "cpu_percent": self.process.cpu_percent(),
                "thread_count": self.process.num_threads(),
                "uptime_seconds": time.time() - self.start_time,
                "memory_growth_mb": (memory_info.rss - self.initial_memory) / 1024 / 1024
            }
        except psutil.Error as e:
            logger.error(f"Error getting system stats: {str(e)}")
            return {}

    def get_summary(self) -> Dict[str, Any]:
        """Get performance summary."""
        with self.lock:
            summary = {
                "uptime_seconds": time.time() - self.start_time,
                "counters": dict(self.counters),
                "metrics": {name: _stats(values) for name, values in self.metrics.items() if values},
            }

        summary["system"] = self.get_system_stats()
        return summary


def _stats(values: Iterable[float]) -> Dict[str, float]:
    values = list(values)
    if not values:
        return {"min": 0, "max": 0, "avg": 0, "count": 0}
    return {
        "min": min(values),
        "max": max(values),
        "avg": sum(values) / len(values),
        "count": len(values)
    }


@contextmanager
def measure_latency(monitor: PerformanceMonitor, operation_name: str):
    """
    Context manager to measure operation latency.

    Args:
        monitor: Performance monitor instance
        operation_name: Name of the operation being measured
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        latency_ms = (time.perf_counter() - start_time) * 1000
        monitor.record_metric(f"{operation_name}_latency_ms", latency_ms)


class LatencyTracker:
    """
    Track latency percentiles for critical operations.
    """

    def __init__(self, max_samples: int = 10000):
        """
        Initialize latency tracker.

        Args:
            max_samples: Maximum number of samples to keep
        """
        self.max_samples = max_samples
        self.samples: List[float] = []
        self.lock = threading.Lock()

    def record(self, latency_ms: float) -> None:
        """Record a latency measurement."""
        with self.lock:
            self.samples.append(latency_ms)
            if len(self.samples) > self.max_samples:
                self.samples.pop(0)

    def get_percentiles(self) -> Dict[str, float]:
        """
        Get latency percentiles.

        Returns:
            Dictionary with p50, p90, p95, p99 percentiles
        """
        with self.lock:
            if not self.samples:
                return {"p50": 0, "p90": 0, "p95": 0, "p99": 0}

            sorted_samples = sorted(self.samples)
            n = len(sorted_samples)

            return {
                "p50": sorted_samples[int(0.5 * n)],
                "p90": sorted_samples[int(0.9 * n)],
                "p95": sorted_samples[int(0.95 * n)],
                "p99": sorted_samples[int(0.99 * n)]
            }


# Global performance monitor instance
performance_monitor = PerformanceMonitor()


def get_performance_monitor() -> PerformanceMonitor:
    """Get the global performance monitor instance."""
    return performance_monitor
