"""
Utility modules for the matching agent.

This module provides logging and performance monitoring helpers.
"""

from .logger import setup_logging, get_logger, MatcherLogger, create_audit_logger
from .performance import PerformanceMonitor, LatencyTracker, get_performance_monitor, measure_latency

__all__ = [
    "setup_logging",
    "get_logger",
    "MatcherLogger",
    "create_audit_logger",
    "PerformanceMonitor",
    "LatencyTracker",
    "get_performance_monitor",
    "measure_latency",
]
