"""
Poll loop of the matching agent.
"""

from .poll_loop import PollLoop, CycleResult
from .quarantine import MatchQuarantine

__all__ = [
    "PollLoop",
    "CycleResult",
    "MatchQuarantine",
]
