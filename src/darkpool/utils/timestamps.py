"""
Timestamp utilities for the service layer:
- Unix seconds
- Monotonic millisecond timer (for latency)

Never used on the order program path.
"""

from __future__ import annotations
import time


def unix_now() -> int:
    return int(time.time())


def monotonic_ms() -> float:
    """
    Returns a monotonic millisecond counter.
    Useful for measuring latency independent of system clock changes.
    """
    return time.monotonic() * 1000.0
