"""
Service statistics.

Proof jobs report immutable results here; nothing in the core reads or
writes this state. Thread-safe for concurrent jobs.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class StatsSnapshot:
    total_proofs_generated: int
    total_proofs_verified: int
    average_generation_time_ms: float
    uptime_seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_proofs_generated": self.total_proofs_generated,
            "total_proofs_verified": self.total_proofs_verified,
            "average_generation_time_ms": self.average_generation_time_ms,
            "uptime_seconds": self.uptime_seconds,
        }


class ProofStats:
    """Lock-guarded counters for the /stats endpoint."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._started = time.monotonic()
        self._generated = 0
        self._verified = 0
        self._generation_time_ms = 0.0

    def record_generation(self, duration_ms: float) -> None:
        with self._lock:
            self._generated += 1
            self._generation_time_ms += duration_ms

    def record_verification(self) -> None:
        with self._lock:
            self._verified += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            generated = self._generated
            verified = self._verified
            total_ms = self._generation_time_ms
        return StatsSnapshot(
            total_proofs_generated=generated,
            total_proofs_verified=verified,
            average_generation_time_ms=(total_ms / generated) if generated else 0.0,
            uptime_seconds=int(time.monotonic() - self._started),
        )
