"""In-memory check outcome counters.

Checks run single-threaded within a cycle, so plain dicts are safe; no
locking needed.
"""

import time

OUTCOMES = ("valid", "invalid", "purged", "repaired", "panicked")


class CheckMetrics:
    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._start_time = time.monotonic()
        self._cycles = 0
        self._checks: dict[str, dict[str, int]] = {}

    def record_outcome(self, check_name: str, outcome: str) -> None:
        """Record one evaluated entity for a check."""
        if outcome not in OUTCOMES:
            raise ValueError(f"Unknown check outcome: {outcome!r}")
        if not self.enabled:
            return
        counts = self._checks.setdefault(check_name, {name: 0 for name in OUTCOMES})
        counts[outcome] += 1

    def record_cycle(self) -> None:
        if self.enabled:
            self._cycles += 1

    def snapshot(self) -> dict:
        """Return a copy of current metrics."""
        return {
            "uptime_seconds": round(time.monotonic() - self._start_time, 1),
            "cycles": self._cycles,
            "checks": {name: dict(counts) for name, counts in self._checks.items()},
        }
