"""
Submission counters.

The submitter reports every attempt and every final outcome to a
SubmitMetrics instance passed to its constructor:
- record_attempt(preset): one spark-submit run started (retry_total{preset})
- record_outcome(preset, status): retry loop finished with "success" or
  "failure" (spark_exec_total{preset,status})
"""

import threading
from abc import ABC, abstractmethod
from collections import Counter

SUCCESS = "success"
FAILURE = "failure"


class SubmitMetrics(ABC):
    """Abstract base class for submission counters."""

    @abstractmethod
    def record_attempt(self, preset: str) -> None:
        """Count one spark-submit attempt for a preset."""
        pass

    @abstractmethod
    def record_outcome(self, preset: str, status: str) -> None:
        """Count the final outcome ("success" or "failure") of a submission."""
        pass


class NoOpMetrics(SubmitMetrics):
    """Discards all counts."""

    def record_attempt(self, preset: str) -> None:
        pass

    def record_outcome(self, preset: str, status: str) -> None:
        pass


class InMemoryMetrics(SubmitMetrics):
    """
    Thread-safe in-process counters.

    Submissions run on background threads, so every update takes the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._attempts: Counter[str] = Counter()
        self._outcomes: Counter[tuple[str, str]] = Counter()

    def record_attempt(self, preset: str) -> None:
        with self._lock:
            self._attempts[preset] += 1

    def record_outcome(self, preset: str, status: str) -> None:
        if status not in (SUCCESS, FAILURE):
            raise ValueError(f"unknown submission status: {status}")
        with self._lock:
            self._outcomes[(preset, status)] += 1

    def attempts(self, preset: str) -> int:
        with self._lock:
            return self._attempts[preset]

    def outcomes(self, preset: str, status: str) -> int:
        with self._lock:
            return self._outcomes[(preset, status)]

    def snapshot(self) -> dict[str, dict]:
        """Copy of all counters, keyed like the exported metric names."""
        with self._lock:
            return {
                "retry_total": dict(self._attempts),
                "spark_exec_total": {
                    f"{preset}:{status}": count
                    for (preset, status), count in self._outcomes.items()
                },
            }
