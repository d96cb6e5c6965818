"""
Lightweight in-memory metrics for an exploration session.

Simple counters and timers, no external exporter. The CLI prints a
snapshot in verbose mode.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import ClassVar, Iterator


# Metric names used across the package
PAGES_ANALYZED = "pages_analyzed"
ANALYSIS_FAILURES = "analysis_failures"
CLASSIFICATION_CALLS = "classification_calls"
CLASSIFICATION_FALLBACKS = "classification_fallbacks"
LLM_CALLS = "llm_calls"
LLM_LATENCY_MS = "llm_latency_ms"
PAGE_ANALYSIS_MS = "page_analysis_ms"


@dataclass
class TimingStats:
    """Statistics for timing measurements."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count > 0 else 0.0

    def record(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "total_ms": round(self.total_ms, 2),
            "avg_ms": round(self.avg_ms, 2),
            "min_ms": round(self.min_ms, 2) if self.count > 0 else 0.0,
            "max_ms": round(self.max_ms, 2),
        }


@dataclass
class Metrics:
    """
    Thread-safe counters and timings, shared through Metrics.get().

    Example:
        >>> metrics = Metrics.get()
        >>> metrics.increment(PAGES_ANALYZED)
        >>> with metrics.timer(PAGE_ANALYSIS_MS):
        ...     await analyzer.analyze(url)
    """

    _counters: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    _timings: dict[str, TimingStats] = field(
        default_factory=lambda: defaultdict(TimingStats)
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    _instance: ClassVar["Metrics | None"] = None

    @classmethod
    def get(cls) -> "Metrics":
        """Get the process-wide instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Clear all counters and timings (used by tests)."""
        if cls._instance is not None:
            with cls._instance._lock:
                cls._instance._counters.clear()
                cls._instance._timings.clear()

    def increment(self, name: str, value: int = 1) -> int:
        """Increment a counter and return its new value."""
        with self._lock:
            self._counters[name] += value
            return self._counters[name]

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def observe(self, name: str, duration_ms: float) -> None:
        with self._lock:
            self._timings[name].record(duration_ms)

    def get_timing(self, name: str) -> TimingStats | None:
        """Return a copy of the timing statistics for a metric."""
        with self._lock:
            stats = self._timings.get(name)
            if stats is None:
                return None
            return TimingStats(
                count=stats.count,
                total_ms=stats.total_ms,
                min_ms=stats.min_ms,
                max_ms=stats.max_ms,
            )

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Time the enclosed block, recording even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(name, (time.perf_counter() - start) * 1000)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {
                    name: stats.to_dict()
                    for name, stats in self._timings.items()
                },
            }

    def summary(self) -> str:
        """Human-readable rendering of snapshot()."""
        snap = self.snapshot()
        lines = ["=== Metrics Summary ==="]

        if snap["counters"]:
            lines.append("\nCounters:")
            for name, value in sorted(snap["counters"].items()):
                lines.append(f"  {name}: {value:,}")

        if snap["timings"]:
            lines.append("\nTimings:")
            for name, stats in sorted(snap["timings"].items()):
                lines.append(
                    f"  {name}: {stats['count']} calls, "
                    f"avg={stats['avg_ms']:.1f}ms, "
                    f"min={stats['min_ms']:.1f}ms, "
                    f"max={stats['max_ms']:.1f}ms"
                )

        return "\n".join(lines)


@contextmanager
def time_llm_call() -> Iterator[None]:
    """Count an LLM call and record its latency."""
    metrics = Metrics.get()
    metrics.increment(LLM_CALLS)
    with metrics.timer(LLM_LATENCY_MS):
        yield
