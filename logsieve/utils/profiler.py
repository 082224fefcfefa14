"""
Profiling utilities for batch ingest runs.

Measures wall-clock time, peak RSS (sampled on a background thread via
psutil), CPU percent and peak Python allocations (tracemalloc) around a block
of code, so an ingest summary can report how expensive admission was.

Usage:
    from logsieve.utils.profiler import profile_block

    with profile_block("ingest") as stats:
        run_ingest(...)

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    duration_seconds: float = 0.0
    peak_rss_bytes: Optional[int] = None
    peak_traced_bytes: Optional[int] = None
    cpu_percent: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "duration_seconds": round(self.duration_seconds, 3),
            "peak_rss_bytes": self.peak_rss_bytes,
            "peak_traced_bytes": self.peak_traced_bytes,
            "cpu_percent": round(self.cpu_percent, 1) if self.cpu_percent is not None else None,
            **self.extra,
        }


class _RssSampler(threading.Thread):
    """Background thread tracking the peak resident set size."""

    def __init__(self, process: psutil.Process, interval_s: float) -> None:
        super().__init__(daemon=True)
        self._process = process
        self._interval_s = interval_s
        self._stop_event = threading.Event()
        self.peak = process.memory_info().rss

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.peak = max(self.peak, self._process.memory_info().rss)
            except psutil.Error:
                return
            self._stop_event.wait(self._interval_s)

    def stop(self) -> int:
        self._stop_event.set()
        self.join(timeout=1.0)
        return self.peak


@contextlib.contextmanager
def profile_block(
    label: str, sample_interval_ms: int = 50, enable_tracemalloc: bool = False
) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling.
    enable_tracemalloc : bool
        Whether to trace Python allocations (adds noticeable overhead).
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    process.cpu_percent(interval=None)  # prime; first call always returns 0.0

    started_tracing = enable_tracemalloc and not tracemalloc.is_tracing()
    if started_tracing:
        tracemalloc.start()

    sampler = _RssSampler(process, sample_interval_ms / 1000.0)
    sampler.start()
    start = time.perf_counter()
    try:
        yield stats
    finally:
        stats.duration_seconds = time.perf_counter() - start
        stats.peak_rss_bytes = sampler.stop()
        stats.cpu_percent = process.cpu_percent(interval=None)
        if enable_tracemalloc and tracemalloc.is_tracing():
            _, stats.peak_traced_bytes = tracemalloc.get_traced_memory()
            if started_tracing:
                tracemalloc.stop()


__all__ = ["ProfileStats", "profile_block"]
