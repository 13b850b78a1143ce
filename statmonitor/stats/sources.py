"""Raw metric sources sampled by the seconds tier."""

from __future__ import annotations

import gc
import time
from typing import Callable, Mapping, Protocol, runtime_checkable

import psutil

from .schema import WORLD_STATS_SCHEMA, StatsSchema


@runtime_checkable
class StatsSource(Protocol):
    """Anything that can hand out one snapshot of world statistics.

    ``collect`` must return a reading for every field in ``schema``; it is
    called once per sampler invocation, so it has to be cheap.
    """

    schema: StatsSchema

    def collect(self) -> Mapping[str, float]: ...


class ProcessStatsSource:
    """World statistics of the current Python process.

    Resource usage comes from psutil, garbage collector activity from gc.
    Every collect() call counts as one frame; frame timing fields are derived
    from the interval between consecutive calls.
    """

    schema = WORLD_STATS_SCHEMA

    def __init__(
        self,
        process: psutil.Process | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._process = process or psutil.Process()
        self._clock = clock
        self._started = clock()
        self._last_frame: float | None = None
        self._frame_count = 0
        # First cpu_percent() call only primes psutil's internal reference
        self._process.cpu_percent(interval=None)

    def collect(self) -> dict[str, float]:
        now = self._clock()
        frame_delta = 0.0 if self._last_frame is None else now - self._last_frame
        self._last_frame = now
        self._frame_count += 1

        with self._process.oneshot():
            cpu_times = self._process.cpu_times()
            memory = self._process.memory_info()
            cpu_percent = self._process.cpu_percent(interval=None)
            thread_count = self._process.num_threads()

        return {
            "cpu_percent": float(cpu_percent),
            "memory_rss_bytes": float(memory.rss),
            "memory_vms_bytes": float(memory.vms),
            "thread_count": float(thread_count),
            "gc_pending_objects": float(sum(gc.get_count())),
            "fps": 1.0 / frame_delta if frame_delta > 0 else 0.0,
            "frame_delta_time": frame_delta,
            "cpu_user_seconds": float(cpu_times.user),
            "cpu_system_seconds": float(cpu_times.system),
            "gc_collections_total": float(
                sum(gen["collections"] for gen in gc.get_stats())
            ),
            "frame_count_total": float(self._frame_count),
            "world_time_total": now - self._started,
        }
