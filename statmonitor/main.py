from __future__ import annotations

import time
from typing import Callable

from statmonitor.core.config import settings
from statmonitor.core.logger import configure_logging, get_logger
from statmonitor.core.scheduler import StageScheduler
from statmonitor.domain import Tier
from statmonitor.monitor import WorldStatsMonitor
from statmonitor.stats.sources import ProcessStatsSource

logger = get_logger("main")

REPORT_FIELDS = ("cpu_percent", "memory_rss_bytes", "thread_count", "fps")


def build_reporter(monitor: WorldStatsMonitor) -> Callable[[float], None]:
    """Periodic summary of the finest tier that has data beyond seconds."""

    def report(delta_time: float) -> None:
        for tier in (Tier.MINUTES, Tier.SECONDS):
            snapshot = monitor.snapshot(tier)
            if snapshot.sample_count:
                break
        else:
            return
        logger.info(
            "monitor_report",
            extra={
                "tier": snapshot.tier.value,
                "samples": snapshot.sample_count,
                "latest": {name: snapshot.latest(name) for name in REPORT_FIELDS},
            },
        )

    return report


def run_frames(
    scheduler: StageScheduler,
    frame_rate: float,
    run_seconds: float = 0.0,
    clock: Callable[[], float] = time.perf_counter,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Drive ``scheduler`` at ``frame_rate`` until ``run_seconds`` have passed.

    ``run_seconds == 0`` runs until interrupted. Returns the number of frames.
    """
    frame_budget = 1.0 / frame_rate
    start = last = clock()
    frames = 0
    try:
        while True:
            now = clock()
            scheduler.progress(now - last)
            last = now
            frames += 1
            if run_seconds and now - start >= run_seconds:
                break
            remaining = frame_budget - (clock() - now)
            if remaining > 0:
                sleep(remaining)
    except KeyboardInterrupt:
        logger.info("frame_loop_interrupted", extra={"frames": frames})
    return frames


def main() -> int:
    configure_logging()
    logger.info("Starting world stats monitor")

    monitor = WorldStatsMonitor.from_settings(ProcessStatsSource(), settings)
    scheduler = StageScheduler()
    monitor.register(
        scheduler,
        minute_period=settings.monitor_minute_period_seconds,
        coarse_rate=settings.monitor_coarse_rate,
    )
    if settings.monitor_report_period_seconds:
        scheduler.register(
            "monitor_report",
            settings.monitor_report_period_seconds,
            build_reporter(monitor),
        )

    frames = run_frames(
        scheduler,
        frame_rate=settings.monitor_frame_rate_hz,
        run_seconds=settings.monitor_run_seconds,
    )
    logger.info(
        "Monitor stopped",
        extra={"frames": frames, "world_time": scheduler.world_time},
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
