import logging
from unittest.mock import MagicMock, patch

import pytest

from statmonitor.core.scheduler import StageScheduler
from statmonitor.main import build_reporter, main, run_frames
from statmonitor.monitor import STAGE_IDS, WorldStatsMonitor
from statmonitor.stats.schema import WORLD_STATS_SCHEMA


class WorldSource:
    schema = WORLD_STATS_SCHEMA

    def collect(self):
        return {name: 1.0 for name in WORLD_STATS_SCHEMA.names}


class SteppingClock:
    """Clock that only moves when the frame loop sleeps."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


class TestRunFrames:
    def test_runs_for_requested_time(self):
        scheduler = MagicMock()
        clock = SteppingClock()

        frames = run_frames(
            scheduler, frame_rate=4, run_seconds=1.0, clock=clock, sleep=clock.sleep
        )

        assert frames == 5
        deltas = [c.args[0] for c in scheduler.progress.call_args_list]
        assert deltas == pytest.approx([0.0, 0.25, 0.25, 0.25, 0.25])

    def test_slow_frame_does_not_sleep(self):
        scheduler = MagicMock()
        ticks = iter([0.0, 0.0, 0.5, 0.5])
        sleep = MagicMock()

        frames = run_frames(
            scheduler,
            frame_rate=4,
            run_seconds=0.5,
            clock=lambda: next(ticks),
            sleep=sleep,
        )

        assert frames == 2
        sleep.assert_not_called()

    def test_keyboard_interrupt_stops_loop(self, caplog):
        scheduler = MagicMock()
        scheduler.progress.side_effect = [None, KeyboardInterrupt]
        clock = SteppingClock()
        caplog.set_level(logging.INFO, logger="statmonitor")

        frames = run_frames(scheduler, frame_rate=60, clock=clock, sleep=clock.sleep)

        assert frames == 1
        assert "frame_loop_interrupted" in caplog.messages


class TestReporter:
    def test_reports_finest_populated_tier(self, caplog):
        monitor = WorldStatsMonitor(WorldSource())
        monitor.monitor_world(1 / 60)
        report = build_reporter(monitor)
        caplog.set_level(logging.INFO, logger="statmonitor")

        report(10.0)

        record = next(r for r in caplog.records if r.getMessage() == "monitor_report")
        assert record.tier == "1s"
        assert record.samples == 1
        assert record.latest["memory_rss_bytes"] == 1.0

    def test_prefers_minutes_once_available(self, caplog):
        monitor = WorldStatsMonitor(WorldSource())
        monitor.monitor_world(1 / 60)
        monitor.reduce_minutes()
        caplog.set_level(logging.INFO, logger="statmonitor")

        build_reporter(monitor)(10.0)

        record = next(r for r in caplog.records if r.getMessage() == "monitor_report")
        assert record.tier == "1m"

    def test_silent_without_data(self, caplog):
        monitor = WorldStatsMonitor(WorldSource())
        caplog.set_level(logging.INFO, logger="statmonitor")

        build_reporter(monitor)(10.0)

        assert "monitor_report" not in caplog.messages


class TestMain:
    @patch("statmonitor.main.run_frames", return_value=3)
    @patch("statmonitor.main.ProcessStatsSource", return_value=WorldSource())
    @patch("statmonitor.main.configure_logging")
    def test_main_wires_monitor_and_runs(
        self, mock_configure, mock_source, mock_run_frames
    ):
        assert main() == 0

        mock_configure.assert_called_once()
        mock_source.assert_called_once()
        scheduler = mock_run_frames.call_args.args[0]
        assert isinstance(scheduler, StageScheduler)
        assert all(stage_id in scheduler for stage_id in STAGE_IDS.values())
        assert "monitor_report" in scheduler
