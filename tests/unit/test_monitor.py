import warnings
from pathlib import Path
from unittest.mock import MagicMock

import pytest

import statmonitor.monitor as monitor_module
from statmonitor.core.config import Settings
from statmonitor.core.scheduler import StageScheduler
from statmonitor.domain import Tier
from statmonitor.monitor import STAGE_IDS, WorldStatsMonitor

FRAME = 1 / 60


class TestWorldStatsMonitorConstruction:
    def test_module_compiles_without_warnings(self):
        path = Path(monitor_module.__file__)

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(path.read_text(), str(path), "exec")

    def test_source_required(self):
        with pytest.raises(ValueError, match="metric source"):
            WorldStatsMonitor(None)  # type: ignore[arg-type]

    def test_source_must_be_a_stats_source(self):
        with pytest.raises(TypeError, match="not a StatsSource"):
            WorldStatsMonitor(object())  # type: ignore[arg-type]

    def test_all_tiers_start_empty(self, monitor):
        for tier in Tier.ordered():
            record = monitor.record(tier)
            assert record.tier is tier
            assert len(record.buffer) == 0
            assert record.reduce_count == 0

    def test_stage_wiring(self, monitor):
        assert monitor.minute_reducer.source_record is monitor.seconds
        assert monitor.hour_reducer.source_record is monitor.minutes
        assert monitor.day_aggregator.source_record is monitor.minutes
        assert monitor.day_aggregator.interval == 24
        assert monitor.week_aggregator.source_record is monitor.hours
        assert monitor.week_aggregator.interval == 168

    def test_from_settings(self, source):
        config = Settings(
            monitor_window_size=5,
            monitor_sample_rate_hz=30,
            monitor_day_interval_count=3,
            monitor_week_interval_count=7,
        )

        monitor = WorldStatsMonitor.from_settings(source, config)

        assert monitor.seconds.buffer.window == 5
        assert monitor.sampler.rate_hz == 30
        assert monitor.day_aggregator.interval == 3
        assert monitor.week_aggregator.interval == 7

    def test_record_lookup_by_value(self, monitor):
        assert monitor.record("1d") is monitor.days


class TestWorldStatsMonitorUpdates:
    def test_one_second_of_frames_then_minute_reduce(self, monitor, source):
        for i in range(1, 61):
            source.set(load=float(i))
            monitor.monitor_world(FRAME)

        assert len(monitor.seconds.buffer) == 60
        assert len(set(monitor.snapshot(Tier.SECONDS).fields["load"].avg)) == 60

        monitor.reduce_minutes()

        minute = monitor.minutes.buffer.copy_last().field("load")
        assert minute["avg"] == pytest.approx(30.5)
        assert minute["min"] == 1.0
        assert minute["max"] == 60.0
        assert minute["value"] == 60.0

    def test_coarse_tiers_read_from_their_sources(self, monitor, source):
        source.set(load=2.0)
        monitor.monitor_world(FRAME)
        monitor.reduce_minutes()
        monitor.reduce_hours()
        monitor.aggregate_days()
        monitor.aggregate_weeks()

        for tier in (Tier.MINUTES, Tier.HOURS, Tier.DAYS, Tier.WEEKS):
            assert monitor.snapshot(tier).latest("load") == 2.0

    def test_coarse_tiers_stay_empty_without_data(self, monitor):
        monitor.reduce_minutes()
        monitor.reduce_hours()
        monitor.aggregate_days()
        monitor.aggregate_weeks()

        assert all(s.sample_count == 0 for s in monitor.snapshots().values())
        assert monitor.days.reduce_count == 0


class TestWorldStatsMonitorSnapshots:
    def test_snapshots_cover_every_tier(self, monitor):
        assert list(monitor.snapshots()) == Tier.ordered()

    def test_snapshot_is_independent_of_later_updates(self, monitor, source):
        source.set(load=1.0)
        monitor.monitor_world(FRAME)
        snapshot = monitor.snapshot(Tier.SECONDS)

        source.set(load=9.0)
        for _ in range(10):
            monitor.monitor_world(FRAME)

        assert snapshot.fields["load"].avg == [1.0]
        assert snapshot.recorded == 1


class TestWorldStatsMonitorScheduling:
    def test_register_wires_cadence(self, monitor):
        scheduler = StageScheduler()

        registrations = monitor.register(scheduler, minute_period=1.0, coarse_rate=60)

        assert [r.tier_id for r in registrations] == [
            STAGE_IDS[tier] for tier in Tier.ordered()
        ]
        seconds, minutes, hours, days, weeks = registrations
        assert seconds.period == 0 and seconds.tick_source is None
        assert minutes.period == 1.0
        for coarse in (hours, days, weeks):
            assert coarse.tick_source == STAGE_IDS[Tier.MINUTES]
            assert coarse.rate == 60

    def test_scheduler_driven_run(self, monitor, source):
        scheduler = StageScheduler()
        monitor.register(scheduler, minute_period=1.0, coarse_rate=2)

        for frame in range(240):
            source.set(load=float(frame % 7))
            scheduler.progress(FRAME)

        assert monitor.seconds.buffer.recorded == 240
        assert len(monitor.seconds.buffer) == 60
        assert monitor.minutes.buffer.recorded == 4
        assert monitor.hours.buffer.recorded == 2
        assert len(monitor.days.buffer) == 1
        assert monitor.days.reduce_count == 2
        assert len(monitor.weeks.buffer) == 1
        assert monitor.weeks.reduce_count == 2

    def test_registered_callbacks_are_the_update_functions(self, source):
        monitor = WorldStatsMonitor(source)
        scheduler = MagicMock()

        monitor.register(scheduler)

        callbacks = [c.args[2] for c in scheduler.register.call_args_list]
        assert callbacks == [
            monitor.monitor_world,
            monitor.reduce_minutes,
            monitor.reduce_hours,
            monitor.aggregate_days,
            monitor.aggregate_weeks,
        ]
