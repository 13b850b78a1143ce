r"""The world statistics monitor: five tiers and the stages that feed them.

Data only flows from fine to coarse::

    source --sampler--> 1s --reduce--> 1m --reduce-------> 1h
                                        \                    \
                                         aggregate(24)--> 1d  aggregate(168)--> 1w

With the default 60-sample window and cadence (sampler every frame, minute
reducer every second, the rest every 60th minute-reducer tick) each tier
spans the period it is named after: 24 minutes per day sample and 168
minutes per week sample give 60 samples per day and per week.
"""

from __future__ import annotations

from statmonitor.core.config import Settings, settings
from statmonitor.core.logger import get_logger
from statmonitor.core.scheduler import Registration, StageScheduler
from statmonitor.domain import Tier, TierRecord, TierSnapshot
from statmonitor.stages import AggregateStage, BaseStage, ReduceStage, SamplerStage
from statmonitor.stats.sources import StatsSource
from statmonitor.stats.window import TierBuffer

logger = get_logger("monitor")

DAY_INTERVAL_COUNT = 24
WEEK_INTERVAL_COUNT = 168

STAGE_IDS = {
    Tier.SECONDS: "monitor_world_1s",
    Tier.MINUTES: "monitor_world_1m",
    Tier.HOURS: "monitor_world_1h",
    Tier.DAYS: "monitor_world_1d",
    Tier.WEEKS: "monitor_world_1w",
}


class WorldStatsMonitor:
    def __init__(
        self,
        source: StatsSource,
        *,
        window: int = 60,
        rate_hz: int = 60,
        day_interval: int = DAY_INTERVAL_COUNT,
        week_interval: int = WEEK_INTERVAL_COUNT,
    ):
        if source is None:
            raise ValueError("WorldStatsMonitor needs a metric source")
        if not isinstance(source, StatsSource):
            raise TypeError(f"{type(source).__name__} is not a StatsSource")

        schema = source.schema
        self.source = source
        self.seconds = TierRecord(Tier.SECONDS, TierBuffer(schema, window))
        self.minutes = TierRecord(Tier.MINUTES, TierBuffer(schema, window))
        self.hours = TierRecord(Tier.HOURS, TierBuffer(schema, window))
        self.days = TierRecord(Tier.DAYS, TierBuffer(schema, window))
        self.weeks = TierRecord(Tier.WEEKS, TierBuffer(schema, window))

        self.sampler = SamplerStage(self.seconds, source, rate_hz)
        self.minute_reducer = ReduceStage(self.minutes, self.seconds)
        self.hour_reducer = ReduceStage(self.hours, self.minutes)
        self.day_aggregator = AggregateStage(self.days, self.minutes, day_interval)
        self.week_aggregator = AggregateStage(self.weeks, self.hours, week_interval)

        logger.debug(
            "monitor_created",
            extra={
                "window": window,
                "rate_hz": rate_hz,
                "day_interval": day_interval,
                "week_interval": week_interval,
            },
        )

    @classmethod
    def from_settings(
        cls, source: StatsSource, config: Settings = settings
    ) -> WorldStatsMonitor:
        return cls(
            source,
            window=config.monitor_window_size,
            rate_hz=config.monitor_sample_rate_hz,
            day_interval=config.monitor_day_interval_count,
            week_interval=config.monitor_week_interval_count,
        )

    @property
    def stages(self) -> dict[Tier, BaseStage]:
        return {
            Tier.SECONDS: self.sampler,
            Tier.MINUTES: self.minute_reducer,
            Tier.HOURS: self.hour_reducer,
            Tier.DAYS: self.day_aggregator,
            Tier.WEEKS: self.week_aggregator,
        }

    # Update functions, one per tier

    def monitor_world(self, delta_time: float) -> None:
        self.sampler(delta_time)

    def reduce_minutes(self, delta_time: float = 0.0) -> None:
        self.minute_reducer(delta_time)

    def reduce_hours(self, delta_time: float = 0.0) -> None:
        self.hour_reducer(delta_time)

    def aggregate_days(self, delta_time: float = 0.0) -> None:
        self.day_aggregator(delta_time)

    def aggregate_weeks(self, delta_time: float = 0.0) -> None:
        self.week_aggregator(delta_time)

    # Read access

    def record(self, tier: Tier | str) -> TierRecord:
        return self.stages[Tier(tier)].record

    def snapshot(self, tier: Tier | str) -> TierSnapshot:
        return TierSnapshot.from_record(self.record(tier))

    def snapshots(self) -> dict[Tier, TierSnapshot]:
        return {tier: self.snapshot(tier) for tier in Tier.ordered()}

    def register(
        self,
        scheduler: StageScheduler,
        minute_period: float = 1.0,
        coarse_rate: int = 60,
    ) -> list[Registration]:
        """Register all five update functions, fine to coarse."""
        minute_id = STAGE_IDS[Tier.MINUTES]
        registrations = [
            scheduler.register(STAGE_IDS[Tier.SECONDS], 0, self.monitor_world),
            scheduler.register(minute_id, minute_period, self.reduce_minutes),
            scheduler.register(
                STAGE_IDS[Tier.HOURS],
                0,
                self.reduce_hours,
                rate=coarse_rate,
                tick_source=minute_id,
            ),
            scheduler.register(
                STAGE_IDS[Tier.DAYS],
                0,
                self.aggregate_days,
                rate=coarse_rate,
                tick_source=minute_id,
            ),
            scheduler.register(
                STAGE_IDS[Tier.WEEKS],
                0,
                self.aggregate_weeks,
                rate=coarse_rate,
                tick_source=minute_id,
            ),
        ]
        logger.info(
            "monitor_registered",
            extra={"minute_period": minute_period, "coarse_rate": coarse_rate},
        )
        return registrations
