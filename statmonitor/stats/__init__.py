from .schema import WORLD_STATS_SCHEMA, MetricField, MetricKind, StatsSchema
from .sources import ProcessStatsSource, StatsSource
from .window import StatsSample, TierBuffer

__all__ = [
    "WORLD_STATS_SCHEMA",
    "MetricField",
    "MetricKind",
    "StatsSchema",
    "StatsSource",
    "ProcessStatsSource",
    "StatsSample",
    "TierBuffer",
]
