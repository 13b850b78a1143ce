"""Metric field definitions shared by tier buffers and metric sources."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, NamedTuple

import numpy as np


class MetricKind(str, Enum):
    """How a raw reading is turned into a sample.

    GAUGE readings are stored as-is. COUNTER readings are cumulative totals;
    the sample holds the increase since the previous sample.
    """

    GAUGE = "gauge"
    COUNTER = "counter"


class MetricField(NamedTuple):
    name: str
    kind: MetricKind = MetricKind.GAUGE


class StatsSchema:
    """Ordered, immutable set of metric fields."""

    def __init__(self, fields: Iterable[MetricField]):
        self.fields: tuple[MetricField, ...] = tuple(fields)
        if not self.fields:
            raise ValueError("A stats schema needs at least one field")
        self.names: tuple[str, ...] = tuple(f.name for f in self.fields)
        if len(set(self.names)) != len(self.names):
            raise ValueError(f"Duplicate metric field names in {self.names}")
        self.counter_mask = np.array(
            [f.kind is MetricKind.COUNTER for f in self.fields], dtype=bool
        )
        self._index = {name: i for i, name in enumerate(self.names)}

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatsSchema):
            return NotImplemented
        return self.fields == other.fields

    def __hash__(self) -> int:
        return hash(self.fields)

    def __repr__(self) -> str:
        return f"StatsSchema({', '.join(self.names)})"

    def index(self, name: str) -> int:
        return self._index[name]

    def kind(self, name: str) -> MetricKind:
        return self.fields[self._index[name]].kind

    @classmethod
    def of(cls, *, gauges: Iterable[str] = (), counters: Iterable[str] = ()):
        return cls(
            [MetricField(n, MetricKind.GAUGE) for n in gauges]
            + [MetricField(n, MetricKind.COUNTER) for n in counters]
        )


# Fields reported by ProcessStatsSource
WORLD_STATS_SCHEMA = StatsSchema.of(
    gauges=(
        "cpu_percent",
        "memory_rss_bytes",
        "memory_vms_bytes",
        "thread_count",
        "gc_pending_objects",
        "fps",
        "frame_delta_time",
    ),
    counters=(
        "cpu_user_seconds",
        "cpu_system_seconds",
        "gc_collections_total",
        "frame_count_total",
        "world_time_total",
    ),
)
