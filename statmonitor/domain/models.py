from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from statmonitor.stats.window import TierBuffer

from .tiers import Tier


@dataclass
class TierRecord:
    """Mutable state of one retention tier.

    ``elapsed`` is only advanced by the sampler (seconds tier). ``reduce_count``
    is the in-slot merge count for the sampler and the cycle position for
    aggregate stages.
    """

    tier: Tier
    buffer: TierBuffer
    elapsed: float = 0.0
    reduce_count: int = 0


class MetricSeries(BaseModel):
    """Time-ordered history of one metric field, oldest first."""

    model_config = ConfigDict(frozen=True)

    kind: str
    avg: list[float]
    min: list[float]
    max: list[float]
    value: list[float]


class TierSnapshot(BaseModel):
    """Immutable copy of a tier, safe to hand to readers."""

    model_config = ConfigDict(frozen=True)

    tier: Tier
    window: int
    recorded: int
    reduce_count: int
    elapsed: float
    fields: dict[str, MetricSeries]

    @property
    def sample_count(self) -> int:
        return min(self.recorded, self.window)

    def latest(self, name: str) -> float | None:
        series = self.fields[name].avg
        return series[-1] if series else None

    @classmethod
    def from_record(cls, record: TierRecord) -> TierSnapshot:
        buffer = record.buffer
        history = buffer.history()
        fields = {}
        for f in buffer.schema:
            i = buffer.schema.index(f.name)
            fields[f.name] = MetricSeries(
                kind=f.kind.value,
                avg=[float(s.avg[i]) for s in history],
                min=[float(s.min[i]) for s in history],
                max=[float(s.max[i]) for s in history],
                value=[float(s.value[i]) for s in history],
            )
        return cls(
            tier=record.tier,
            window=buffer.window,
            recorded=buffer.recorded,
            reduce_count=record.reduce_count,
            elapsed=record.elapsed,
            fields=fields,
        )
