from abc import ABC, abstractmethod

from statmonitor.core.logger import get_logger
from statmonitor.domain import TierRecord
from statmonitor.metrics import (
    STAGE_LATENCY_SECONDS,
    STAGE_RUNS_TOTAL,
    TIER_REDUCE_COUNT,
    TIER_SAMPLES,
)


class BaseStage(ABC):
    """One update function of the monitor, writing a single tier."""

    def __init__(self, name: str, record: TierRecord):
        self.name = name
        self.record = record
        self.logger = get_logger(f"stages.{name}")

    @abstractmethod
    def run(self, delta_time: float) -> None:
        """Advance the destination tier by one invocation."""

    def __call__(self, delta_time: float = 0.0) -> None:
        with STAGE_LATENCY_SECONDS.labels(stage=self.name).time():
            self.run(delta_time)
        STAGE_RUNS_TOTAL.labels(stage=self.name).inc()
        tier = self.record.tier.value
        TIER_SAMPLES.labels(tier=tier).set(len(self.record.buffer))
        TIER_REDUCE_COUNT.labels(tier=tier).set(self.record.reduce_count)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, tier={self.record.tier.value})"


def ensure_mergeable(dst: TierRecord, src: TierRecord) -> None:
    """Reject source/destination pairs a merge stage cannot work with."""
    if dst is src or dst.buffer is src.buffer:
        raise ValueError(f"Tier {dst.tier.value} cannot reduce into itself")
    if dst.buffer.schema != src.buffer.schema:
        raise ValueError(
            f"Schema mismatch between {src.tier.value} and {dst.tier.value}"
        )
