from statmonitor.domain import TierRecord

from .base_stage import BaseStage, ensure_mergeable


class ReduceStage(BaseStage):
    """Fold the whole source window into one new destination sample."""

    def __init__(self, dst: TierRecord, src: TierRecord, name: str | None = None):
        ensure_mergeable(dst, src)
        super().__init__(name or f"reduce_{dst.tier.label}", dst)
        self.source_record = src

    def run(self, delta_time: float = 0.0) -> None:
        self.record.buffer.reduce(self.source_record.buffer)
