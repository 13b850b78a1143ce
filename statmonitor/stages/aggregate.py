from statmonitor.domain import TierRecord

from .base_stage import BaseStage, ensure_mergeable


class AggregateStage(BaseStage):
    """Fold the source window into a destination sample spanning ``interval`` calls.

    The first call of a cycle appends a fresh destination sample. Every later
    call merges the source into it, weighting the sample built so far by the
    number of calls that already contributed, so after ``interval`` calls the
    sample is the equally weighted merge of all of them. ``reduce_count`` then
    wraps to 0 and the next call starts a new sample.
    """

    def __init__(
        self,
        dst: TierRecord,
        src: TierRecord,
        interval: int,
        name: str | None = None,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        ensure_mergeable(dst, src)
        super().__init__(name or f"aggregate_{dst.tier.label}", dst)
        self.source_record = src
        self.interval = interval

    def run(self, delta_time: float = 0.0) -> None:
        dst = self.record
        buffer = dst.buffer

        last = buffer.copy_last() if dst.reduce_count != 0 else None
        if not buffer.reduce(self.source_record.buffer):
            # Empty source: nothing was appended, so there is nothing to fold
            return
        if last is not None:
            buffer.reduce_last(last, dst.reduce_count)

        dst.reduce_count += 1
        if dst.reduce_count >= self.interval:
            dst.reduce_count = 0
            self.logger.debug(
                "aggregate_cycle_completed",
                extra={"tier": dst.tier.value, "interval": self.interval},
            )
