"""High-frequency sampler feeding the seconds tier."""

from __future__ import annotations

import math

from statmonitor.domain import TierRecord
from statmonitor.metrics import (
    SAMPLER_BACKFILLED_SLOTS_TOTAL,
    SAMPLER_MERGED_SNAPSHOTS_TOTAL,
)
from statmonitor.stats.sources import StatsSource

from .base_stage import BaseStage

# Absorbs float drift from summing many 1/rate steps
SLOT_EPSILON = 1e-9


def slot_index(elapsed: float, rate_hz: float) -> int:
    return int(math.floor(elapsed * rate_hz + SLOT_EPSILON))


class SamplerStage(BaseStage):
    """Turn irregular frame calls into ``rate_hz`` samples per second.

    Called once per frame with the time since the previous frame:

    - still inside the current slot: the new snapshot is merged into the
      slot's running average instead of taking a slot of its own
      (counter increases inside the slot add up)
    - more than one slot boundary crossed: the skipped slots are backfilled
      with the previous sample before the new snapshot is recorded
    - exactly one boundary crossed: the snapshot is recorded as is

    Stalls therefore repeat stale data rather than leave holes.
    A stall before the first reading fills the skipped slots with that reading.
    """

    def __init__(self, record: TierRecord, source: StatsSource, rate_hz: int = 60):
        if source is None:
            raise ValueError("The sampler needs a metric source")
        if rate_hz <= 0:
            raise ValueError(f"rate_hz must be positive, got {rate_hz}")
        if source.schema != record.buffer.schema:
            raise ValueError(
                f"Source schema {source.schema!r} does not match the "
                f"{record.tier.value} buffer schema {record.buffer.schema!r}"
            )
        super().__init__("sampler", record)
        self.source = source
        self.rate_hz = rate_hz

    def run(self, delta_time: float) -> None:
        if delta_time < 0:
            raise ValueError(f"delta_time must not be negative, got {delta_time}")
        record = self.record
        buffer = record.buffer

        elapsed = record.elapsed
        record.elapsed += delta_time
        t_last = slot_index(elapsed, self.rate_hz)
        t_next = slot_index(record.elapsed, self.rate_hz)
        # Previous minus next: zero inside a slot, negative when time advanced
        dif = t_last - t_next

        if dif == 0:
            last = buffer.copy_last()
            merging = buffer.has_reading
            buffer.get(self.source)
            if not merging:
                # First reading replaces the zeroed start slot
                buffer.reduce_last(last, 1)
                return
            record.reduce_count += 1
            buffer.reduce_last(last, record.reduce_count, sum_counters=True)
            SAMPLER_MERGED_SNAPSHOTS_TOTAL.inc()
            return

        skipped = abs(dif) - 1
        if buffer.has_reading:
            self._backfill(skipped, delta_time)
            buffer.get(self.source)
        else:
            # Nothing to repeat yet: the first reading fills the skipped slots
            buffer.get(self.source)
            self._backfill(skipped, delta_time)
        record.reduce_count = 0

    def _backfill(self, skipped: int, delta_time: float) -> None:
        if not skipped:
            return
        for _ in range(skipped):
            self.record.buffer.repeat_last()
        SAMPLER_BACKFILLED_SLOTS_TOTAL.inc(skipped)
        self.logger.debug(
            "sampler_backfill",
            extra={"skipped_slots": skipped, "delta_time": delta_time},
        )
