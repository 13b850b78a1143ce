"""Fixed-capacity windowed statistics buffer.

Each tier of the monitor owns one TierBuffer: a ring of samples where every
sample stores, per metric field, the average, minimum and maximum observed
over the period it covers, plus the raw cumulative value for counters.

The five primitives below are everything the stages need:

- get(source): record a fresh reading in a new slot
- copy_last(): immutable copy of the newest slot
- reduce(src): summarise all of ``src`` into one new slot
- reduce_last(last, weight): collapse the newest slot into the previous one,
  weighting ``last`` as ``weight`` earlier contributions
- repeat_last(): append a duplicate of the newest slot

Weighted merge contract: after ``reduce_last(last, w)`` the previous slot
holds exactly what ``w + 1`` equally weighted contributions would average to,
where ``last`` stands for the first ``w`` and the collapsed slot for the last
one. Min and max combine elementwise; counter values take the newest reading.
When both slots cover the same period (the sampler merging frames inside one
slot) counter increases are summed rather than averaged.

Slots that never received a reading (the zeroed ring before the first get, and
repeats of it) are tracked separately. They are never used as a counter
baseline, and reduce_last replaces such a slot instead of merging into it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .schema import StatsSchema

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from .sources import StatsSource


def _frozen(array: np.ndarray) -> np.ndarray:
    out = np.array(array, dtype=np.float64, copy=True)
    out.flags.writeable = False
    return out


@dataclass(frozen=True)
class StatsSample:
    """Read-only copy of one slot of a TierBuffer."""

    schema: StatsSchema
    avg: NDArray[np.float64]
    min: NDArray[np.float64]
    max: NDArray[np.float64]
    value: NDArray[np.float64]

    def __getitem__(self, name: str) -> float:
        return float(self.avg[self.schema.index(name)])

    def field(self, name: str) -> dict[str, float]:
        i = self.schema.index(name)
        return {
            "avg": float(self.avg[i]),
            "min": float(self.min[i]),
            "max": float(self.max[i]),
            "value": float(self.value[i]),
        }

    def as_dict(self) -> dict[str, float]:
        return {name: float(v) for name, v in zip(self.schema.names, self.avg)}


class TierBuffer:
    """NumPy-backed ring of ``window`` statistics samples.

    One spare slot is allocated beyond ``window`` so that a slot written and
    then immediately collapsed by reduce_last never evicts the oldest visible
    sample. All storage is allocated up front.

    Not thread-safe: one writer per buffer, readers go through history() or
    copy_last(), which return copies.
    """

    def __init__(self, schema: StatsSchema, window: int = 60) -> None:
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")
        self.schema = schema
        self.window = window
        self._capacity = window + 1
        shape = (self._capacity, len(schema))
        self._avg: np.ndarray = np.zeros(shape, dtype=np.float64)
        self._min: np.ndarray = np.zeros(shape, dtype=np.float64)
        self._max: np.ndarray = np.zeros(shape, dtype=np.float64)
        self._value: np.ndarray = np.zeros(shape, dtype=np.float64)
        # Whether each slot holds real readings rather than the zeroed start state
        self._filled: np.ndarray = np.zeros(self._capacity, dtype=bool)
        # Newest slot; the first write lands on slot 0
        self._t: int = self._capacity - 1
        # Logical number of samples: appends minus collapses
        self.recorded: int = 0

    def __len__(self) -> int:
        return min(self.recorded, self.window)

    def __repr__(self) -> str:
        return (
            f"TierBuffer(window={self.window}, samples={len(self)}, "
            f"recorded={self.recorded})"
        )

    @property
    def empty(self) -> bool:
        return self.recorded == 0

    @property
    def has_reading(self) -> bool:
        """Whether the newest slot holds real readings."""
        return bool(self._filled[self._t])

    def get(self, source: StatsSource) -> StatsSample:
        """Record one reading from ``source`` in a new slot."""
        readings = source.collect()
        raw = np.fromiter(
            (float(readings[name]) for name in self.schema.names),
            dtype=np.float64,
            count=len(self.schema),
        )
        sample = raw.copy()
        counters = self.schema.counter_mask
        if counters.any():
            if self.has_reading:
                baseline = self._value[self._t][counters]
                # A counter that went backwards was reset; count no increase
                sample[counters] = np.maximum(raw[counters] - baseline, 0.0)
            else:
                sample[counters] = 0.0
        t = self._advance()
        self._avg[t] = sample
        self._min[t] = sample
        self._max[t] = sample
        self._value[t] = raw
        self._filled[t] = True
        return self._sample(t)

    def copy_last(self) -> StatsSample:
        return self._sample(self._t)

    def reduce(self, src: TierBuffer) -> bool:
        """Append one slot summarising every visible sample of ``src``.

        Returns False, leaving this buffer untouched, when ``src`` is empty.
        """
        self._check_schema(src.schema)
        if src.empty:
            return False
        rows = src._ordered_rows()
        avg = src._avg[rows].mean(axis=0)
        low = src._min[rows].min(axis=0)
        high = src._max[rows].max(axis=0)
        value = src._value[src._t].copy()
        t = self._advance()
        self._avg[t] = avg
        self._min[t] = low
        self._max[t] = high
        self._value[t] = value
        self._filled[t] = True
        return True

    def reduce_last(
        self, last: StatsSample, weight: int, *, sum_counters: bool = False
    ) -> None:
        """Fold the newest slot into the previous one.

        ``last`` is the previous slot as captured by copy_last() before the
        newest slot was written; it counts as ``weight`` contributions. With
        ``sum_counters`` the counter increases of both slots are added up
        instead of averaged, for slots that cover one period together.
        A previous slot without readings is replaced by the newest slot.
        """
        if weight < 1:
            raise ValueError(f"weight must be >= 1, got {weight}")
        if self.empty:
            raise ValueError("reduce_last on an empty buffer")
        self._check_schema(last.schema)
        new = self._t
        prev = (self._t - 1) % self._capacity
        if not self._filled[prev]:
            self._avg[prev] = self._avg[new]
            self._min[prev] = self._min[new]
            self._max[prev] = self._max[new]
        else:
            w = float(weight)
            self._avg[prev] = (last.avg * w + self._avg[new]) / (w + 1.0)
            self._min[prev] = np.minimum(last.min, self._min[new])
            self._max[prev] = np.maximum(last.max, self._max[new])
            if sum_counters:
                counters = self.schema.counter_mask
                total = last.avg[counters] + self._avg[new][counters]
                self._avg[prev][counters] = total
                self._min[prev][counters] = total
                self._max[prev][counters] = total
        self._value[prev] = self._value[new]
        self._filled[prev] = self._filled[new]
        self._t = prev
        self.recorded -= 1

    def repeat_last(self) -> None:
        src = self._t
        t = self._advance()
        self._avg[t] = self._avg[src]
        self._min[t] = self._min[src]
        self._max[t] = self._max[src]
        self._value[t] = self._value[src]
        self._filled[t] = self._filled[src]

    def history(self) -> list[StatsSample]:
        """Copies of the visible samples, oldest first."""
        return [self._sample(t) for t in self._ordered_rows()]

    def _advance(self) -> int:
        self._t = (self._t + 1) % self._capacity
        self.recorded += 1
        return self._t

    def _ordered_rows(self) -> list[int]:
        n = len(self)
        return [(self._t - k) % self._capacity for k in range(n - 1, -1, -1)]

    def _sample(self, t: int) -> StatsSample:
        return StatsSample(
            schema=self.schema,
            avg=_frozen(self._avg[t]),
            min=_frozen(self._min[t]),
            max=_frozen(self._max[t]),
            value=_frozen(self._value[t]),
        )

    def _check_schema(self, other: StatsSchema) -> None:
        if other != self.schema:
            raise ValueError(
                f"Cannot merge statistics with schema {other!r} into {self.schema!r}"
            )
