import logging

import pytest

from statmonitor.domain import Tier, TierRecord
from statmonitor.monitor import WorldStatsMonitor
from statmonitor.stats.schema import StatsSchema
from statmonitor.stats.window import TierBuffer

TEST_SCHEMA = StatsSchema.of(gauges=("load", "memory"), counters=("requests_total",))


class FakeStatsSource:
    """Scripted metric source; collect() returns whatever was last set."""

    schema = TEST_SCHEMA

    def __init__(self, **values: float):
        self.values = {"load": 0.0, "memory": 0.0, "requests_total": 0.0}
        self.values.update(values)
        self.calls = 0

    def set(self, **values: float) -> None:
        self.values.update(values)

    def collect(self) -> dict[str, float]:
        self.calls += 1
        return dict(self.values)


@pytest.fixture
def schema() -> StatsSchema:
    return TEST_SCHEMA


@pytest.fixture
def source() -> FakeStatsSource:
    return FakeStatsSource()


@pytest.fixture
def make_record(schema):
    """Factory for tier records over the test schema."""

    def _make(tier: Tier = Tier.SECONDS, window: int = 60) -> TierRecord:
        return TierRecord(tier=tier, buffer=TierBuffer(schema, window))

    return _make


@pytest.fixture
def monitor(source) -> WorldStatsMonitor:
    return WorldStatsMonitor(source)


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)
