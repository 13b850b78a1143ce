import pytest

from statmonitor.stats.schema import (
    WORLD_STATS_SCHEMA,
    MetricField,
    MetricKind,
    StatsSchema,
)


class TestStatsSchema:
    def test_of_orders_gauges_before_counters(self):
        schema = StatsSchema.of(gauges=("a", "b"), counters=("c",))

        assert schema.names == ("a", "b", "c")
        assert schema.kind("c") is MetricKind.COUNTER
        assert schema.counter_mask.tolist() == [False, False, True]
        assert schema.index("b") == 1

    def test_equal_schemas_compare_equal(self):
        first = StatsSchema([MetricField("x"), MetricField("y", MetricKind.COUNTER)])
        second = StatsSchema.of(gauges=("x",), counters=("y",))

        assert first == second
        assert hash(first) == hash(second)

    def test_kind_matters_for_equality(self):
        assert StatsSchema.of(gauges=("x",)) != StatsSchema.of(counters=("x",))

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            StatsSchema.of(gauges=("x",), counters=("x",))

    def test_empty_schema_rejected(self):
        with pytest.raises(ValueError):
            StatsSchema([])

    def test_world_schema_covers_process_and_frame_stats(self):
        assert "memory_rss_bytes" in WORLD_STATS_SCHEMA.names
        assert WORLD_STATS_SCHEMA.kind("frame_count_total") is MetricKind.COUNTER
        assert WORLD_STATS_SCHEMA.kind("fps") is MetricKind.GAUGE
