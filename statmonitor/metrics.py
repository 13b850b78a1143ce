from shared.metrics import get_counter, get_gauge, get_histogram

SERVICE = "statmonitor"

# Stage execution
STAGE_RUNS_TOTAL = get_counter(
    "stage_runs_total", "Stage invocations.", SERVICE, labelnames=("stage",)
)
STAGE_LATENCY_SECONDS = get_histogram(
    "stage_latency_seconds",
    "Time spent in one stage invocation.",
    SERVICE,
    labelnames=("stage",),
    buckets=(0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05),
)

# Sampler behaviour under jitter
SAMPLER_BACKFILLED_SLOTS_TOTAL = get_counter(
    "sampler_backfilled_slots_total",
    "Slots filled by repeating the previous sample after a stall.",
    SERVICE,
)
SAMPLER_MERGED_SNAPSHOTS_TOTAL = get_counter(
    "sampler_merged_snapshots_total",
    "Snapshots merged into an already recorded slot.",
    SERVICE,
)

# Tier state
TIER_SAMPLES = get_gauge(
    "tier_samples", "Visible samples per tier.", SERVICE, labelnames=("tier",)
)
TIER_REDUCE_COUNT = get_gauge(
    "tier_reduce_count",
    "Current reduce_count (merge count or cycle position) per tier.",
    SERVICE,
    labelnames=("tier",),
)
