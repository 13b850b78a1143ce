from .models import MetricSeries, TierRecord, TierSnapshot
from .tiers import Tier

__all__ = ["MetricSeries", "Tier", "TierRecord", "TierSnapshot"]
