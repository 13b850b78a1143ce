from pydantic import Field, field_validator

from shared.config import BaseServiceConfig
from shared.constants import Environment


class Settings(BaseServiceConfig):
    # Tier buffers
    monitor_window_size: int = Field(default=60, gt=0)
    monitor_sample_rate_hz: int = Field(default=60, gt=0)

    # Stage cadence: minute reducer runs on its own timer, coarser stages
    # fire on every Nth minute-reducer tick
    monitor_minute_period_seconds: float = Field(default=1.0, gt=0)
    monitor_coarse_rate: int = Field(default=60, ge=1)

    # Aggregate cycle lengths (60 samples x 24 minutes = 1 day,
    # 60 samples x 168 minutes = 1 week)
    monitor_day_interval_count: int = Field(default=24, gt=0)
    monitor_week_interval_count: int = Field(default=168, gt=0)

    # Standalone frame loop
    monitor_frame_rate_hz: float = Field(default=60.0, gt=0)
    monitor_run_seconds: float = Field(default=0.0, ge=0)  # 0 = until interrupted
    monitor_report_period_seconds: float = Field(default=10.0, ge=0)  # 0 = off

    otel_service_name: str = "statmonitor"

    @field_validator("app_environment")
    @classmethod
    def _known_environment(cls, value: str) -> str:
        return Environment.parse(value).value


settings = Settings()
