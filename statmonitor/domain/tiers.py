from enum import Enum


class Tier(str, Enum):
    """Retention tiers, finest first.

    Each tier holds one window of samples; with the default 60-sample window
    a tier covers the period its name describes.
    """

    SECONDS = "1s"
    MINUTES = "1m"
    HOURS = "1h"
    DAYS = "1d"
    WEEKS = "1w"

    @classmethod
    def ordered(cls) -> list["Tier"]:
        return list(cls)

    @property
    def label(self) -> str:
        return self.name.lower()
