"""Cooperative frame scheduler for monitor stages.

Stages are registered once and then driven by ``progress(delta_time)``, one
call per frame. Nothing here blocks or spawns threads; callbacks run inline,
in registration order, so a fine tier is always written before the coarser
tiers that read it in the same frame.

Three ways to register:

- ``period == 0``: run every frame
- ``period > 0``: run when that much frame time has accumulated
- ``tick_source=<id>``: run on every ``rate``-th frame in which ``<id>`` ran

Not thread-safe; one scheduler owns all writes to the tiers it drives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .logger import get_logger

logger = get_logger("scheduler")

# Tolerance when comparing accumulated frame time against a period
TIMER_EPSILON = 1e-9

StageCallback = Callable[[float], None]


@dataclass
class Registration:
    tier_id: str
    period: float
    callback: StageCallback
    rate: int = 1
    tick_source: str | None = None
    # Accumulated time towards the next timer tick
    timer: float = 0.0
    # Frame time since the callback last ran, handed to the callback
    since_last: float = 0.0
    # Ticks seen since the last rate-filtered run
    ticks: int = 0
    runs: int = 0


class StageScheduler:
    def __init__(self) -> None:
        self._registrations: dict[str, Registration] = {}
        self.frame_count = 0
        self.world_time = 0.0

    def __len__(self) -> int:
        return len(self._registrations)

    def __contains__(self, tier_id: object) -> bool:
        return tier_id in self._registrations

    @property
    def registrations(self) -> tuple[Registration, ...]:
        return tuple(self._registrations.values())

    def get(self, tier_id: str) -> Registration:
        return self._registrations[tier_id]

    def register(
        self,
        tier_id: str,
        period: float,
        callback: StageCallback,
        *,
        rate: int = 1,
        tick_source: str | None = None,
    ) -> Registration:
        """Register ``callback`` to run for ``tier_id``."""
        if tier_id in self._registrations:
            raise ValueError(f"'{tier_id}' is already registered")
        if not callable(callback):
            raise TypeError(f"callback for '{tier_id}' is not callable")
        if period < 0:
            raise ValueError(f"period must not be negative, got {period}")
        if rate < 1:
            raise ValueError(f"rate must be >= 1, got {rate}")
        if tick_source is not None:
            if tick_source not in self._registrations:
                raise ValueError(
                    f"tick source '{tick_source}' must be registered before '{tier_id}'"
                )
            if period:
                raise ValueError(
                    f"'{tier_id}' is driven by '{tick_source}' and cannot also have a period"
                )

        registration = Registration(
            tier_id=tier_id,
            period=float(period),
            callback=callback,
            rate=rate,
            tick_source=tick_source,
        )
        self._registrations[tier_id] = registration
        logger.info(
            "stage_registered",
            extra={
                "stage": tier_id,
                "period": period,
                "rate": rate,
                "tick_source": tick_source,
            },
        )
        return registration

    def unregister(self, tier_id: str) -> None:
        dependants = [
            r.tier_id for r in self._registrations.values() if r.tick_source == tier_id
        ]
        if dependants:
            raise ValueError(f"'{tier_id}' is the tick source of {dependants}")
        del self._registrations[tier_id]
        logger.info("stage_unregistered", extra={"stage": tier_id})

    def progress(self, delta_time: float) -> list[str]:
        """Advance one frame; returns the ids whose callbacks ran."""
        if delta_time < 0:
            raise ValueError(f"delta_time must not be negative, got {delta_time}")
        self.frame_count += 1
        self.world_time += delta_time

        ran: list[str] = []
        for registration in self._registrations.values():
            registration.since_last += delta_time
            if not self._is_due(registration, delta_time, ran):
                continue
            elapsed = registration.since_last
            registration.since_last = 0.0
            registration.runs += 1
            registration.callback(elapsed)
            ran.append(registration.tier_id)
        return ran

    @staticmethod
    def _is_due(registration: Registration, delta_time: float, ran: list[str]) -> bool:
        if registration.tick_source is not None:
            ticked = registration.tick_source in ran
        elif registration.period == 0:
            ticked = True
        else:
            accumulated = registration.timer + delta_time
            if accumulated + TIMER_EPSILON >= registration.period:
                remainder = max(accumulated - registration.period, 0.0)
                # Never queue up more than one tick; a long stall restarts the timer
                registration.timer = (
                    remainder if remainder < registration.period else 0.0
                )
                ticked = True
            else:
                registration.timer = accumulated
                ticked = False

        if not ticked:
            return False
        if registration.rate == 1:
            return True
        registration.ticks += 1
        if registration.ticks >= registration.rate:
            registration.ticks = 0
            return True
        return False
