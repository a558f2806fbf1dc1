# backend/agenda/services/slots/watcher.py
"""
Stateful front for a booking screen.

Holds the current selection (store, hours, service, provider), recomputes
availability on refresh() or on input change, and publishes the state to
subscribers. Only the latest refresh may publish: a newer refresh cancels
the in-flight one and a superseded result is dropped.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Iterable, Mapping

from .availability import GENERIC_ERROR, calculate_availability
from .config import BookingConfig, get_booking_config
from .ledger import BookingLedger
from .models import (
    AvailabilityDay,
    AvailabilityResult,
    AvailabilitySlot,
    ProviderDef,
    ServiceDef,
    StoreConfig,
    WeeklyHours,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityState:
    loading: bool = False
    slots_by_day: dict[str, list[AvailabilitySlot]] = field(default_factory=dict)
    days: list[AvailabilityDay] = field(default_factory=list)
    error: str | None = None

    @property
    def has_any_slot(self) -> bool:
        return any(self.slots_by_day.values())


Listener = Callable[[AvailabilityState], None]

_INPUTS = ("store", "hours", "service", "provider", "horizon_days")


class AvailabilityWatcher:
    def __init__(
        self,
        ledger: BookingLedger,
        store: StoreConfig | None = None,
        hours: Iterable[WeeklyHours] | Mapping[int, WeeklyHours] | None = None,
        service: ServiceDef | None = None,
        provider: ProviderDef | None = None,
        horizon_days: int | None = None,
        config: BookingConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.ledger = ledger
        self.store = store
        self.hours = _snapshot_hours(hours)
        self.service = service
        self.provider = provider
        self.horizon_days = horizon_days
        self.config = config or get_booking_config()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.state = AvailabilityState()
        self._listeners: list[Listener] = []
        self._generation = 0
        self._task: asyncio.Task | None = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def update(self, **inputs) -> AvailabilityState:
        """Replace some inputs and refresh."""
        unknown = set(inputs) - set(_INPUTS)
        if unknown:
            raise TypeError(f"Unknown inputs: {', '.join(sorted(unknown))}")
        if "hours" in inputs:
            inputs["hours"] = _snapshot_hours(inputs["hours"])
        for name, value in inputs.items():
            setattr(self, name, value)
        return await self.refresh()

    async def refresh(self) -> AvailabilityState:
        """
        Recompute availability from the current inputs.

        Returns the published state. If another refresh supersedes this one
        while it is running, nothing is published and the current state
        (owned by the newer refresh) is returned.
        """
        self._generation += 1
        generation = self._generation

        if self._task is not None and not self._task.done():
            self._task.cancel()

        if self.store is None or self.service is None or self.provider is None:
            self._task = None
            self._publish(AvailabilityState())
            return self.state

        self._publish(replace(self.state, loading=True, error=None))

        task = asyncio.create_task(calculate_availability(
            self.ledger,
            self.store,
            self.hours,
            self.service,
            self.provider,
            horizon_days=self.horizon_days,
            now=self.clock(),
            config=self.config,
        ))
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                # superseded by a newer refresh
                return self.state
            raise
        except Exception:
            logger.exception("Availability refresh failed")
            result = AvailabilityResult(error=GENERIC_ERROR)

        if generation != self._generation:
            logger.debug(f"Discarding stale availability result (generation {generation})")
            return self.state

        self._publish(AvailabilityState(
            loading=False,
            slots_by_day=result.slots_by_day,
            days=result.days,
            error=result.error,
        ))
        return self.state

    def _publish(self, state: AvailabilityState) -> None:
        self.state = state
        for listener in list(self._listeners):
            listener(state)


def _snapshot_hours(hours):
    # day_of_week -> row mappings are kept whole; iterating one yields its keys
    if isinstance(hours, Mapping):
        return dict(hours)
    return list(hours or [])
