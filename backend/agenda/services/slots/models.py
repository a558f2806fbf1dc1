# backend/agenda/services/slots/models.py
"""
Domain types for availability calculation.

Plain frozen dataclasses: the engine never mutates its inputs and every
result is rebuilt from scratch on each run.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_busy(self) -> bool:
        """Whether a booking in this status occupies provider capacity."""
        return self in BUSY_STATUSES


BUSY_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.COMPLETED,
})


@dataclass(frozen=True)
class StoreConfig:
    """Scheduling policy of one store."""
    store_id: int
    timezone: str
    slot_step_minutes: int | None = None
    buffer_before_minutes: int = 0
    buffer_after_minutes: int = 0


@dataclass(frozen=True)
class WeeklyHours:
    """Opening hours for one weekday (0 = Sunday .. 6 = Saturday)."""
    day_of_week: int
    is_closed: bool = False
    open_time: str | time | None = None
    close_time: str | time | None = None


@dataclass(frozen=True)
class ServiceDef:
    service_id: int
    duration_minutes: int
    name: str | None = None


@dataclass(frozen=True)
class ProviderDef:
    provider_id: int
    capacity: int = 1
    name: str | None = None


@dataclass(frozen=True)
class BookingRecord:
    """Existing reservation against a provider (instants are UTC-aware)."""
    start: datetime
    end: datetime
    status: BookingStatus

    @property
    def is_busy(self) -> bool:
        return self.status.is_busy


@dataclass(frozen=True)
class AvailabilitySlot:
    """One bookable start time."""
    day_key: str
    start: datetime
    end: datetime
    label: str

    @property
    def iso_start(self) -> str:
        return self.start.isoformat()

    @property
    def iso_end(self) -> str:
        return self.end.isoformat()


@dataclass(frozen=True)
class AvailabilityDay:
    """One calendar day in the horizon, with display labels."""
    key: str
    date: datetime
    weekday: str
    day_number: str
    full_label: str
    has_slots: bool


@dataclass
class AvailabilityResult:
    """Output of one availability computation."""
    slots_by_day: dict[str, list[AvailabilitySlot]] = field(default_factory=dict)
    days: list[AvailabilityDay] = field(default_factory=list)
    error: str | None = None

    @property
    def has_any_slot(self) -> bool:
        return any(self.slots_by_day.values())
