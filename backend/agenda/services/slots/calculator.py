# backend/agenda/services/slots/calculator.py
"""
Slot generation for one store/service/provider over a horizon.

Pure computation: takes an already fetched list of bookings and returns
slots per day plus day metadata. Does not touch the ledger.

Per day:
✓ weekly hours of the store (closed / missing / null bounds → no slots)
✓ wall-clock window converted to instants in the store timezone
✓ slots never start at or before `now`
✓ buffered overlap against busy bookings, admitted while below capacity

Does NOT contain:
✗ Fetching bookings (see availability.py)
✗ Degraded-mode handling (see ledger.py)
"""

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Sequence
from zoneinfo import ZoneInfo

from .config import BookingConfig, get_booking_config, parse_wall_time
from .labels import build_day
from .models import (
    AvailabilityDay,
    AvailabilitySlot,
    BookingRecord,
    ProviderDef,
    ServiceDef,
    StoreConfig,
    WeeklyHours,
)
from .occupancy import count_overlapping, has_capacity
from .zones import day_key, ensure_utc, get_zone, hhmm, local_date, local_to_instant, sunday_weekday


def calculate_slots(
    store: StoreConfig,
    hours: Iterable[WeeklyHours] | Mapping[int, WeeklyHours],
    service: ServiceDef,
    provider: ProviderDef,
    bookings: Sequence[BookingRecord],
    now: datetime,
    horizon_days: int | None = None,
    config: BookingConfig | None = None,
) -> tuple[dict[str, list[AvailabilitySlot]], list[AvailabilityDay]]:
    """
    Calculate bookable slots for every day in the horizon.

    Returns:
        (slots_by_day, days). slots_by_day only has entries for days with
        at least one slot; days has one entry per horizon day.

    Raises:
        ValueError: invalid configuration (see validate_inputs).
    """
    config = config or get_booking_config()
    validate_inputs(store, service, provider)
    horizon = config.resolve_horizon(horizon_days)

    zone = get_zone(store.timezone or config.default_timezone)
    now = ensure_utc(now)
    hours_by_day = index_hours(hours)

    duration = timedelta(minutes=service.duration_minutes)
    step = timedelta(minutes=config.slot_step(store.slot_step_minutes, service.duration_minutes))
    buffer_before = timedelta(minutes=store.buffer_before_minutes)
    buffer_after = timedelta(minutes=store.buffer_after_minutes)

    busy = [
        replace(b, start=ensure_utc(b.start), end=ensure_utc(b.end))
        for b in bookings
        if b.is_busy
    ]

    slots_by_day: dict[str, list[AvailabilitySlot]] = {}
    days: list[AvailabilityDay] = []

    first_day = local_date(now, zone)
    for offset in range(horizon):
        target = first_day + timedelta(days=offset)
        window = day_window(target, hours_by_day, zone)

        day_slots: list[AvailabilitySlot] = []
        if window is not None:
            day_slots = _generate_day_slots(
                target,
                window,
                zone,
                now,
                duration,
                step,
                buffer_before,
                buffer_after,
                busy,
                provider.capacity,
            )

        if day_slots:
            slots_by_day[day_key(target)] = day_slots
        days.append(build_day(target, zone, bool(day_slots), config.label_locale))

    return slots_by_day, days


def validate_inputs(store: StoreConfig, service: ServiceDef, provider: ProviderDef) -> None:
    """Reject configurations the engine cannot compute with."""
    if service.duration_minutes is None or service.duration_minutes <= 0:
        raise ValueError(f"Service duration must be positive, got {service.duration_minutes}")
    if provider.capacity is None or provider.capacity < 1:
        raise ValueError(f"Provider capacity must be at least 1, got {provider.capacity}")
    if store.buffer_before_minutes < 0 or store.buffer_after_minutes < 0:
        raise ValueError("Store buffers cannot be negative")
    if store.slot_step_minutes is not None and store.slot_step_minutes < 0:
        raise ValueError(f"Store slot step cannot be negative, got {store.slot_step_minutes}")


def index_hours(
    hours: Iterable[WeeklyHours] | Mapping[int, WeeklyHours] | None,
) -> dict[int, WeeklyHours]:
    """Weekly hours keyed by day_of_week (0 = Sunday). Later rows win."""
    if not hours:
        return {}
    if isinstance(hours, Mapping):
        return dict(hours)
    return {row.day_of_week: row for row in hours}


def day_window(
    target: date,
    hours_by_day: Mapping[int, WeeklyHours],
    zone: ZoneInfo,
) -> tuple[datetime, datetime] | None:
    """
    Open/close instants for a local calendar day.

    Returns None for a closed day: no row, is_closed, a null bound, or a
    close time that is not after the open time.
    """
    row = hours_by_day.get(sunday_weekday(target))
    if row is None or row.is_closed or not row.open_time or not row.close_time:
        return None

    open_at = local_to_instant(target, parse_wall_time(row.open_time), zone)
    close_at = local_to_instant(target, parse_wall_time(row.close_time), zone)
    if close_at <= open_at:
        return None

    return open_at, close_at


def _generate_day_slots(
    target: date,
    window: tuple[datetime, datetime],
    zone: ZoneInfo,
    now: datetime,
    duration: timedelta,
    step: timedelta,
    buffer_before: timedelta,
    buffer_after: timedelta,
    busy: Sequence[BookingRecord],
    capacity: int,
) -> list[AvailabilitySlot]:
    open_at, close_at = window
    key = day_key(target)
    slots: list[AvailabilitySlot] = []

    cursor = open_at
    while close_at >= cursor:
        service_end = cursor + duration

        # Nothing later in the day can fit either
        if service_end > close_at:
            break

        if cursor <= now:
            cursor += step
            continue

        occupied = count_overlapping(
            cursor - buffer_before,
            service_end + buffer_after,
            busy,
            buffer_before,
            buffer_after,
        )
        if has_capacity(occupied, capacity):
            slots.append(AvailabilitySlot(
                day_key=key,
                start=cursor,
                end=service_end,
                label=hhmm(cursor, zone),
            ))

        cursor += step

    return slots
