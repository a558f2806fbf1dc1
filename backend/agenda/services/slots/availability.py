# backend/agenda/services/slots/availability.py
"""
Availability for one store/service/provider over a horizon.

Flow:
1. Missing store/service/provider → idle result (no error, ledger untouched)
2. Validate configuration
3. Fetch provider bookings for [now, now + horizon) from the ledger
4. Generate per-day slots and day metadata (calculator.py)

All failures are returned in AvailabilityResult.error; nothing is raised
past this function except task cancellation.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Mapping

from .calculator import calculate_slots, validate_inputs
from .config import BookingConfig, get_booking_config
from .ledger import BookingLedger, UnknownBookings, fetch_snapshot
from .models import AvailabilityResult, ProviderDef, ServiceDef, StoreConfig, WeeklyHours
from .zones import ensure_utc, get_zone

logger = logging.getLogger(__name__)


GENERIC_ERROR = "Could not load available times."


async def calculate_availability(
    ledger: BookingLedger,
    store: StoreConfig | None,
    hours: Iterable[WeeklyHours] | Mapping[int, WeeklyHours] | None,
    service: ServiceDef | None,
    provider: ProviderDef | None,
    horizon_days: int | None = None,
    now: datetime | None = None,
    config: BookingConfig | None = None,
    timeout: float | None = None,
) -> AvailabilityResult:
    """
    Calculate bookable slots.

    Args:
        ledger: Booking ledger to read the provider's bookings from
        horizon_days: Days to compute (defaults to config, clamped to max)
        now: Current instant (defaults to the wall clock)
        timeout: Ledger fetch deadline in seconds (defaults to config)

    Returns:
        AvailabilityResult. error is None, the degraded-mode warning, or
        GENERIC_ERROR.
    """
    if store is None or service is None or provider is None:
        return AvailabilityResult()

    config = config or get_booking_config()
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    if timeout is None:
        timeout = config.ledger_timeout_seconds

    try:
        validate_inputs(store, service, provider)
        horizon = config.resolve_horizon(horizon_days)
        get_zone(store.timezone or config.default_timezone)

        snapshot = await fetch_snapshot(
            ledger,
            store.store_id,
            provider.provider_id,
            now,
            now + timedelta(days=horizon),
            timeout=timeout,
        )

        slots_by_day, days = calculate_slots(
            store,
            hours or [],
            service,
            provider,
            snapshot.bookings,
            now,
            horizon,
            config,
        )
    except Exception:
        logger.exception(
            f"Availability calculation failed for store={store.store_id} "
            f"service={service.service_id} provider={provider.provider_id}"
        )
        return AvailabilityResult(error=GENERIC_ERROR)

    error = snapshot.warning if isinstance(snapshot, UnknownBookings) else None
    logger.debug(
        f"Availability store={store.store_id} provider={provider.provider_id}: "
        f"{len(slots_by_day)}/{len(days)} days with slots"
        f"{' (unverified)' if error else ''}"
    )
    return AvailabilityResult(slots_by_day=slots_by_day, days=days, error=error)
