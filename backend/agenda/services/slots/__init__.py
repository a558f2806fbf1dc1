# backend/agenda/services/slots/__init__.py
"""
Availability engine.

calculator:   per-day slot generation (pure)
availability: ledger fetch + degraded mode around the calculator
watcher:      refresh() and reactive state for a booking screen
"""

from .config import BookingConfig, get_booking_config
from .models import (
    AvailabilityDay,
    AvailabilityResult,
    AvailabilitySlot,
    BookingRecord,
    BookingStatus,
    ProviderDef,
    ServiceDef,
    StoreConfig,
    WeeklyHours,
)
from .calculator import calculate_slots
from .ledger import (
    BookingLedger,
    KnownBookings,
    LedgerError,
    LedgerPermissionError,
    UnknownBookings,
    fetch_snapshot,
)
from .availability import calculate_availability
from .watcher import AvailabilityState, AvailabilityWatcher

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "AvailabilityDay",
    "AvailabilityResult",
    "AvailabilitySlot",
    "BookingRecord",
    "BookingStatus",
    "ProviderDef",
    "ServiceDef",
    "StoreConfig",
    "WeeklyHours",
    "calculate_slots",
    "BookingLedger",
    "KnownBookings",
    "LedgerError",
    "LedgerPermissionError",
    "UnknownBookings",
    "fetch_snapshot",
    "calculate_availability",
    "AvailabilityState",
    "AvailabilityWatcher",
]
