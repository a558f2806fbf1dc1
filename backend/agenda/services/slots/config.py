# backend/agenda/services/slots/config.py
"""
Booking configuration for availability calculation.
"""

from dataclasses import dataclass
from datetime import time
from functools import lru_cache

from ...config import settings


MIN_SLOT_STEP_MINUTES = 5


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the availability engine.

    Attributes:
        horizon_days: Default number of days to compute when the caller gives none
        max_horizon_days: Hard ceiling on the horizon (requests are clamped to it)
        min_slot_step_minutes: Lower bound for the stride between candidate starts
        ledger_timeout_seconds: Deadline for the booking ledger fetch (None = no deadline)
        default_timezone: Zone used when a store has none configured
        label_locale: Locale for day labels ("pt-BR" / "en-US")
    """
    horizon_days: int = 14
    max_horizon_days: int = 30
    min_slot_step_minutes: int = MIN_SLOT_STEP_MINUTES
    ledger_timeout_seconds: float | None = 10.0
    default_timezone: str = "America/Sao_Paulo"
    label_locale: str = "pt-BR"

    def __post_init__(self):
        """Validate configuration."""
        if self.max_horizon_days < 1:
            raise ValueError(f"max_horizon_days must be positive, got {self.max_horizon_days}")
        if not 1 <= self.horizon_days <= self.max_horizon_days:
            raise ValueError(
                f"horizon_days must be within 1..{self.max_horizon_days}, got {self.horizon_days}"
            )
        if self.min_slot_step_minutes < 1:
            raise ValueError(f"min_slot_step_minutes must be positive, got {self.min_slot_step_minutes}")
        if self.ledger_timeout_seconds is not None and self.ledger_timeout_seconds <= 0:
            raise ValueError(f"ledger_timeout_seconds must be positive, got {self.ledger_timeout_seconds}")

    def resolve_horizon(self, horizon_days: int | None) -> int:
        """Requested horizon, defaulted and clamped to max_horizon_days."""
        if horizon_days is None:
            return self.horizon_days
        if horizon_days < 1:
            raise ValueError(f"horizon_days must be positive, got {horizon_days}")
        return min(horizon_days, self.max_horizon_days)

    def slot_step(self, store_step: int | None, duration_minutes: int) -> int:
        """
        Stride between candidate start times.

        Falls back to the service duration when the store has no step and
        never goes below min_slot_step_minutes.
        """
        return max(store_step or duration_minutes, self.min_slot_step_minutes)


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton built from settings)."""
    return BookingConfig(
        horizon_days=settings.horizon_days,
        ledger_timeout_seconds=settings.ledger_timeout_seconds,
        default_timezone=settings.default_timezone,
        label_locale=settings.label_locale,
    )


# ── Time helpers ─────────────────────────────────────────────────────────


def parse_wall_time(value: str | time) -> time:
    """
    Parse a local wall-clock time.

    Accepts "HH:MM" and "HH:MM:SS" (the store_hours column format).
    Raises ValueError on anything else.
    """
    if isinstance(value, time):
        return value

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")

    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from None

    return time(*numbers)
