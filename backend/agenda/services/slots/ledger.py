# backend/agenda/services/slots/ledger.py
"""
Booking ledger access.

The ledger is read-only and external. A fetch ends in one of:
- KnownBookings:   the provider's bookings for the window
- UnknownBookings: ledger refused access; slots are computed unfiltered
                    and the warning is surfaced to the caller
- LedgerError:     anything else; the computation fails
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Union

from .models import BookingRecord

logger = logging.getLogger(__name__)


PERMISSION_WARNING = (
    "Cannot verify existing reservations in real time; "
    "slot selection will be confirmed manually."
)


class LedgerError(Exception):
    """Booking ledger could not be read."""


class LedgerPermissionError(LedgerError):
    """Booking ledger refused access (auth / row-level security)."""


class BookingLedger(Protocol):
    async def fetch_bookings(
        self,
        store_id: int,
        provider_id: int,
        start: datetime,
        end: datetime,
    ) -> list[BookingRecord]:
        """
        Bookings with start in [start, end), ordered by start.

        Raises LedgerPermissionError or LedgerError.
        """
        ...


@dataclass(frozen=True)
class KnownBookings:
    bookings: tuple[BookingRecord, ...]


@dataclass(frozen=True)
class UnknownBookings:
    warning: str = PERMISSION_WARNING

    @property
    def bookings(self) -> tuple[BookingRecord, ...]:
        return ()


LedgerSnapshot = Union[KnownBookings, UnknownBookings]


async def fetch_snapshot(
    ledger: BookingLedger,
    store_id: int,
    provider_id: int,
    start: datetime,
    end: datetime,
    timeout: float | None = None,
) -> LedgerSnapshot:
    """
    Fetch a provider's bookings, bounded by `timeout` seconds.

    Permission errors become UnknownBookings. A timeout is raised as
    LedgerError; other LedgerErrors propagate unchanged.
    """
    try:
        bookings = await asyncio.wait_for(
            ledger.fetch_bookings(store_id, provider_id, start, end),
            timeout=timeout,
        )
    except LedgerPermissionError as e:
        logger.warning(
            f"Ledger access denied for store={store_id} provider={provider_id}, "
            f"continuing unfiltered: {e}"
        )
        return UnknownBookings()
    except asyncio.TimeoutError:
        raise LedgerError(f"Ledger fetch exceeded {timeout}s deadline") from None

    return KnownBookings(tuple(sorted(bookings, key=lambda b: b.start)))
