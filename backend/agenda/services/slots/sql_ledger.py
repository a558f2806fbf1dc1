# backend/agenda/services/slots/sql_ledger.py
"""
Booking ledger backed by the `bookings` table.

The query runs in a worker thread with its own session so the event loop
is never blocked by the synchronous driver.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...models.generated import Bookings
from .ledger import LedgerError, LedgerPermissionError
from .models import BUSY_STATUSES, BookingRecord, BookingStatus
from .zones import ensure_utc

logger = logging.getLogger(__name__)

# Postgres SQLSTATE insufficient_privilege
_PERMISSION_SQLSTATE = "42501"

# Date-only bounds widened past the largest UTC offset (+14:00 / -12:00)
_PREFILTER_MARGIN = timedelta(days=2)


class SqlBookingLedger:
    """Read-only ledger over SQLAlchemy sessions."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def fetch_bookings(
        self,
        store_id: int,
        provider_id: int,
        start: datetime,
        end: datetime,
    ) -> list[BookingRecord]:
        return await asyncio.to_thread(self._fetch, store_id, provider_id, start, end)

    def _fetch(
        self,
        store_id: int,
        provider_id: int,
        start: datetime,
        end: datetime,
    ) -> list[BookingRecord]:
        # Stored text may carry any ISO offset or a space separator, so the
        # SQL range is only a coarse prefilter; the exact window is applied
        # after parsing.
        db = self.session_factory()
        try:
            rows = (
                db.query(Bookings.id, Bookings.start_ts, Bookings.end_ts, Bookings.status)
                .filter(
                    Bookings.store_id == store_id,
                    Bookings.team_member_id == provider_id,
                    Bookings.start_ts >= _as_column_ts(start - _PREFILTER_MARGIN),
                    Bookings.start_ts < _as_column_ts(end + _PREFILTER_MARGIN),
                    Bookings.status.in_([s.value for s in BUSY_STATUSES]),
                )
                .all()
            )
        except DBAPIError as e:
            if _is_permission_error(e):
                raise LedgerPermissionError(str(e.orig)) from e
            raise LedgerError(str(e.orig)) from e
        except SQLAlchemyError as e:
            raise LedgerError(str(e)) from e
        finally:
            db.close()

        start, end = ensure_utc(start), ensure_utc(end)
        records = []
        for row in rows:
            record = _to_record(row)
            if record is not None and start <= record.start < end:
                records.append(record)
        records.sort(key=lambda r: r.start)
        return records


def _as_column_ts(value: datetime) -> str:
    return ensure_utc(value).date().isoformat()


def _is_permission_error(error: DBAPIError) -> bool:
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == _PERMISSION_SQLSTATE:
        return True
    return "permission denied" in str(orig).lower()


def _to_record(row) -> BookingRecord | None:
    try:
        return BookingRecord(
            start=ensure_utc(_parse_ts(row.start_ts)),
            end=ensure_utc(_parse_ts(row.end_ts)),
            status=BookingStatus(row.status),
        )
    except (TypeError, ValueError):
        logger.warning(f"Skipping malformed booking row id={row.id}")
        return None


def _parse_ts(value) -> datetime:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value
