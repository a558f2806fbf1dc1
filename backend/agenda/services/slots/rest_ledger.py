# backend/agenda/services/slots/rest_ledger.py
"""
Booking ledger over PostgREST (Supabase REST API).

GET {base_url}/rest/v1/bookings
    ?select=id,start_ts,end_ts,status
    &store_id=eq.{store_id}
    &team_member_id=eq.{provider_id}
    &start_ts=gte.{start}&start_ts=lt.{end}
    &status=in.(pending,confirmed,completed)
    &order=start_ts.asc

401 / 403 or a body with code 42501 (row-level security) is a
permission error; everything else ≥ 400 is a plain ledger error.
"""

import logging
from datetime import datetime

import httpx

from .ledger import LedgerError, LedgerPermissionError
from .models import BUSY_STATUSES, BookingRecord, BookingStatus
from .zones import ensure_utc

logger = logging.getLogger(__name__)

_PERMISSION_CODES = {"42501", "PGRST301", "PGRST302"}


class RestBookingLedger:
    """Asynchronous read-only ledger client."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.client = client
        self.timeout = timeout

    def _headers(self) -> dict:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Accept": "application/json",
        }

    @staticmethod
    def _params(store_id: int, provider_id: int, start: datetime, end: datetime) -> list[tuple[str, str]]:
        statuses = ",".join(sorted(s.value for s in BUSY_STATUSES))
        return [
            ("select", "id,start_ts,end_ts,status"),
            ("store_id", f"eq.{store_id}"),
            ("team_member_id", f"eq.{provider_id}"),
            ("start_ts", f"gte.{ensure_utc(start).isoformat()}"),
            ("start_ts", f"lt.{ensure_utc(end).isoformat()}"),
            ("status", f"in.({statuses})"),
            ("order", "start_ts.asc"),
        ]

    async def fetch_bookings(
        self,
        store_id: int,
        provider_id: int,
        start: datetime,
        end: datetime,
    ) -> list[BookingRecord]:
        url = f"{self.base_url}/rest/v1/bookings"
        params = self._params(store_id, provider_id, start, end)

        try:
            if self.client is not None:
                resp = await self.client.get(url, params=params, headers=self._headers())
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise LedgerError(f"Ledger request failed: {e}") from e

        if resp.status_code >= 400:
            _raise_for_response(resp)

        try:
            rows = resp.json()
        except ValueError as e:
            raise LedgerError("Ledger returned invalid JSON") from e

        if not isinstance(rows, list):
            raise LedgerError(f"Unexpected ledger payload: {type(rows).__name__}")

        return [record for record in map(_to_record, rows) if record is not None]


def _raise_for_response(resp: httpx.Response) -> None:
    code = None
    message = resp.text
    try:
        body = resp.json()
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("message") or message
    except ValueError:
        pass

    if resp.status_code in (401, 403) or code in _PERMISSION_CODES:
        raise LedgerPermissionError(f"{resp.status_code} {code or ''} {message}".strip())
    raise LedgerError(f"Ledger error {resp.status_code}: {message}")


def _to_record(row: dict) -> BookingRecord | None:
    try:
        return BookingRecord(
            start=ensure_utc(datetime.fromisoformat(row["start_ts"])),
            end=ensure_utc(datetime.fromisoformat(row["end_ts"])),
            status=BookingStatus(row["status"]),
        )
    except (KeyError, TypeError, ValueError):
        logger.warning(f"Skipping malformed booking row id={row.get('id') if isinstance(row, dict) else row!r}")
        return None
