from datetime import timedelta

import pytest

from agenda.services.slots import (
    BookingConfig,
    KnownBookings,
    LedgerError,
    ServiceDef,
    UnknownBookings,
    calculate_availability,
    fetch_snapshot,
)
from agenda.services.slots.availability import GENERIC_ERROR
from agenda.services.slots.ledger import PERMISSION_WARNING

from conftest import DeniedLedger, InMemoryLedger, booking, utc


NOW = utc(2026, 10, 19, 8)


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["store", "service", "provider"])
async def test_missing_input_is_idle(store, monday_hours, service, provider, config, missing):
    ledger = InMemoryLedger()
    inputs = {"store": store, "service": service, "provider": provider}
    inputs[missing] = None

    result = await calculate_availability(ledger, hours=monday_hours, now=NOW, config=config, **inputs)

    assert result.slots_by_day == {}
    assert result.days == []
    assert result.error is None
    assert result.has_any_slot is False
    assert ledger.calls == []


@pytest.mark.asyncio
async def test_bookings_are_fetched_for_horizon_window(store, monday_hours, service, provider):
    config = BookingConfig(horizon_days=3)
    ledger = InMemoryLedger([booking(utc(2026, 10, 19, 10), utc(2026, 10, 19, 10, 30))])

    result = await calculate_availability(ledger, store, monday_hours, service, provider, now=NOW, config=config)

    assert ledger.calls == [(1, 100, NOW, NOW + timedelta(days=3))]
    assert result.error is None
    assert result.has_any_slot is True
    assert [s.label for s in result.slots_by_day["2026-10-19"]] == ["09:00", "10:30", "11:00"]
    assert [d.has_slots for d in result.days] == [True, False, False]


@pytest.mark.asyncio
async def test_permission_denied_degrades_to_unfiltered_slots(store, monday_hours, service, provider, config):
    result = await calculate_availability(DeniedLedger(), store, monday_hours, service, provider, now=NOW, config=config)

    assert result.error == PERMISSION_WARNING
    assert result.has_any_slot is True
    assert len(result.slots_by_day["2026-10-19"]) == 5


@pytest.mark.asyncio
async def test_other_ledger_failure_is_fatal(store, monday_hours, service, provider, config):
    ledger = InMemoryLedger(error=LedgerError("connection reset"))

    result = await calculate_availability(ledger, store, monday_hours, service, provider, now=NOW, config=config)

    assert result.error == GENERIC_ERROR
    assert result.slots_by_day == {}
    assert result.days == []


@pytest.mark.asyncio
async def test_ledger_deadline_is_fatal(store, monday_hours, service, provider, config):
    ledger = InMemoryLedger(delay=1.0)

    result = await calculate_availability(
        ledger, store, monday_hours, service, provider, now=NOW, config=config, timeout=0.01,
    )

    assert result.error == GENERIC_ERROR
    assert result.days == []


@pytest.mark.asyncio
async def test_invalid_configuration_is_fatal_without_fetch(store, monday_hours, provider, config):
    ledger = InMemoryLedger()
    service = ServiceDef(service_id=10, duration_minutes=-30)

    result = await calculate_availability(ledger, store, monday_hours, service, provider, now=NOW, config=config)

    assert result.error == GENERIC_ERROR
    assert result.slots_by_day == {}
    assert ledger.calls == []


@pytest.mark.asyncio
async def test_no_surviving_slot_is_not_an_error(store, monday_hours, service, provider, config):
    ledger = InMemoryLedger([booking(utc(2026, 10, 19, 8, 30), utc(2026, 10, 19, 13))])

    result = await calculate_availability(ledger, store, monday_hours, service, provider, now=NOW, config=config)

    assert result.error is None
    assert result.has_any_slot is False
    assert [d.has_slots for d in result.days] == [False]


@pytest.mark.asyncio
async def test_identical_inputs_give_identical_output(store, monday_hours, service, provider, config):
    ledger = InMemoryLedger([booking(utc(2026, 10, 19, 10), utc(2026, 10, 19, 10, 30))])

    first = await calculate_availability(ledger, store, monday_hours, service, provider, now=NOW, config=config)
    second = await calculate_availability(ledger, store, monday_hours, service, provider, now=NOW, config=config)

    assert first == second


@pytest.mark.asyncio
async def test_fetch_snapshot_variants():
    start, end = NOW, NOW + timedelta(days=1)
    later = booking(utc(2026, 10, 19, 15), utc(2026, 10, 19, 16))
    earlier = booking(utc(2026, 10, 19, 9), utc(2026, 10, 19, 10))

    known = await fetch_snapshot(InMemoryLedger([later, earlier]), 1, 100, start, end)
    unknown = await fetch_snapshot(DeniedLedger(), 1, 100, start, end)

    assert known == KnownBookings((earlier, later))
    assert isinstance(unknown, UnknownBookings)
    assert unknown.bookings == ()
    assert unknown.warning == PERMISSION_WARNING


@pytest.mark.asyncio
async def test_fetch_snapshot_timeout_raises_ledger_error():
    with pytest.raises(LedgerError):
        await fetch_snapshot(InMemoryLedger(delay=1.0), 1, 100, NOW, NOW + timedelta(days=1), timeout=0.01)
