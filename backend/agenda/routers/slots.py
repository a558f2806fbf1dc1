# backend/agenda/routers/slots.py
"""
Slots API endpoints.

GET  /slots/availability - Bookable slots for store + service + team member
POST /slots/invalidate   - Drop cached store profile (admin endpoint)
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..database import SessionLocal, get_db
from ..redis_client import redis_client
from ..schemas.slots import (
    AvailabilityDayRead,
    AvailabilityResponse,
    AvailabilitySlotRead,
    InvalidateResponse,
)
from ..services.slots import BookingLedger, calculate_availability, get_booking_config
from ..services.slots.directory import StoreDirectory
from ..services.slots.profile_cache import StoreProfileCache, invalidate_store_cache
from ..services.slots.rest_ledger import RestBookingLedger
from ..services.slots.sql_ledger import SqlBookingLedger


router = APIRouter(prefix="/slots", tags=["slots"])


def get_booking_ledger() -> BookingLedger:
    """Supabase REST ledger when configured, otherwise the local bookings table."""
    if settings.supabase_url and settings.supabase_key:
        return RestBookingLedger(
            settings.supabase_url,
            settings.supabase_key,
            timeout=settings.ledger_timeout_seconds,
        )
    return SqlBookingLedger(SessionLocal)


def get_redis() -> Redis | None:
    return redis_client


def _load_inputs(
    db: Session,
    redis: Redis | None,
    store_id: int,
    service_id: int,
    team_member_id: int,
):
    directory = StoreDirectory(db)
    if redis is not None:
        cache = StoreProfileCache(redis, settings.profile_cache_ttl_seconds)
        store, hours = cache.get_profile(directory, store_id)
    else:
        store = directory.get_store_config(store_id)
        hours = directory.get_weekly_hours(store_id) if store else []
    return store, hours, directory.get_service(service_id), directory.get_provider(team_member_id)


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    store_id: int,
    service_id: int,
    team_member_id: int,
    horizon_days: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
    ledger: BookingLedger = Depends(get_booking_ledger),
    redis: Redis | None = Depends(get_redis),
):
    """Get bookable slots over the horizon for one team member."""
    config = get_booking_config()

    store, hours, service, provider = await asyncio.to_thread(
        _load_inputs, db, redis, store_id, service_id, team_member_id
    )
    if store is None:
        raise HTTPException(status_code=404, detail="Store not found")
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    if provider is None:
        raise HTTPException(status_code=404, detail="Team member not found")

    result = await calculate_availability(
        ledger,
        store,
        hours,
        service,
        provider,
        horizon_days=horizon_days,
        config=config,
    )

    return AvailabilityResponse(
        store_id=store_id,
        service_id=service_id,
        team_member_id=team_member_id,
        horizon_days=config.resolve_horizon(horizon_days),
        slots_by_day={
            key: [AvailabilitySlotRead.model_validate(slot) for slot in slots]
            for key, slots in result.slots_by_day.items()
        },
        days=[AvailabilityDayRead.model_validate(day) for day in result.days],
        has_any_slot=result.has_any_slot,
        error=result.error,
    )


@router.post("/invalidate", response_model=InvalidateResponse)
def invalidate_slots_cache(
    store_id: int,
    redis: Redis | None = Depends(get_redis),
):
    """Manually invalidate cached store profile (admin endpoint)."""
    if redis is None:
        return InvalidateResponse(store_id=store_id, deleted_keys=0)

    deleted = invalidate_store_cache(redis, store_id)
    return InvalidateResponse(store_id=store_id, deleted_keys=deleted)
