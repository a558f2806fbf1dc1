# backend/agenda/services/slots/directory.py
"""
Read-only lookups of the engine's inputs.

Maps store / store_hours / services / team_members rows to domain types.
Inactive services and team members are reported as missing.
"""

from sqlalchemy.orm import Session

from ...models.generated import Services, StoreHours, Stores, TeamMembers
from .config import get_booking_config
from .models import ProviderDef, ServiceDef, StoreConfig, WeeklyHours


class StoreDirectory:
    def __init__(self, db: Session):
        self.db = db

    def get_store_config(self, store_id: int) -> StoreConfig | None:
        store = self.db.get(Stores, store_id)
        if not store:
            return None
        return StoreConfig(
            store_id=store.id,
            timezone=store.timezone or get_booking_config().default_timezone,
            slot_step_minutes=store.slot_duration_min,
            buffer_before_minutes=store.buffer_before_min or 0,
            buffer_after_minutes=store.buffer_after_min or 0,
        )

    def get_weekly_hours(self, store_id: int) -> list[WeeklyHours]:
        rows = (
            self.db.query(StoreHours)
            .filter(StoreHours.store_id == store_id)
            .order_by(StoreHours.day_of_week)
            .all()
        )
        return [
            WeeklyHours(
                day_of_week=row.day_of_week,
                is_closed=bool(row.is_closed),
                open_time=row.open_time,
                close_time=row.close_time,
            )
            for row in rows
        ]

    def get_service(self, service_id: int) -> ServiceDef | None:
        service = (
            self.db.query(Services)
            .filter(Services.id == service_id, Services.is_active == 1)
            .first()
        )
        if not service:
            return None
        return ServiceDef(
            service_id=service.id,
            duration_minutes=service.duration_min,
            name=service.name,
        )

    def get_provider(self, team_member_id: int) -> ProviderDef | None:
        member = (
            self.db.query(TeamMembers)
            .filter(TeamMembers.id == team_member_id, TeamMembers.is_active == 1)
            .first()
        )
        if not member:
            return None
        return ProviderDef(
            provider_id=member.id,
            capacity=member.max_parallel,
            name=member.full_name,
        )
