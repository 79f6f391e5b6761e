import hmac
from anyio import to_thread
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auditing import AuditSpan
from app.core.config import Settings
from app.core.security import hash_password, verify_password
from app.core.utils.calendar import today_in
from app.domain.events.models import Event
from app.domain.events.schemas import EventCreateDTO
from app.domain.events import crud
from app.domain.seating import crud as seating_crud
from app.domain.exceptions import NotFound, InvalidInput, Conflict, Unauthorized
from app.services import seat_service


def _check_admin_secret(password: str, settings: Settings) -> None:
    expected = settings.admin_password.get_secret_value()
    if not hmac.compare_digest(password.encode(), expected.encode()):
        raise Unauthorized("Invalid password", ctx={"reason": "bad_admin_secret"})


async def list_upcoming_events(db: AsyncSession, settings: Settings) -> list[Event]:
    return await crud.list_events_from(db, today_in(settings.venue_timezone))


async def get_event(db: AsyncSession, event_id: int, settings: Settings) -> Event:
    event = await crud.get_event_by_id(db, event_id)
    if not event:
        raise NotFound("Event not found", ctx={"event_id": event_id})
    if event.event_date == today_in(settings.venue_timezone):
        raise InvalidInput("Today's event cannot be viewed", ctx={"event_id": event_id})
    return event


async def create_event(db: AsyncSession, schema: EventCreateDTO, settings: Settings) -> Event:
    """
    Insert the event and its whole seat grid in the caller's transaction.
    Any failure propagates and the request session rolls both back.
    """
    async with AuditSpan(
        scope="EVENTS",
        action="CREATE",
        object_type="event",
        meta={"date": schema.date.isoformat(), "total_seats": schema.total_seats}
    ) as span:
        _check_admin_secret(schema.password, settings)

        if schema.date <= today_in(settings.venue_timezone):
            raise InvalidInput("Event date must be after today", ctx={"date": schema.date})

        if await crud.get_event_by_date(db, schema.date):
            raise Conflict("An event already exists for this date", ctx={"date": schema.date})

        password_hash = await to_thread.run_sync(hash_password, schema.password)
        event = await crud.create_event(db, {
            "name": schema.name,
            "event_date": schema.date,
            "event_time": schema.time,
            "description": schema.description,
            "venue": schema.venue,
            "password_hash": password_hash,
            "total_seats": schema.total_seats
        })
        try:
            await db.flush()
        except IntegrityError as e:
            raise Conflict("An event already exists for this date", ctx={"date": schema.date}) from e

        span.object_id = event.id
        span.event_id = event.id

        await seat_service.initialize_seats(db, event, settings.seat_price)
        await db.refresh(event)
        return event


async def delete_event(db: AsyncSession, event_id: int, password: str) -> None:
    async with AuditSpan(
        scope="EVENTS",
        action="DELETE",
        object_type="event",
        object_id=event_id,
        event_id=event_id
    ):
        event = await crud.get_event_by_id(db, event_id, for_update=True)
        if not event:
            raise NotFound("Event not found", ctx={"event_id": event_id})

        ok = await to_thread.run_sync(verify_password, password, event.password_hash)
        if not ok:
            raise Unauthorized("Invalid password", ctx={"event_id": event_id, "reason": "bad_event_password"})

        if await seating_crud.event_has_bookings(db, event.id):
            raise Conflict("Cannot delete event with existing bookings", ctx={"event_id": event_id})

        try:
            await seating_crud.delete_seats(db, event.id)
            await crud.delete_event(db, event.id)
        except IntegrityError as e:
            raise Conflict("Cannot delete event with existing bookings", ctx={"event_id": event_id}) from e
