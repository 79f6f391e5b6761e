from datetime import date
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from .models import Event


async def get_event_by_id(db: AsyncSession, event_id: int, *, for_update: bool = False) -> Event | None:
    stmt = select(Event).where(Event.id == event_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_event_by_date(db: AsyncSession, event_date: date, *, for_share: bool = False) -> Event | None:
    stmt = select(Event).where(Event.event_date == event_date)
    if for_share:
        stmt = stmt.with_for_update(read=True)
    result = await db.execute(stmt)
    return result.scalars().first()


async def list_events_from(db: AsyncSession, first_day: date) -> list[Event]:
    stmt = select(Event).where(Event.event_date >= first_day).order_by(Event.event_date.asc(), Event.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_event(db: AsyncSession, data: dict) -> Event:
    event = Event(**data)
    db.add(event)
    return event


async def delete_event(db: AsyncSession, event_id: int) -> None:
    await db.execute(delete(Event).where(Event.id == event_id))
