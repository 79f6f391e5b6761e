from datetime import date
from typing import Iterable
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects.postgresql import insert
from app.domain import Seat, SeatBooking


async def count_seats(db: AsyncSession, event_id: int) -> int:
    total = await db.scalar(select(func.count(Seat.id)).where(Seat.event_id == event_id))
    return int(total or 0)


async def event_has_bookings(db: AsyncSession, event_id: int) -> bool:
    return bool(await db.scalar(
        select(select(1).select_from(SeatBooking).where(SeatBooking.event_id == event_id).exists())
    ))


async def list_seats(db: AsyncSession, event_id: int, codes: Iterable[str] | None = None) -> list[Seat]:
    stmt = select(Seat).where(Seat.event_id == event_id).order_by(Seat.row, Seat.column)
    if codes is not None:
        stmt = stmt.where(Seat.code.in_(list(codes)))
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_seat_for_update(db: AsyncSession, event_id: int, code: str) -> Seat | None:
    stmt = select(Seat).where(Seat.event_id == event_id, Seat.code == code).with_for_update()
    return await db.scalar(stmt)


async def get_booking(db: AsyncSession, seat_id: int, booking_date: date) -> SeatBooking | None:
    stmt = select(SeatBooking).where(SeatBooking.seat_id == seat_id, SeatBooking.booking_date == booking_date)
    return await db.scalar(stmt)


async def bulk_add_seats(db: AsyncSession, event_id: int, data: list[dict]) -> None:
    stmt = insert(Seat).values([{"event_id": event_id, **d} for d in data]).on_conflict_do_nothing(
        constraint="uq_seat_event_code"
    )
    await db.execute(stmt)


async def delete_seats(db: AsyncSession, event_id: int) -> None:
    await db.execute(delete(Seat).where(Seat.event_id == event_id))


async def create_booking(db: AsyncSession, data: dict) -> SeatBooking:
    booking = SeatBooking(**data)
    db.add(booking)
    return booking
