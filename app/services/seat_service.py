import string
from datetime import date
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auditing import AuditSpan
from app.core.config import Settings
from app.core.utils.calendar import parse_calendar_date, today_in
from app.core.utils.validators import split_seat_codes
from app.domain import Event, Seat, SeatBooking, BookingStatus
from app.domain.events import crud as events_crud
from app.domain.events.models import MAX_TOTAL_SEATS
from app.domain.seating import crud
from app.domain.seating.schemas import SeatReadDTO, BookedByDTO, BookingCreateDTO
from app.domain.exceptions import NotFound, InvalidInput, Conflict

ROWS = string.ascii_uppercase
COLUMNS_PER_ROW = 10


def generate_seat_grid(total_seats: int, price: Decimal) -> list[dict]:
    """
    Row-major seat layout: A1..A10, B1..B10, ... until total_seats seats exist.
    Only the last row may be partially filled.
    """
    if total_seats < 1 or total_seats > MAX_TOTAL_SEATS:
        raise InvalidInput(
            f"totalSeats must be between 1 and {MAX_TOTAL_SEATS}",
            ctx={"total_seats": total_seats}
        )

    seats: list[dict] = []
    for row in ROWS:
        for column in range(1, COLUMNS_PER_ROW + 1):
            if len(seats) == total_seats:
                return seats
            seats.append({"code": f"{row}{column}", "row": row, "column": column, "price": price})
    return seats


def seat_view(seat: Seat, booking: SeatBooking | None) -> SeatReadDTO:
    return SeatReadDTO(
        seat_id=seat.code,
        event_id=seat.event_id,
        row=seat.row,
        column=seat.column,
        price=seat.price,
        status="booked" if booking else "available",
        booked_by=BookedByDTO.model_validate(booking) if booking else None
    )


def _booking_on(seat: Seat, booking_date: date) -> SeatBooking | None:
    return next((b for b in seat.bookings if b.booking_date == booking_date), None)


def _parse_date_param(raw: str | None) -> date:
    if not raw:
        raise InvalidInput("Date is required")
    try:
        return parse_calendar_date(raw)
    except ValueError as e:
        raise InvalidInput(str(e), ctx={"date": raw}) from e


async def _require_event_on(db: AsyncSession, day: date, *, for_share: bool = False) -> Event:
    event = await events_crud.get_event_by_date(db, day, for_share=for_share)
    if not event:
        raise InvalidInput("No event scheduled for this date", ctx={"date": day})
    return event


async def initialize_seats(db: AsyncSession, event: Event, price: Decimal) -> int:
    """
    Make sure the event owns exactly its declared number of seats.
    Returns the number of seats created (0 when the grid was already complete).
    """
    async with AuditSpan(
        scope="SEATS",
        action="INITIALIZE",
        object_type="event",
        object_id=event.id,
        event_id=event.id,
        meta={"total_seats": event.total_seats}
    ) as span:
        existing = await crud.count_seats(db, event.id)
        if existing >= event.total_seats:
            span.meta["skipped"] = True
            return 0

        if existing:
            if await crud.event_has_bookings(db, event.id):
                raise Conflict(
                    "Cannot regenerate seats of an event with existing bookings",
                    ctx={"event_id": event.id, "existing": existing}
                )
            await crud.delete_seats(db, event.id)

        grid = generate_seat_grid(event.total_seats, price)
        try:
            await crud.bulk_add_seats(db, event.id, grid)
        except IntegrityError as e:
            raise Conflict("Seat grid conflict", ctx={"event_id": event.id}) from e

        span.meta["created"] = len(grid)
        return len(grid)


async def initialize_seats_for_event(
        db: AsyncSession,
        event_id: int,
        total_seats: int | None,
        settings: Settings
) -> tuple[int, int]:
    event = await events_crud.get_event_by_id(db, event_id, for_update=True)
    if not event:
        raise NotFound("Event not found", ctx={"event_id": event_id})
    if total_seats is not None and total_seats != event.total_seats:
        raise InvalidInput(
            "totalSeats does not match the event capacity",
            ctx={"event_id": event_id, "total_seats": total_seats, "capacity": event.total_seats}
        )
    created = await initialize_seats(db, event, settings.seat_price)
    return created, event.total_seats


async def list_seats_for_date(db: AsyncSession, raw_date: str | None, settings: Settings) -> list[SeatReadDTO]:
    day = _parse_date_param(raw_date)
    if day == today_in(settings.venue_timezone):
        raise InvalidInput("Seats for today's event are not available", ctx={"date": day})

    event = await _require_event_on(db, day)
    seats = await crud.list_seats(db, event.id)
    return [seat_view(seat, _booking_on(seat, day)) for seat in seats]


async def list_seats_by_codes(db: AsyncSession, raw_codes: str | None, raw_date: str | None) -> list[SeatReadDTO]:
    if not raw_codes:
        raise InvalidInput("seatIds is required")
    try:
        codes = split_seat_codes(raw_codes)
    except ValueError as e:
        raise InvalidInput(str(e), ctx={"seat_ids": raw_codes}) from e
    day = _parse_date_param(raw_date)

    event = await _require_event_on(db, day)
    seats = {seat.code: seat for seat in await crud.list_seats(db, event.id, codes)}
    missing = [code for code in codes if code not in seats]
    if missing:
        raise NotFound("One or more seats not found", ctx={"missing": missing, "event_id": event.id})

    return [seat_view(seats[code], _booking_on(seats[code], day)) for code in codes]


async def book_seat(
        db: AsyncSession,
        schema: BookingCreateDTO,
        settings: Settings
) -> tuple[Event, Seat, SeatBooking]:
    """
    Book one seat for one date.
    - The event row is share-locked so it cannot be deleted mid-booking
    - The seat row is locked FOR UPDATE, serializing bookings of the same seat
    - UNIQUE(seat_id, booking_date) turns any remaining race into a Conflict
    """
    day = schema.booking_date
    async with AuditSpan(
        scope="BOOKING",
        action="BOOK_SEAT",
        object_type="seat_booking",
        seat_code=schema.seat_id,
        booking_date=day.isoformat()
    ) as span:
        if day <= today_in(settings.venue_timezone):
            raise InvalidInput("Bookings are only accepted for future dates", ctx={"booking_date": day})

        event = await _require_event_on(db, day, for_share=True)
        if schema.event_id is not None and schema.event_id != event.id:
            raise InvalidInput(
                "Event does not match booking date",
                ctx={"event_id": schema.event_id, "booking_date": day}
            )
        span.event_id = event.id

        seat = await crud.get_seat_for_update(db, event.id, schema.seat_id)
        if not seat:
            raise NotFound("Seat not found", ctx={"seat_id": schema.seat_id, "event_id": event.id})

        if await crud.get_booking(db, seat.id, day):
            raise Conflict("Seat is already booked for this date", ctx={"seat_id": seat.code, "booking_date": day})

        booking = await crud.create_booking(db, {
            "seat_id": seat.id,
            "event_id": event.id,
            "booking_date": day,
            "name": schema.name,
            "email": schema.email,
            "phone": schema.phone,
            "status": BookingStatus.BOOKED
        })
        try:
            await db.flush()
        except IntegrityError as e:
            raise Conflict(
                "Seat is already booked for this date",
                ctx={"seat_id": seat.code, "booking_date": day}
            ) from e

        span.object_id = booking.id
        return event, seat, booking
