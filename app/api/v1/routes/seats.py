from fastapi import APIRouter, status, Depends, BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated
from app.core.config import Settings
from app.core.database import get_db
from app.core.dependencies.auth import get_current_operator
from app.core.dependencies.settings import get_settings
from app.domain.auth.schemas import OperatorReadDTO
from app.domain.seating.schemas import SeatReadDTO, SeatInitializeDTO, SeatInitializeResultDTO, BookingCreateDTO, \
    BookingResultDTO
from app.services import seat_service, notification_service
from app.services.notification_service import BookingConfirmation


router = APIRouter(prefix='/api/seats', tags=['seats'])
db_dependency = Annotated[AsyncSession, Depends(get_db)]
settings_dependency = Annotated[Settings, Depends(get_settings)]


@router.post(
    "/initialize",
    status_code=status.HTTP_201_CREATED,
    response_model=SeatInitializeResultDTO
)
async def initialize_seats(schema: SeatInitializeDTO, db: db_dependency, settings: settings_dependency):
    created, total = await seat_service.initialize_seats_for_event(db, schema.event_id, schema.total_seats, settings)
    message = "Seats initialized successfully" if created else "Seats already initialized"
    return SeatInitializeResultDTO(message=message, event_id=schema.event_id, created=created, total=total)


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=list[SeatReadDTO]
)
async def list_seats(db: db_dependency, settings: settings_dependency, date: str | None = None):
    return await seat_service.list_seats_for_date(db, date, settings)


@router.get(
    "/by-ids",
    status_code=status.HTTP_200_OK,
    response_model=list[SeatReadDTO]
)
async def list_seats_by_ids(db: db_dependency, seatIds: str | None = None, date: str | None = None):
    return await seat_service.list_seats_by_codes(db, seatIds, date)


@router.post(
    "/book",
    status_code=status.HTTP_200_OK,
    response_model=BookingResultDTO
)
async def book_seat(
        schema: BookingCreateDTO,
        db: db_dependency,
        settings: settings_dependency,
        background_tasks: BackgroundTasks,
        _operator: Annotated[OperatorReadDTO, Depends(get_current_operator)]
):
    event, seat, booking = await seat_service.book_seat(db, schema, settings)
    await db.commit()

    notification = notification_service.queue_booking_confirmation(
        background_tasks,
        settings,
        BookingConfirmation(
            to=booking.email,
            name=booking.name,
            seat_code=seat.code,
            booking_date=booking.booking_date,
            price=seat.price,
            event_name=event.name,
            event_time=event.event_time,
            venue=event.venue
        )
    )
    return BookingResultDTO(
        seat=seat_service.seat_view(seat, booking),
        booking_date=booking.booking_date,
        notification=notification
    )
