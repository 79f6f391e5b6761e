from decimal import Decimal
from typing import Annotated, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator, PlainSerializer, EmailStr
from pydantic.alias_generators import to_camel
from app.core.utils.calendar import CalendarDate
from app.core.utils.validators import strip_text, check_seat_code, check_phone
from app.domain.events.models import MAX_TOTAL_SEATS

Price = Annotated[Decimal, PlainSerializer(float, return_type=float)]
SeatStatus = Literal["booked", "available"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SeatInitializeDTO(_CamelModel):
    model_config = ConfigDict(extra='forbid', alias_generator=to_camel, populate_by_name=True)

    event_id: int = Field(gt=0)
    total_seats: int | None = Field(default=None, gt=0, le=MAX_TOTAL_SEATS, strict=True)


class SeatInitializeResultDTO(_CamelModel):
    message: str
    event_id: int
    created: int
    total: int


class BookedByDTO(_CamelModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    email: str
    phone: str


class SeatReadDTO(_CamelModel):
    seat_id: str
    event_id: int
    row: str
    column: int
    price: Price
    status: SeatStatus
    booked_by: BookedByDTO | None = None


class BookingCreateDTO(_CamelModel):
    model_config = ConfigDict(extra='forbid', alias_generator=to_camel, populate_by_name=True)

    seat_id: str
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=20)
    booking_date: CalendarDate
    event_id: int | None = None

    _strip = field_validator("seat_id", "name", "email", "phone", mode="before")(strip_text)
    _seat_code = field_validator("seat_id")(check_seat_code)
    _phone = field_validator("phone")(check_phone)


class BookingResultDTO(_CamelModel):
    message: str = "Seat booked successfully"
    seat: SeatReadDTO
    booking_date: CalendarDate
    notification: Literal["queued", "disabled"]
