from pydantic import BaseModel, Field, ConfigDict, field_validator, AliasChoices
from pydantic.alias_generators import to_camel
from datetime import datetime
from app.core.utils.calendar import CalendarDate, ClockTime
from app.core.utils.validators import strip_text
from app.domain.events.models import MAX_TOTAL_SEATS


class EventCreateDTO(BaseModel):
    model_config = ConfigDict(extra='forbid', alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    date: CalendarDate
    time: ClockTime
    description: str = Field(min_length=1, max_length=2000)
    venue: str = Field(min_length=1, max_length=500)
    password: str = Field(min_length=1)
    total_seats: int = Field(gt=0, le=MAX_TOTAL_SEATS, strict=True)

    _strip_name = field_validator("name", "description", "venue", mode="before")(strip_text)


class EventReadDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    date: CalendarDate = Field(validation_alias=AliasChoices("event_date", "date"))
    time: ClockTime = Field(validation_alias=AliasChoices("event_time", "time"))
    description: str
    venue: str
    total_seats: int
    created_at: datetime


class EventCreatedDTO(BaseModel):
    message: str = "Event created successfully"
    event: EventReadDTO


class EventDeleteDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    password: str = Field(min_length=1)


class MessageDTO(BaseModel):
    message: str
