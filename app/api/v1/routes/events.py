from fastapi import APIRouter, status, Depends, Response
from typing import Annotated
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import Settings
from app.core.database import get_db
from app.core.dependencies.settings import get_settings
from app.domain.events.schemas import EventCreateDTO, EventReadDTO, EventCreatedDTO, EventDeleteDTO, MessageDTO
from app.services import event_service


router = APIRouter(prefix="/api/events", tags=["events"])
db_dependency = Annotated[AsyncSession, Depends(get_db)]
settings_dependency = Annotated[Settings, Depends(get_settings)]


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=list[EventReadDTO]
)
async def list_events(db: db_dependency, settings: settings_dependency):
    events = await event_service.list_upcoming_events(db, settings)
    return [EventReadDTO.model_validate(e) for e in events]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=EventCreatedDTO
)
async def create_event(schema: EventCreateDTO, db: db_dependency, settings: settings_dependency, response: Response):
    event = await event_service.create_event(db, schema, settings)
    response.headers["Location"] = f"/api/events/{event.id}"
    return EventCreatedDTO(event=EventReadDTO.model_validate(event))


@router.get(
    "/{event_id}",
    status_code=status.HTTP_200_OK,
    response_model=EventReadDTO
)
async def get_event(event_id: int, db: db_dependency, settings: settings_dependency):
    event = await event_service.get_event(db, event_id, settings)
    return EventReadDTO.model_validate(event)


@router.delete(
    "/{event_id}",
    status_code=status.HTTP_200_OK,
    response_model=MessageDTO
)
async def delete_event(event_id: int, schema: EventDeleteDTO, db: db_dependency):
    await event_service.delete_event(db, event_id, schema.password)
    return MessageDTO(message="Event deleted successfully")
