import pytest
import time_machine
from datetime import date
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from app.services import event_service
from app.domain.events.schemas import EventCreateDTO
from app.domain.exceptions import NotFound, Conflict, InvalidInput, Unauthorized
from tests.helper import make_settings, make_event


TODAY = "2025-01-05 12:00:00"


def create_payload(**override):
    data = {
        "name": "Hamlet",
        "date": "2025-01-10",
        "time": "19:30",
        "description": "A tragedy",
        "venue": "Main Hall",
        "password": "admin-secret",
        "total_seats": 23
    }
    data.update(override)
    return EventCreateDTO(**data)


@pytest.mark.asyncio
async def test_create_event_with_wrong_admin_password_raises_unauthorized(mocker):
    lookup_spy = mocker.patch("app.domain.events.crud.get_event_by_date", new=mocker.AsyncMock())

    with pytest.raises(Unauthorized) as e:
        await event_service.create_event(mocker.Mock(), create_payload(password="nope"), make_settings())

    assert e.value.ctx["reason"] == "bad_admin_secret"
    lookup_spy.assert_not_awaited()


@time_machine.travel(TODAY, tick=False)
@pytest.mark.asyncio
@pytest.mark.parametrize("day", ["2025-01-05", "2024-12-31"])
async def test_create_event_not_after_today_raises_invalid_input(mocker, day):
    with pytest.raises(InvalidInput) as e:
        await event_service.create_event(mocker.Mock(), create_payload(date=day), make_settings())

    assert str(e.value) == "Event date must be after today"


@time_machine.travel(TODAY, tick=False)
@pytest.mark.asyncio
async def test_create_event_when_date_taken_raises_conflict(mocker):
    mocker.patch("app.domain.events.crud.get_event_by_date", new=mocker.AsyncMock(return_value=make_event()))
    create_spy = mocker.patch("app.domain.events.crud.create_event", new=mocker.AsyncMock())

    with pytest.raises(Conflict) as e:
        await event_service.create_event(mocker.Mock(), create_payload(), make_settings())

    assert str(e.value) == "An event already exists for this date"
    create_spy.assert_not_awaited()


@time_machine.travel(TODAY, tick=False)
@pytest.mark.asyncio
async def test_create_event_when_insert_races_raises_conflict(mocker):
    mocker.patch("app.domain.events.crud.get_event_by_date", new=mocker.AsyncMock(return_value=None))
    mocker.patch("app.services.event_service.hash_password", return_value="hashed")
    mocker.patch("app.domain.events.crud.create_event", new=mocker.AsyncMock(return_value=make_event()))
    init_spy = mocker.patch("app.services.seat_service.initialize_seats", new=mocker.AsyncMock())
    db = mocker.Mock()
    db.flush = mocker.AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("duplicate key")))

    with pytest.raises(Conflict):
        await event_service.create_event(db, create_payload(), make_settings())

    init_spy.assert_not_awaited()


@time_machine.travel(TODAY, tick=False)
@pytest.mark.asyncio
async def test_create_event_stores_hash_and_generates_seats(mocker, auditspan_stub):
    event = make_event(id=3)
    mocker.patch("app.domain.events.crud.get_event_by_date", new=mocker.AsyncMock(return_value=None))
    mocker.patch("app.services.event_service.hash_password", return_value="hashed")
    create_spy = mocker.patch("app.domain.events.crud.create_event", new=mocker.AsyncMock(return_value=event))
    init_spy = mocker.patch("app.services.seat_service.initialize_seats", new=mocker.AsyncMock(return_value=23))
    db = mocker.Mock()
    db.flush = mocker.AsyncMock()
    db.refresh = mocker.AsyncMock()

    result = await event_service.create_event(db, create_payload(), make_settings())

    assert result is event
    data = create_spy.await_args.args[1]
    assert data["password_hash"] == "hashed"
    assert data["event_date"] == date(2025, 1, 10)
    assert data["total_seats"] == 23
    init_spy.assert_awaited_once_with(db, event, Decimal("300"))
    db.refresh.assert_awaited_once_with(event)
    assert auditspan_stub[0].object_id == 3


@time_machine.travel(TODAY, tick=False)
@pytest.mark.asyncio
async def test_list_upcoming_events_starts_from_today(mocker):
    list_spy = mocker.patch("app.domain.events.crud.list_events_from", new=mocker.AsyncMock(return_value=[]))
    db = mocker.Mock()

    await event_service.list_upcoming_events(db, make_settings())

    list_spy.assert_awaited_once_with(db, date(2025, 1, 5))


@pytest.mark.asyncio
async def test_get_event_when_missing_raises_not_found(mocker):
    mocker.patch("app.domain.events.crud.get_event_by_id", new=mocker.AsyncMock(return_value=None))

    with pytest.raises(NotFound):
        await event_service.get_event(mocker.Mock(), 1, make_settings())


@time_machine.travel(TODAY, tick=False)
@pytest.mark.asyncio
async def test_get_event_for_today_raises_invalid_input(mocker):
    event = make_event(event_date=date(2025, 1, 5))
    mocker.patch("app.domain.events.crud.get_event_by_id", new=mocker.AsyncMock(return_value=event))

    with pytest.raises(InvalidInput) as e:
        await event_service.get_event(mocker.Mock(), 1, make_settings())

    assert str(e.value) == "Today's event cannot be viewed"


@time_machine.travel(TODAY, tick=False)
@pytest.mark.asyncio
async def test_get_event_returns_future_event(mocker):
    event = make_event()
    mocker.patch("app.domain.events.crud.get_event_by_id", new=mocker.AsyncMock(return_value=event))

    assert await event_service.get_event(mocker.Mock(), 1, make_settings()) is event


@pytest.mark.asyncio
async def test_delete_event_when_missing_raises_not_found(mocker):
    mocker.patch("app.domain.events.crud.get_event_by_id", new=mocker.AsyncMock(return_value=None))

    with pytest.raises(NotFound):
        await event_service.delete_event(mocker.Mock(), 1, "secret")


@pytest.mark.asyncio
async def test_delete_event_with_wrong_password_raises_unauthorized(mocker):
    mocker.patch("app.domain.events.crud.get_event_by_id", new=mocker.AsyncMock(return_value=make_event()))
    mocker.patch("app.services.event_service.verify_password", return_value=False)
    delete_spy = mocker.patch("app.domain.events.crud.delete_event", new=mocker.AsyncMock())

    with pytest.raises(Unauthorized):
        await event_service.delete_event(mocker.Mock(), 1, "wrong")

    delete_spy.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_event_with_bookings_raises_conflict(mocker):
    mocker.patch("app.domain.events.crud.get_event_by_id", new=mocker.AsyncMock(return_value=make_event()))
    mocker.patch("app.services.event_service.verify_password", return_value=True)
    mocker.patch("app.domain.seating.crud.event_has_bookings", new=mocker.AsyncMock(return_value=True))
    seats_spy = mocker.patch("app.domain.seating.crud.delete_seats", new=mocker.AsyncMock())
    delete_spy = mocker.patch("app.domain.events.crud.delete_event", new=mocker.AsyncMock())

    with pytest.raises(Conflict) as e:
        await event_service.delete_event(mocker.Mock(), 1, "secret")

    assert str(e.value) == "Cannot delete event with existing bookings"
    seats_spy.assert_not_awaited()
    delete_spy.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_event_removes_seats_and_event(mocker):
    mocker.patch("app.domain.events.crud.get_event_by_id", new=mocker.AsyncMock(return_value=make_event()))
    mocker.patch("app.services.event_service.verify_password", return_value=True)
    mocker.patch("app.domain.seating.crud.event_has_bookings", new=mocker.AsyncMock(return_value=False))
    seats_spy = mocker.patch("app.domain.seating.crud.delete_seats", new=mocker.AsyncMock())
    delete_spy = mocker.patch("app.domain.events.crud.delete_event", new=mocker.AsyncMock())
    db = mocker.Mock()

    await event_service.delete_event(db, 1, "secret")

    seats_spy.assert_awaited_once_with(db, 1)
    delete_spy.assert_awaited_once_with(db, 1)
