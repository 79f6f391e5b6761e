import pytest
from datetime import date, time, datetime, timezone
from pydantic import ValidationError
from app.domain.events.schemas import EventCreateDTO, EventReadDTO, EventCreatedDTO
from tests.helper import make_event


test_event_payload = {
    "name": "Hamlet",
    "date": "2025-01-10",
    "time": "19:30",
    "description": "A tragedy",
    "venue": "Main Hall",
    "password": "admin-secret",
    "totalSeats": 23
}


def create_payload(**override):
    data = dict(test_event_payload)
    data.update(override)
    return data


def test_event_create_accepts_camel_case_payload():
    dto = EventCreateDTO(**create_payload(name="  Hamlet  "))

    assert dto.name == "Hamlet"
    assert dto.date == date(2025, 1, 10)
    assert dto.time == time(19, 30)
    assert dto.total_seats == 23


@pytest.mark.parametrize("total", [0, 261, "23", 2.5])
def test_event_create_total_seats_out_of_range_or_not_integer_raises(total):
    with pytest.raises(ValidationError):
        EventCreateDTO(**create_payload(totalSeats=total))


@pytest.mark.parametrize("field", ["name", "date", "time", "description", "venue", "password", "totalSeats"])
def test_event_create_missing_field_raises(field):
    data = create_payload()
    data.pop(field)
    with pytest.raises(ValidationError):
        EventCreateDTO(**data)


@pytest.mark.parametrize("field", ["name", "venue"])
def test_event_create_blank_text_raises(field):
    with pytest.raises(ValidationError):
        EventCreateDTO(**create_payload(**{field: "   "}))


def test_event_create_rejects_unknown_fields():
    with pytest.raises(ValidationError) as e:
        EventCreateDTO(**create_payload(price=100))
    assert "extra_forbidden" in str(e.value) or "Extra inputs" in str(e.value)


@pytest.mark.parametrize("override, message", [
    ({"date": "10/01/2025"}, "Invalid date format. Use YYYY-MM-DD"),
    ({"time": "7:30 PM"}, "Invalid time format. Use HH:MM")
])
def test_event_create_bad_date_or_time_raises(override, message):
    with pytest.raises(ValidationError) as e:
        EventCreateDTO(**create_payload(**override))
    assert message in str(e.value)


def test_event_read_dumps_camel_case_from_model():
    dto = EventReadDTO.model_validate(make_event())

    data = dto.model_dump(by_alias=True)
    assert data == {
        "id": 1,
        "name": "Hamlet",
        "date": "2025-01-10",
        "time": "19:30",
        "description": "A tragedy",
        "venue": "Main Hall",
        "totalSeats": 23,
        "createdAt": datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    }
    assert "password" not in str(data)


def test_event_created_has_default_message():
    dto = EventCreatedDTO(event=EventReadDTO.model_validate(make_event()))

    assert dto.message == "Event created successfully"
