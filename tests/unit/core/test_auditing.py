import json
import pytest
from app.core.auditing import AuditSpan, audit_emit
from app.core.ctx import REDIS_CTX, AUDIT_STREAM_CTX, REQUEST_ID_CTX
from app.domain.exceptions import Conflict


@pytest.fixture
def redis_stream(mocker):
    r = mocker.Mock()
    r.xadd = mocker.AsyncMock(return_value="1-0")
    tokens = [
        (REDIS_CTX, REDIS_CTX.set(r)),
        (AUDIT_STREAM_CTX, AUDIT_STREAM_CTX.set("audit:test")),
        (REQUEST_ID_CTX, REQUEST_ID_CTX.set("rid-1")),
    ]
    yield r
    for var, token in reversed(tokens):
        var.reset(token)


def sent_payload(r) -> dict:
    stream, fields = r.xadd.await_args.args
    assert stream == "audit:test"
    return json.loads(fields["json"])


@pytest.mark.asyncio
async def test_audit_emit_without_redis_is_noop():
    assert await audit_emit(scope="EVENTS", action="CREATE", status="SUCCESS") is None


@pytest.mark.asyncio
async def test_audit_emit_failure_is_logged_not_raised(redis_stream):
    redis_stream.xadd.side_effect = ConnectionError("down")

    assert await audit_emit(scope="EVENTS", action="CREATE", status="SUCCESS") is None


@pytest.mark.asyncio
async def test_audit_span_success_emits_booking_fields(redis_stream):
    async with AuditSpan(scope="BOOKING", action="BOOK_SEAT", seat_code="A1", booking_date="2025-01-10") as span:
        span.event_id = 3
        span.object_id = 42

    payload = sent_payload(redis_stream)
    assert payload["status"] == "SUCCESS"
    assert payload["request_id"] == "rid-1"
    assert (payload["event_id"], payload["object_id"], payload["seat_code"]) == (3, 42, "A1")
    assert payload["booking_date"] == "2025-01-10"
    assert "duration_ms" in payload["meta"]


@pytest.mark.asyncio
async def test_audit_span_failure_records_reason_and_reraises(redis_stream):
    with pytest.raises(Conflict):
        async with AuditSpan(scope="BOOKING", action="BOOK_SEAT"):
            raise Conflict("Seat is already booked for this date")

    payload = sent_payload(redis_stream)
    assert payload["status"] == "FAIL"
    assert payload["reason"] == "Conflict: Seat is already booked for this date"
