import json
import logging
import time
from datetime import timezone, datetime
from typing import Any, Mapping
from sqlalchemy.exc import IntegrityError
from app.core.ctx import get_redis, get_request_id, get_route, get_actor, get_client_ip, get_audit_stream
from app.domain.exceptions import AppError

logger = logging.getLogger("app.audit")

SUCCESS = "SUCCESS"
FAIL = "FAIL"


async def audit_emit(
    *,
    scope: str,
    action: str,
    status: str,
    object_type: str | None = None,
    object_id: int | None = None,
    event_id: int | None = None,
    seat_code: str | None = None,
    booking_date: str | None = None,
    reason: str | None = None,
    meta: Mapping[str, Any] | None = None
) -> str | None:
    """
    Push one audit record onto the Redis stream read by app.workers.audit_worker.
    Auditing never breaks a request: without Redis this is a no-op and
    publish errors are only logged.
    """
    r = get_redis()
    stream = get_audit_stream()
    if not r or not stream:
        return None

    record = {
        "request_id": get_request_id(),
        "route": get_route(),
        "actor": get_actor(),
        "actor_ip": get_client_ip(),
        "scope": scope,
        "action": action,
        "status": status,
        "object_type": object_type,
        "object_id": object_id,
        "event_id": event_id,
        "seat_code": seat_code,
        "booking_date": booking_date,
        "reason": reason,
        "meta": dict(meta or {}),
    }
    try:
        return await r.xadd(stream, {"json": json.dumps(record, default=str)})
    except Exception:
        logger.warning("Audit emit failed scope=%s action=%s", scope, action, exc_info=True)
        return None


def _failure_reason(exc: BaseException | None) -> str | None:
    if exc is None:
        return None
    if isinstance(exc, AppError):
        return f"{type(exc).__name__}: {exc}"
    if isinstance(exc, IntegrityError):
        return "Integrity error"
    return str(exc)


class AuditSpan:
    """
    async with AuditSpan(scope="BOOKING", action="BOOK_SEAT", seat_code="A1") as span:
        span.event_id = event.id

    Attributes may be filled in while the block runs; one record is emitted on exit,
    FAIL with the exception as reason when the block raised.
    """

    def __init__(self, *, scope: str, action: str,
                 object_type: str | None = None, object_id: int | None = None,
                 event_id: int | None = None, seat_code: str | None = None,
                 booking_date: str | None = None, meta: Mapping[str, Any] | None = None):
        self.scope = scope
        self.action = action
        self.object_type = object_type
        self.object_id = object_id
        self.event_id = event_id
        self.seat_code = seat_code
        self.booking_date = booking_date
        self.meta = dict(meta or {})
        self._started = 0.0

    async def __aenter__(self):
        self._started = time.perf_counter()
        now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        self.meta.setdefault("occurred_at", now.replace("+00:00", "Z"))
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.meta["duration_ms"] = int((time.perf_counter() - self._started) * 1000)
        reason = _failure_reason(exc)
        if reason:
            logger.info("%s %s failed: %s", self.scope, self.action, reason)
        await audit_emit(
            scope=self.scope,
            action=self.action,
            status=FAIL if exc else SUCCESS,
            object_type=self.object_type,
            object_id=self.object_id,
            event_id=self.event_id,
            seat_code=self.seat_code,
            booking_date=self.booking_date,
            reason=reason,
            meta=self.meta
        )
        return False
