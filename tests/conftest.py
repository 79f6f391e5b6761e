import pytest
import importlib


AUDITED_SERVICES = [
    "app.services.auth_service",
    "app.services.event_service",
    "app.services.seat_service"
]


class _RecordingSpan:
    """Stands in for AuditSpan: keeps the fields a service sets, emits nothing."""

    def __init__(self, *, scope: str, action: str, meta: dict | None = None, **fields):
        self.scope = scope
        self.action = action
        self.meta = dict(meta or {})
        self.object_type = fields.get("object_type")
        self.object_id = fields.get("object_id")
        self.event_id = fields.get("event_id")
        self.seat_code = fields.get("seat_code")
        self.booking_date = fields.get("booking_date")
        self.error = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.error = exc
        return False


@pytest.fixture(autouse=True)
def auditspan_stub(mocker):
    spans = []

    def factory(**kwargs):
        span = _RecordingSpan(**kwargs)
        spans.append(span)
        return span

    for module in AUDITED_SERVICES:
        importlib.import_module(module)
        mocker.patch(f"{module}.AuditSpan", side_effect=factory)

    return spans
