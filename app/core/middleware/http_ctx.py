from contextvars import ContextVar
from typing import Any
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.ctx import ROUTE_CTX, CLIENT_IP_CTX, REDIS_CTX, AUDIT_STREAM_CTX, AUTH_SUBJECT_CTX


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _request_context(request: Request) -> list[tuple[ContextVar, Any]]:
    values: list[tuple[ContextVar, Any]] = [
        (ROUTE_CTX, f"{request.method} {request.url.path}"),
        (CLIENT_IP_CTX, _client_ip(request)),
        (AUTH_SUBJECT_CTX, None),
    ]
    redis_client = getattr(request.app.state, "redis", None)
    if redis_client is not None:
        values.append((REDIS_CTX, redis_client))
        values.append((AUDIT_STREAM_CTX, request.app.state.settings.audit_stream))
    return values


class HttpContextMiddleware(BaseHTTPMiddleware):
    """Exposes per-request values (route, client ip, audit sink) to services via contextvars."""

    async def dispatch(self, request: Request, call_next):
        tokens = [(var, var.set(value)) for var, value in _request_context(request)]
        try:
            return await call_next(request)
        finally:
            for var, token in reversed(tokens):
                var.reset(token)
