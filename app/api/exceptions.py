import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.domain.exceptions import AppError, NotFound, Conflict, Unauthorized, InvalidInput
from app.core.ctx import get_request_id

logger = logging.getLogger("app.errors")

MEDIA_TYPE = "application/problem+json"

# Most specific class first; lookup walks the MRO of the raised error.
_PROBLEMS: dict[type[AppError], tuple[int, str]] = {
    NotFound: (status.HTTP_404_NOT_FOUND, "Not Found"),
    Unauthorized: (status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    Conflict: (status.HTTP_409_CONFLICT, "Conflict"),
    InvalidInput: (status.HTTP_400_BAD_REQUEST, "Bad Request"),
    AppError: (status.HTTP_400_BAD_REQUEST, "Application Error"),
}

_SKIPPED_LOC_PARTS = ("body", "query", "path", "header", "cookie")


def _problem_for(exc: AppError) -> tuple[int, str]:
    return next(
        (_PROBLEMS[cls] for cls in type(exc).mro() if cls in _PROBLEMS),
        (status.HTTP_400_BAD_REQUEST, "Application Error")
    )


def _bearer_challenge(description: str | None) -> str:
    challenge = 'Bearer realm="seat-booking", error="invalid_token"'
    if description:
        challenge += f', error_description="{description}"'
    return challenge


def _validation_message(errors: list[dict]) -> str:
    """First error only, e.g. 'bookingDate is required' or 'seatId: Invalid seat code'."""
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in _SKIPPED_LOC_PARTS)
    if first.get("type") == "missing" or (first.get("type") == "string_type" and first.get("input", "") is None):
        return f"{field or 'field'} is required"
    msg = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


def _problem(
    request: Request,
    *,
    http_status: int,
    title: str,
    detail: str | None = None,
    context: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = {
        "status": http_status,
        "title": title,
        "detail": detail,
        "error": detail,
        "instance": str(request.url),
    }
    if trace_id := get_request_id():
        body["trace_id"] = trace_id
    if context:
        body["context"] = context
    return JSONResponse(status_code=http_status, content=body, media_type=MEDIA_TYPE, headers=headers)


def register_error_handler(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError):
        http_status, title = _problem_for(exc)
        detail = str(exc) or None
        headers = {"WWW-Authenticate": _bearer_challenge(detail)} if isinstance(exc, Unauthorized) else None
        return _problem(
            request,
            http_status=http_status,
            title=title,
            detail=detail,
            context=exc.ctx or None,
            headers=headers
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ]
        return _problem(
            request,
            http_status=status.HTTP_400_BAD_REQUEST,
            title="Bad Request",
            detail=_validation_message(exc.errors()),
            context={"errors": errors}
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _problem(
            request,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            title="Internal Server Error",
            detail="Internal server error"
        )
