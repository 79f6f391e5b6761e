from fastapi import Depends, Request
from typing import Annotated
from jose import JWTError
from pydantic import ValidationError
from app.core.config import Settings
from app.core.ctx import AUTH_SUBJECT_CTX
from app.core.dependencies.settings import get_settings
from app.core.security import decode_access_token
from app.domain.auth.schemas import TokenPayload, OperatorAccount, OperatorReadDTO
from app.domain.exceptions import Unauthorized


def get_operator_account(request: Request) -> OperatorAccount:
    return request.app.state.operator


def get_token(request: Request, settings: Annotated[Settings, Depends(get_settings)]) -> str:
    token = request.cookies.get(settings.cookie_name)
    if not token:
        scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() == "bearer" and credentials:
            token = credentials.strip()
    if not token:
        raise Unauthorized("Authentication required", ctx={"reason": "missing_token"})
    return token


async def get_token_payload(
        token: Annotated[str, Depends(get_token)],
        settings: Annotated[Settings, Depends(get_settings)]
) -> TokenPayload:
    try:
        raw_payload = decode_access_token(token, settings)
        if raw_payload.get("typ") != "access":
            raise Unauthorized("Invalid token type", ctx={"reason": "invalid_type"})
        return TokenPayload.model_validate(raw_payload)
    except (JWTError, ValidationError):
        raise Unauthorized("Invalid authentication credentials", ctx={"reason": "invalid_token"})


async def get_current_operator(
        payload: Annotated[TokenPayload, Depends(get_token_payload)],
        operator: Annotated[OperatorAccount, Depends(get_operator_account)]
) -> OperatorReadDTO:
    if payload.sub != operator.email:
        raise Unauthorized("Operator not found", ctx={"reason": "unknown_subject"})
    AUTH_SUBJECT_CTX.set(payload.sub)
    return OperatorReadDTO(email=operator.email)
